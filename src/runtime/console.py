"""Line-oriented console for the primary surface."""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
import sys
from typing import Any, Callable, Optional, TextIO

from mirror import MirrorSyncChannel
from presets import PresetCatalog
from session import AmbientSnapshot, SessionSnapshot
from session.constants import (
    ACTION_EXPIRED,
    ACTION_RESET,
    ACTION_SKIP,
    ACTION_START,
    ACTION_STOP,
    ACTION_SWITCH_MODE,
    ACTION_TICK,
    MODE_FOCUS,
    MODE_LONG_BREAK,
    MODE_SHORT_BREAK,
    RUN_MODE_AMBIENT,
    RUN_MODE_FOCUS,
    RUN_MODES,
)
from session.messages import format_duration, session_status_message

from .page import TimerPage

HELP_TEXT = (
    "Commands: start, stop, reset, skip, focus, short, long, "
    "mode home|focus|ambient, mirror, preset <id>, presets, status, quit"
)

_SESSION_ACTIONS = {
    "start": ACTION_START,
    "stop": ACTION_STOP,
    "reset": ACTION_RESET,
    "skip": ACTION_SKIP,
}

_MODE_SHORTCUTS = {
    "focus": MODE_FOCUS,
    "short": MODE_SHORT_BREAK,
    "long": MODE_LONG_BREAK,
}


def attach_line_reader(
    loop: asyncio.AbstractEventLoop,
    queue: asyncio.Queue[Optional[str]],
    logger: logging.Logger,
    stream: TextIO = sys.stdin,
) -> bool:
    """Feed lines from ``stream`` into ``queue``; ``None`` marks end of input."""

    def on_readable() -> None:
        line = stream.readline()
        if not line:
            loop.remove_reader(stream.fileno())
            queue.put_nowait(None)
            return
        queue.put_nowait(line)

    try:
        loop.add_reader(stream.fileno(), on_readable)
    except (NotImplementedError, OSError, ValueError) as error:
        logger.info("Line input unavailable: %s", error)
        return False
    return True


class TimerConsole:
    """Reads commands, drives the ``TimerPage``, and prints status changes."""

    def __init__(
        self,
        catalog: PresetCatalog,
        channel: MirrorSyncChannel,
        *,
        output: TextIO = sys.stdout,
        now_fn: Optional[Callable[[], dt.datetime]] = None,
        logger: Optional[logging.Logger] = None,
        **page_options: Any,
    ):
        self._catalog = catalog
        self._output = output
        self._now_fn = now_fn or dt.datetime.now
        self._logger = logger or logging.getLogger("runtime")
        self._ambient_running = False
        self.page = TimerPage(
            catalog,
            channel,
            notify=self.notify,
            on_session_change=self._on_session_change,
            on_ambient_change=self._on_ambient_change,
            logger=self._logger,
            **page_options,
        )

    def notify(self, message: str) -> None:
        self._write(message)

    def status_text(self) -> str:
        page = self.page
        if page.focus is not None:
            snapshot = page.focus.machine.snapshot()
            text = self._session_line(snapshot)
            if page.focus.mirror_active:
                text += " [mirror]"
            return text
        if page.ambient is not None:
            return self._ambient_line(page.ambient.snapshot())
        return f"Home {self._now_fn():%H:%M} | preset: {self._catalog.active.name}"

    async def run(self, lines: asyncio.Queue[Optional[str]]) -> None:
        self._write(HELP_TEXT)
        self._write(self.status_text())
        while True:
            line = await lines.get()
            if line is None:
                return
            if not await self.handle_command(line):
                return

    async def handle_command(self, line: str) -> bool:
        """Execute one command line. Returns False when the console should exit."""
        parts = line.split()
        if not parts:
            return True
        command, args = parts[0].lower(), parts[1:]

        if command in ("quit", "exit", "q"):
            return False
        if command == "help":
            self._write(HELP_TEXT)
        elif command == "status":
            self._write(self.status_text())
        elif command == "mode":
            self._set_run_mode(args)
        elif command == "presets":
            self._list_presets()
        elif command == "preset":
            self._select_preset(args)
        elif command == "mirror":
            await self._toggle_mirror()
        elif command in _SESSION_ACTIONS:
            self._session_action(command)
        elif command in _MODE_SHORTCUTS:
            self._switch_session_mode(_MODE_SHORTCUTS[command])
        else:
            self._write(f"Unknown command: {command}. {HELP_TEXT}")
        return True

    def _set_run_mode(self, args: list[str]) -> None:
        if len(args) != 1 or args[0] not in RUN_MODES:
            self._write(f"Usage: mode {'|'.join(RUN_MODES)}")
            return
        self._ambient_running = False
        self.page.set_run_mode(args[0])
        self._write(self.status_text())

    def _list_presets(self) -> None:
        for preset in self._catalog.presets:
            marker = "*" if preset.id == self._catalog.selected_id else " "
            self._write(f"{marker} {preset.id}: {preset.name} ({preset.kind})")

    def _select_preset(self, args: list[str]) -> None:
        if len(args) != 1:
            self._write("Usage: preset <id>")
            return
        if self._catalog.get(args[0]) is None:
            self._write(f"Unknown preset: {args[0]}")
            return
        preset = self._catalog.select(args[0])
        self._write(f"Preset: {preset.name}")
        self.page.preset_changed()

    async def _toggle_mirror(self) -> None:
        focus = self.page.focus
        if focus is None:
            self._write("The mirror is only available in focus mode.")
            return
        active = await focus.toggle_mirror()
        self._write("Mirror opened." if active else "Mirror closed.")

    def _session_action(self, command: str) -> None:
        page = self.page
        if page.focus is not None:
            result = page.focus.machine.apply(_SESSION_ACTIONS[command])
            if not result.accepted:
                self._write(f"{command}: {result.reason.replace('_', ' ')}")
            return
        if page.ambient is not None and command != "skip":
            getattr(page.ambient, command)()
            return
        self._write(f"'{command}' needs {RUN_MODE_FOCUS} or {RUN_MODE_AMBIENT} mode.")

    def _switch_session_mode(self, mode: str) -> None:
        focus = self.page.focus
        if focus is None:
            self._write("Switch to focus mode first.")
            return
        focus.machine.apply(ACTION_SWITCH_MODE, mode=mode)

    def _on_session_change(self, snapshot: SessionSnapshot, action: str) -> None:
        if action == ACTION_TICK:
            return
        prefix = "Time is up. " if action == ACTION_EXPIRED else ""
        self._write(prefix + self._session_line(snapshot))

    def _on_ambient_change(self, snapshot: AmbientSnapshot) -> None:
        was_running, self._ambient_running = self._ambient_running, snapshot.running
        if snapshot.running and was_running:
            return
        self._write(self._ambient_line(snapshot))

    def _session_line(self, snapshot: SessionSnapshot) -> str:
        seconds = snapshot.seconds_elapsed if snapshot.counts_up else snapshot.seconds_remaining
        return session_status_message(
            snapshot.mode,
            snapshot.running,
            seconds,
            completed=snapshot.completed_focus_sessions,
        )

    def _ambient_line(self, snapshot: AmbientSnapshot) -> str:
        state = "running" if snapshot.running else "paused"
        return f"Ambient {format_duration(snapshot.seconds_remaining)} {state}"

    def _write(self, text: str) -> None:
        self._output.write(text + "\n")
        self._output.flush()
