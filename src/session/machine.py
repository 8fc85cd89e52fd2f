"""Focus/break session state machine driven by ticks and user actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional, Protocol

from presets import Preset

from .constants import (
    ACTION_EXPIRED,
    ACTION_PRESET_CHANGED,
    ACTION_RESET,
    ACTION_SKIP,
    ACTION_START,
    ACTION_STOP,
    ACTION_SWITCH_MODE,
    ACTION_TICK,
    MODE_FOCUS,
    MODE_LONG_BREAK,
    MODE_SHORT_BREAK,
    REASON_ALREADY_RUNNING,
    REASON_INVALID_MODE,
    REASON_NOT_RUNNING,
    REASON_RESET,
    REASON_SKIPPED,
    REASON_STARTED,
    REASON_STOPPED,
    REASON_SWITCHED,
    REASON_UNSUPPORTED_ACTION,
    SESSION_MODES,
)

SessionMode = Literal["focus", "short-break", "long-break"]
SessionAction = Literal["start", "stop", "reset", "skip", "switch_mode"]


class PresetSource(Protocol):
    @property
    def active(self) -> Preset:
        ...


class ClockLike(Protocol):
    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...


def duration_seconds(mode: str, preset: Preset) -> int:
    """Full length of ``mode`` under ``preset``, in seconds."""
    if mode == MODE_SHORT_BREAK:
        return preset.short_break_minutes * 60
    if mode == MODE_LONG_BREAK:
        return preset.long_break_minutes * 60
    return preset.focus_minutes * 60


@dataclass
class SessionState:
    """The single live, mutable session of a primary surface."""
    mode: SessionMode = MODE_FOCUS
    running: bool = False
    seconds_remaining: int = 0
    completed_focus_sessions: int = 0
    seconds_elapsed: int = 0


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable session view handed to listeners and the mirror channel."""
    mode: SessionMode
    running: bool
    seconds_remaining: int
    completed_focus_sessions: int
    duration_seconds: int
    seconds_elapsed: int
    preset_id: str
    counts_up: bool = False


@dataclass(frozen=True)
class SessionActionResult:
    """Result envelope returned after applying a session action."""
    action: str
    accepted: bool
    reason: str
    snapshot: SessionSnapshot


SnapshotListener = Callable[[SessionSnapshot, str], None]


class SessionStateMachine:
    """Owns the session mode, transition rules, and auto-start policy.

    All mutation happens on the event loop that drives ``tick`` and the user
    actions, so no locking is needed. Listeners receive a snapshot after every
    tick and after every explicit action, accepted or not.
    """

    def __init__(
        self,
        presets: PresetSource,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._presets = presets
        self._logger = logger or logging.getLogger("session")
        self._clock: Optional[ClockLike] = None
        self._listeners: list[SnapshotListener] = []
        self._state = SessionState(
            mode=MODE_FOCUS,
            running=False,
            seconds_remaining=duration_seconds(MODE_FOCUS, presets.active),
        )
        self._applied_preset = presets.active

    @property
    def preset(self) -> Preset:
        return self._presets.active

    @property
    def state(self) -> SessionState:
        return SessionState(**vars(self._state))

    def attach_clock(self, clock: ClockLike) -> None:
        self._clock = clock
        self._sync_clock()

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> SessionSnapshot:
        preset = self.preset
        state = self._state
        return SessionSnapshot(
            mode=state.mode,
            running=state.running,
            seconds_remaining=state.seconds_remaining,
            completed_focus_sessions=state.completed_focus_sessions,
            duration_seconds=duration_seconds(state.mode, preset),
            seconds_elapsed=state.seconds_elapsed,
            preset_id=preset.id,
            counts_up=self._counts_up(preset),
        )

    def apply(
        self,
        action: str,
        *,
        mode: Optional[str] = None,
    ) -> SessionActionResult:
        if action == ACTION_START:
            return self.start()
        if action == ACTION_STOP:
            return self.stop()
        if action == ACTION_RESET:
            return self.reset()
        if action == ACTION_SKIP:
            return self.skip()
        if action == ACTION_SWITCH_MODE:
            return self.switch_mode(mode or "")
        return self._result(action, False, REASON_UNSUPPORTED_ACTION)

    def start(self) -> SessionActionResult:
        self.sync_preset()
        if self._state.running:
            return self._result(ACTION_START, False, REASON_ALREADY_RUNNING)

        self._state.running = True
        self._logger.info(
            "Session started: mode=%s remaining=%ss",
            self._state.mode,
            self._state.seconds_remaining,
        )
        return self._result(ACTION_START, True, REASON_STARTED)

    def stop(self) -> SessionActionResult:
        if not self._state.running:
            return self._result(ACTION_STOP, False, REASON_NOT_RUNNING)

        self._state.running = False
        self._logger.info(
            "Session stopped: mode=%s remaining=%ss",
            self._state.mode,
            self._state.seconds_remaining,
        )
        return self._result(ACTION_STOP, True, REASON_STOPPED)

    def reset(self) -> SessionActionResult:
        self._state.running = False
        self._enter_mode(self._state.mode)  # type: ignore[arg-type]
        self._logger.info("Session reset: mode=%s", self._state.mode)
        return self._result(ACTION_RESET, True, REASON_RESET)

    def skip(self) -> SessionActionResult:
        self._state.running = False
        self._sync_clock()
        self._complete_current_mode()
        return self._result(ACTION_SKIP, True, REASON_SKIPPED)

    def switch_mode(self, new_mode: str) -> SessionActionResult:
        if new_mode not in SESSION_MODES:
            return self._result(ACTION_SWITCH_MODE, False, REASON_INVALID_MODE)

        self._state.running = False
        self._enter_mode(new_mode)  # type: ignore[arg-type]
        if new_mode == MODE_FOCUS:
            self._state.completed_focus_sessions = 0
        self._logger.info("Switched mode: %s", new_mode)
        return self._result(ACTION_SWITCH_MODE, True, REASON_SWITCHED)

    def sync_preset(self) -> bool:
        """Restart the current mode if the active preset changed since it was entered.

        The session stops and the remaining time becomes the full duration of
        the current mode under the new preset. Returns True when a reset happened.
        """
        preset = self.preset
        if preset == self._applied_preset:
            return False

        self._state.running = False
        self._enter_mode(self._state.mode)  # type: ignore[arg-type]
        self._logger.info("Preset changed to %s; session reset", preset.id)
        self._sync_clock()
        self._notify(ACTION_PRESET_CHANGED)
        return True

    def tick(self) -> None:
        """Advance one second. Called by the clock while running."""
        state = self._state
        if not state.running:
            return
        if self.sync_preset():
            return

        if self._counts_up(self.preset):
            state.seconds_elapsed += 1
            self._notify(ACTION_TICK)
            return

        state.seconds_remaining = max(0, state.seconds_remaining - 1)
        if state.seconds_remaining > 0:
            self._notify(ACTION_TICK)
            return

        state.running = False
        self._sync_clock()
        self._logger.info("Session expired: mode=%s", state.mode)
        self._complete_current_mode()
        self._sync_clock()
        self._notify(ACTION_EXPIRED)

    def _complete_current_mode(self) -> None:
        preset = self.preset
        state = self._state
        if state.mode == MODE_FOCUS:
            state.completed_focus_sessions += 1
            is_long_break = state.completed_focus_sessions % preset.long_break_interval == 0
            self._enter_mode(MODE_LONG_BREAK if is_long_break else MODE_SHORT_BREAK)
            state.running = preset.auto_start_breaks
        else:
            self._enter_mode(MODE_FOCUS)
            state.running = preset.auto_start_focus

        self._logger.info(
            "Entered %s (completed=%d, auto_start=%s)",
            state.mode,
            state.completed_focus_sessions,
            state.running,
        )

    def _enter_mode(self, mode: SessionMode) -> None:
        preset = self.preset
        self._applied_preset = preset
        self._state.mode = mode
        self._state.seconds_remaining = duration_seconds(mode, preset)
        self._state.seconds_elapsed = 0

    def _counts_up(self, preset: Preset) -> bool:
        return preset.is_stopwatch and self._state.mode == MODE_FOCUS

    def _sync_clock(self) -> None:
        if self._clock is None:
            return
        if self._state.running:
            self._clock.start()
        else:
            self._clock.stop()

    def _result(self, action: str, accepted: bool, reason: str) -> SessionActionResult:
        self._sync_clock()
        snapshot = self._notify(action)
        return SessionActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=snapshot,
        )

    def _notify(self, action: str) -> SessionSnapshot:
        snapshot = self.snapshot()
        for listener in tuple(self._listeners):
            listener(snapshot, action)
        return snapshot
