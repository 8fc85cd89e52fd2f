"""Detached view process: mirrors the primary timer in its own terminal."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, TextIO

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from runtime.console import attach_line_reader
from session.messages import format_duration, mode_label
from settings.appearance import resolve_font, resolve_wallpaper

from .clock import DetachedMirrorClock, MirrorState
from .protocol import ControlRequest, encode_message

_KEY_ACTIONS = {"s": "start", "p": "stop", "r": "reset"}


def render_line(state: MirrorState, *, title: str) -> str:
    """Single status line; the reset key is offered only away from the reset state."""
    keys = ["[p]ause" if state.running else "[s]tart"]
    if not state.is_reset_state:
        keys.append("[r]eset")
    keys.append("[q]uit")
    return (
        f"{title} | {mode_label(state.mode)} {format_duration(state.seconds)} "
        f"| {' '.join(keys)}"
    )


class MirrorView:
    """Connects to the primary and keeps a DetachedMirrorClock in sync."""

    def __init__(
        self,
        url: str,
        *,
        title: str,
        output: TextIO = sys.stdout,
        logger: Optional[logging.Logger] = None,
    ):
        self._url = url
        self._title = title
        self._output = output
        self._logger = logger or logging.getLogger("mirror.view")
        self._connection: Optional[ClientConnection] = None
        self._closing = False
        self.clock = DetachedMirrorClock(self._send_control, render=self._render)

    async def run(self, keys: Optional[asyncio.Queue[Optional[str]]] = None) -> int:
        try:
            async with connect(self._url, logger=self._logger) as connection:
                self._connection = connection
                key_task = (
                    asyncio.get_running_loop().create_task(self._consume_keys(keys))
                    if keys is not None
                    else None
                )
                try:
                    async for message in connection:
                        self.clock.handle_raw(message)
                except ConnectionClosed:
                    pass
                finally:
                    if key_task is not None:
                        key_task.cancel()
                    self.clock.close()
                    self._connection = None
        except (OSError, InvalidHandshake, InvalidURI) as error:
            self._logger.error("Could not connect to primary: %s", error)
            return 1

        self._logger.info("Primary closed the view")
        return 0

    async def close(self) -> None:
        self._closing = True
        self.clock.close()
        if self._connection is not None:
            await self._connection.close(code=1000, reason="View closed by user")

    async def _consume_keys(self, keys: asyncio.Queue[Optional[str]]) -> None:
        while not self._closing:
            line = await keys.get()
            if line is None:
                return
            key = line.strip().lower()[:1]
            if key == "q":
                await self.close()
                return
            action = _KEY_ACTIONS.get(key)
            if action is not None:
                getattr(self.clock, action)()

    def _send_control(self, request: ControlRequest) -> None:
        connection = self._connection
        if connection is None:
            return
        asyncio.get_running_loop().create_task(self._send(connection, encode_message(request)))

    async def _send(self, connection: ClientConnection, raw: str) -> None:
        try:
            await connection.send(raw)
        except ConnectionClosed as error:
            self._logger.warning("Failed to send control message: %s", error)

    def _render(self, state: MirrorState) -> None:
        self._output.write("\r\033[K" + render_line(state, title=self._title))
        self._output.flush()


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detached focus timer view")
    parser.add_argument("--url", required=True, help="websocket URL of the primary")
    parser.add_argument("--title", default="Focus Timer")
    parser.add_argument("--wallpaper", default="default")
    parser.add_argument("--font", default="system")
    parser.add_argument("--font-color", default="#ffffff")
    return parser.parse_args(argv)


async def _main_async(args: argparse.Namespace) -> int:
    logger = logging.getLogger("mirror.view")
    wallpaper = resolve_wallpaper(args.wallpaper)
    font = resolve_font(args.font)
    logger.info("View appearance: wallpaper=%s font=%s", wallpaper.id, font.label)

    view = MirrorView(args.url, title=args.title, logger=logger)
    loop = asyncio.get_running_loop()
    keys: asyncio.Queue[Optional[str]] = asyncio.Queue()
    attached = attach_line_reader(loop, keys, logger)
    try:
        return await view.run(keys if attached else None)
    finally:
        if attached:
            loop.remove_reader(sys.stdin.fileno())


def main(argv: Optional[list[str]] = None) -> int:
    """Run the detached view until the user or the primary closes it."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = parse_args(argv)
    try:
        return asyncio.run(_main_async(args))
    except KeyboardInterrupt:
        return 0
    finally:
        sys.stdout.write("\n")


if __name__ == "__main__":
    sys.exit(main())
