"""Websocket host that runs each detached view as its own process."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import secrets
import shutil
import sys
from typing import Awaitable, Callable, Optional
from urllib.parse import parse_qs, urlencode, urlsplit

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.datastructures import Headers
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response
from websockets.protocol import State

from .channel import MirrorOptions
from .config import HEALTHZ_PATH, MirrorConfig
from .errors import SurfaceClosedError, SurfaceCreationDenied

Launcher = Callable[[list[str]], Awaitable[asyncio.subprocess.Process]]


class WebSocketSurface:
    """Primary-side view of one connected detached view process.

    Outbound messages go through a queue drained by a single writer task so
    they reach the view in the order they were posted.
    """

    def __init__(
        self,
        connection: ServerConnection,
        logger: logging.Logger,
    ):
        self._connection = connection
        self._logger = logger
        self._process: Optional[asyncio.subprocess.Process] = None
        self._closed = False
        self._message_handler: Optional[Callable[[str], None]] = None
        self._close_handler: Optional[Callable[[], None]] = None
        self._outbox: asyncio.Queue[str] = asyncio.Queue()
        self._writer = asyncio.get_running_loop().create_task(self._write_loop())

    @property
    def closed(self) -> bool:
        if self._closed or self._connection.state is State.CLOSED:
            return True
        return self._process is not None and self._process.returncode is not None

    def track_process(self, process: asyncio.subprocess.Process) -> None:
        self._process = process

    def post(self, raw: str) -> None:
        if self.closed:
            raise SurfaceClosedError("Detached view connection is closed")
        self._outbox.put_nowait(raw)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.cancel()
        asyncio.get_running_loop().create_task(self._shutdown())

    def set_message_handler(self, handler: Callable[[str], None]) -> None:
        self._message_handler = handler

    def set_close_handler(self, handler: Callable[[], None]) -> None:
        self._close_handler = handler

    def deliver(self, raw: str) -> None:
        if not self._closed and self._message_handler is not None:
            self._message_handler(raw)

    def connection_lost(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.cancel()
        if self._close_handler is not None:
            self._close_handler()

    async def _write_loop(self) -> None:
        while True:
            raw = await self._outbox.get()
            try:
                await self._connection.send(raw)
            except ConnectionClosed as error:
                self._logger.warning("Failed to send message to view: %s", error)
                self.connection_lost()
                return

    async def _shutdown(self) -> None:
        with contextlib.suppress(ConnectionClosed):
            await self._connection.close(code=1001, reason="Primary closed view")
        process = self._process
        if process is not None and process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.terminate()


class WebSocketSurfaceHost:
    """Asyncio websocket server plus a launcher for detached view processes."""

    def __init__(
        self,
        config: MirrorConfig,
        *,
        logger: Optional[logging.Logger] = None,
        launch: Optional[Launcher] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger("mirror.server")
        self._launch = launch or self._spawn
        self._server: Optional[Server] = None
        self._pending: dict[str, asyncio.Future[WebSocketSurface]] = {}
        self._surfaces: set[WebSocketSurface] = set()

    @property
    def supports_detached(self) -> bool:
        if not self._config.enabled:
            return False
        if not self._config.launcher:
            return True
        return shutil.which(self._config.launcher[0]) is not None

    @property
    def is_running(self) -> bool:
        return self._server is not None

    @property
    def port(self) -> int:
        if self._server is not None:
            for sock in self._server.sockets:
                return int(sock.getsockname()[1])
        return self._config.port

    @property
    def websocket_url(self) -> str:
        return f"ws://{self._config.host}:{self.port}{self._config.websocket_path}"

    async def start(self) -> None:
        if self._server is not None:
            return

        self._server = await serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        )
        self._logger.info(
            "Mirror host listening at %s",
            self.websocket_url,
        )

    async def stop(self) -> None:
        for future in self._pending.values():
            future.cancel()
        self._pending.clear()
        for surface in tuple(self._surfaces):
            surface.close()
        self._surfaces.clear()

        server = self._server
        self._server = None
        if server is not None:
            server.close()
            await server.wait_closed()

    async def _spawn(self, command: list[str]) -> asyncio.subprocess.Process:
        # A view without a launcher shares this terminal and must not read stdin.
        return await asyncio.create_subprocess_exec(
            *command,
            stdin=None if self._config.launcher else asyncio.subprocess.DEVNULL,
        )

    def view_command(self, options: MirrorOptions, token: str) -> list[str]:
        query = urlencode({"token": token})
        return [
            *self._config.launcher,
            sys.executable,
            "-m",
            "mirror.view",
            "--url",
            f"{self.websocket_url}?{query}",
            "--title",
            options.title,
            "--wallpaper",
            options.wallpaper_id,
            "--font",
            options.font_id,
            "--font-color",
            options.font_color,
        ]

    async def open_surface(self, options: MirrorOptions) -> WebSocketSurface:
        try:
            await self.start()
        except OSError as error:
            self._logger.error("Mirror host failed to start: %s", error)
            raise SurfaceCreationDenied(f"Failed to start mirror host: {error}") from error

        loop = asyncio.get_running_loop()
        token = secrets.token_urlsafe(16)
        connected: asyncio.Future[WebSocketSurface] = loop.create_future()
        self._pending[token] = connected

        try:
            process = await self._launch(self.view_command(options, token))
        except OSError as error:
            self._pending.pop(token, None)
            raise SurfaceCreationDenied(f"Failed to launch detached view: {error}") from error

        exited = loop.create_task(process.wait())
        try:
            done, _ = await asyncio.wait(
                {connected, exited},
                timeout=self._config.open_timeout_seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
            if connected not in done and exited in done and process.returncode == 0:
                # Terminal launchers may hand off to a server process and exit.
                done, _ = await asyncio.wait(
                    {connected},
                    timeout=self._config.open_timeout_seconds,
                )
        finally:
            self._pending.pop(token, None)
            if not exited.done():
                exited.cancel()

        if connected not in done:
            connected.cancel()
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
            raise SurfaceCreationDenied(
                "Detached view did not connect "
                f"(exit code: {process.returncode})"
            )

        surface = connected.result()
        if not self._config.launcher:
            surface.track_process(process)
        self._surfaces.add(surface)
        self._logger.info("Detached view connected (pid=%s)", process.pid)
        return surface

    async def _handler(self, websocket: ServerConnection) -> None:
        request_path = websocket.request.path if websocket.request is not None else ""
        parts = urlsplit(request_path)
        if parts.path != self._config.websocket_path:
            await websocket.close(code=1008, reason="Invalid websocket path")
            return

        token = parse_qs(parts.query).get("token", [""])[0]
        pending = self._pending.pop(token, None)
        if pending is None or pending.done():
            await websocket.close(code=1008, reason="Unknown view token")
            return

        surface = WebSocketSurface(websocket, self._logger)
        pending.set_result(surface)
        self._logger.info("View connected: %s", websocket.remote_address)
        try:
            async for message in websocket:
                if isinstance(message, bytes):
                    message = message.decode("utf-8", errors="replace")
                surface.deliver(message)
        except ConnectionClosed:
            self._logger.info("View disconnected: %s", websocket.remote_address)
        finally:
            self._surfaces.discard(surface)
            surface.connection_lost()

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response | None:
        del connection  # Unused in static routing.
        path = urlsplit(request.path).path

        if path == self._config.websocket_path:
            return None

        if path == HEALTHZ_PATH:
            return self._response(200, "OK", b"ok\n")

        return self._response(404, "Not Found", b"not found\n")

    def _response(self, status_code: int, reason_phrase: str, body: bytes) -> Response:
        headers = Headers()
        headers["Content-Type"] = "text/plain; charset=utf-8"
        headers["Content-Length"] = str(len(body))
        headers["Cache-Control"] = "no-store"
        return Response(status_code, reason_phrase, headers, body)
