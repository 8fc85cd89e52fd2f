"""Bidirectional channel between the primary surface and one detached view."""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from settings.appearance import DEFAULT_FONT_COLOR, DEFAULT_FONT_ID, DEFAULT_WALLPAPER_ID

from .errors import SurfaceClosedError, UnsupportedSurface
from .protocol import ControlRequest, SyncMessage, decode_message, encode_message

DEFAULT_LIVENESS_POLL_SECONDS = 1.0


@dataclass(frozen=True)
class MirrorOptions:
    """Presentation hints forwarded to the detached view on creation."""
    title: str = "Focus Timer"
    width: int = 400
    height: int = 250
    wallpaper_id: str = DEFAULT_WALLPAPER_ID
    font_id: str = DEFAULT_FONT_ID
    font_color: str = DEFAULT_FONT_COLOR


class SurfaceLike(Protocol):
    """A detached view as seen from the primary side."""

    @property
    def closed(self) -> bool:
        ...

    def post(self, raw: str) -> None:
        ...

    def close(self) -> None:
        ...

    def set_message_handler(self, handler: Callable[[str], None]) -> None:
        ...

    def set_close_handler(self, handler: Callable[[], None]) -> None:
        ...


class SurfaceHostLike(Protocol):
    @property
    def supports_detached(self) -> bool:
        ...

    async def open_surface(self, options: MirrorOptions) -> SurfaceLike:
        ...


_handle_ids = itertools.count(1)


class MirrorHandle:
    """Opaque handle for one detached view, owned by the primary surface."""

    def __init__(self, surface: SurfaceLike):
        self.id = next(_handle_ids)
        self._surface = surface
        self._closed = False
        self._closed_callbacks: list[Callable[[], None]] = []
        self._control_callbacks: list[Callable[[ControlRequest], None]] = []
        self._poll_task: Optional[asyncio.Task[None]] = None

    @property
    def closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        return f"MirrorHandle(id={self.id}, closed={self._closed})"


class MirrorSyncChannel:
    """Transports sync messages and tracks the mirror's lifecycle.

    A handle becomes closed through an explicit notification from the
    surface, a failed delivery, the periodic liveness poll, or ``close``.
    Closed is terminal: close callbacks fire once and nothing more is sent.
    """

    def __init__(
        self,
        host: SurfaceHostLike,
        *,
        liveness_poll_seconds: float = DEFAULT_LIVENESS_POLL_SECONDS,
        logger: Optional[logging.Logger] = None,
    ):
        if liveness_poll_seconds <= 0:
            raise ValueError("liveness_poll_seconds must be greater than zero")

        self._host = host
        self._liveness_poll_seconds = float(liveness_poll_seconds)
        self._logger = logger or logging.getLogger("mirror")

    async def open(self, options: Optional[MirrorOptions] = None) -> MirrorHandle:
        if not self._host.supports_detached:
            raise UnsupportedSurface("Detached views are not supported here")

        surface = await self._host.open_surface(options or MirrorOptions())
        handle = MirrorHandle(surface)
        surface.set_message_handler(lambda raw: self._on_surface_message(handle, raw))
        surface.set_close_handler(lambda: self._mark_closed(handle, "close notification"))
        handle._poll_task = asyncio.get_running_loop().create_task(
            self._poll_liveness(handle)
        )
        self._logger.info("Mirror opened: %r", handle)
        return handle

    def send(self, handle: MirrorHandle, message: SyncMessage) -> bool:
        """Deliver best-effort; returns False when the mirror is gone."""
        if handle.closed:
            return False
        if handle._surface.closed:
            self._mark_closed(handle, "closed before send")
            return False

        try:
            handle._surface.post(encode_message(message))
        except SurfaceClosedError as error:
            self._logger.warning("Mirror send failed: %s", error)
            self._mark_closed(handle, "send failed")
            return False
        return True

    def close(self, handle: MirrorHandle) -> None:
        if handle.closed:
            return
        try:
            handle._surface.close()
        finally:
            self._mark_closed(handle, "closed by primary")

    def on_closed(self, handle: MirrorHandle, callback: Callable[[], None]) -> None:
        if handle.closed:
            callback()
            return
        handle._closed_callbacks.append(callback)

    def on_control_received(
        self,
        handle: MirrorHandle,
        callback: Callable[[ControlRequest], None],
    ) -> None:
        handle._control_callbacks.append(callback)

    def _on_surface_message(self, handle: MirrorHandle, raw: str) -> None:
        if handle.closed:
            return
        message = decode_message(raw)
        if not isinstance(message, ControlRequest):
            self._logger.debug("Ignoring message from mirror: %s", raw)
            return

        self._logger.info("Mirror control received: %s", message.action)
        for callback in tuple(handle._control_callbacks):
            callback(message)

    async def _poll_liveness(self, handle: MirrorHandle) -> None:
        while not handle.closed:
            await asyncio.sleep(self._liveness_poll_seconds)
            if not handle.closed and handle._surface.closed:
                self._mark_closed(handle, "liveness poll")

    def _mark_closed(self, handle: MirrorHandle, reason: str) -> None:
        if handle.closed:
            return

        handle._closed = True
        task = handle._poll_task
        handle._poll_task = None
        if task is not None and not task.done():
            task.cancel()

        self._logger.info("Mirror closed (%s): %r", reason, handle)
        callbacks = tuple(handle._closed_callbacks)
        handle._closed_callbacks.clear()
        handle._control_callbacks.clear()
        for callback in callbacks:
            callback()
