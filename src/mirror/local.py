"""Same-process detached views with in-order, loop-scheduled delivery."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Callable, Optional

from .channel import MirrorOptions
from .errors import SurfaceClosedError, SurfaceCreationDenied

# Recent outbound messages kept per surface for inspection.
POSTED_HISTORY = 64


class LocalSurface:
    """Both ends of an in-process surface.

    The primary side uses ``post``/``close``; the view side uses
    ``attach_view``/``send_from_view``/``close_from_view``. Messages are
    delivered on a later loop iteration, never re-entrantly.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, options: MirrorOptions):
        self.options = options
        self._loop = loop
        self._closed = False
        self._message_handler: Optional[Callable[[str], None]] = None
        self._close_handler: Optional[Callable[[], None]] = None
        self._view_handler: Optional[Callable[[str], None]] = None
        self.posted: deque[str] = deque(maxlen=POSTED_HISTORY)

    @property
    def closed(self) -> bool:
        return self._closed

    def post(self, raw: str) -> None:
        if self._closed:
            raise SurfaceClosedError("Local surface is closed")
        self.posted.append(raw)
        self._loop.call_soon(self._deliver_to_view, raw)

    def close(self) -> None:
        self._closed = True

    def set_message_handler(self, handler: Callable[[str], None]) -> None:
        self._message_handler = handler

    def set_close_handler(self, handler: Callable[[], None]) -> None:
        self._close_handler = handler

    def attach_view(self, handler: Callable[[str], None]) -> None:
        self._view_handler = handler

    def send_from_view(self, raw: str) -> None:
        if self._closed:
            return
        self._loop.call_soon(self._deliver_to_primary, raw)

    def close_from_view(self, *, notify: bool = True) -> None:
        """Close from the view side; ``notify=False`` models a lost close event."""
        if self._closed:
            return
        self._closed = True
        if notify and self._close_handler is not None:
            self._loop.call_soon(self._close_handler)

    def _deliver_to_view(self, raw: str) -> None:
        if not self._closed and self._view_handler is not None:
            self._view_handler(raw)

    def _deliver_to_primary(self, raw: str) -> None:
        if not self._closed and self._message_handler is not None:
            self._message_handler(raw)


class LocalSurfaceHost:
    """Creates ``LocalSurface`` views, optionally wiring each to a view factory."""

    def __init__(
        self,
        *,
        supported: bool = True,
        deny: bool = False,
        view_factory: Optional[Callable[[LocalSurface], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._supported = supported
        self._deny = deny
        self._view_factory = view_factory
        self._logger = logger or logging.getLogger("mirror")
        self.surfaces: list[LocalSurface] = []

    @property
    def supports_detached(self) -> bool:
        return self._supported

    async def open_surface(self, options: MirrorOptions) -> LocalSurface:
        if self._deny:
            raise SurfaceCreationDenied("Detached view request was denied")

        surface = LocalSurface(asyncio.get_running_loop(), options)
        self.surfaces.append(surface)
        if self._view_factory is not None:
            self._view_factory(surface)
        self._logger.debug("Opened local surface %r", options.title)
        return surface
