"""Focus run mode: session state machine, its clock, and the optional mirror."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from mirror import (
    ControlRequest,
    MirrorHandle,
    MirrorOptions,
    MirrorSyncChannel,
    StatePush,
    SurfaceCreationDenied,
    UnsupportedSurface,
)
from presets import PresetCatalog
from session import SessionClock, SessionSnapshot, SessionStateMachine
from session.constants import MIRROR_ACTIONS, TICK_SECONDS

MSG_MIRROR_UNSUPPORTED = "Detached view is not supported in this environment."
MSG_MIRROR_DENIED = "Failed to open the detached view. Please try again."


def state_push_for(snapshot: SessionSnapshot) -> StatePush:
    if snapshot.counts_up:
        return StatePush(
            seconds_remaining=snapshot.seconds_elapsed,
            running=snapshot.running,
            mode=snapshot.mode,
            duration_seconds=0,
            counts_up=True,
        )
    return StatePush(
        seconds_remaining=snapshot.seconds_remaining,
        running=snapshot.running,
        mode=snapshot.mode,
        duration_seconds=snapshot.duration_seconds,
    )


class FocusSurface:
    """One mounted Focus view.

    The session lives exactly as long as this object is mounted. While a
    mirror is open every session change is pushed to it, and control
    requests from the mirror are applied as if issued locally.
    """

    def __init__(
        self,
        catalog: PresetCatalog,
        channel: MirrorSyncChannel,
        *,
        tick_seconds: float = TICK_SECONDS,
        mirror_size: tuple[int, int] = (400, 250),
        notify: Optional[Callable[[str], None]] = None,
        on_change: Optional[Callable[[SessionSnapshot, str], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._catalog = catalog
        self._channel = channel
        self._mirror_size = mirror_size
        self._notify = notify or (lambda message: None)
        self._on_change = on_change
        self._logger = logger or logging.getLogger("runtime")
        self._mirror: Optional[MirrorHandle] = None
        self._mounted = True

        self.machine = SessionStateMachine(catalog, logger=logging.getLogger("session"))
        self._clock = SessionClock(self.machine.tick, period_seconds=tick_seconds)
        self.machine.attach_clock(self._clock)
        self._unsubscribe = self.machine.subscribe(self._on_session_changed)

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def mirror_active(self) -> bool:
        return self._mirror is not None

    @property
    def clock_running(self) -> bool:
        return self._clock.running

    def mirror_options(self) -> MirrorOptions:
        appearance = self._catalog.appearance.focus
        width, height = self._mirror_size
        return MirrorOptions(
            title="Focus Timer",
            width=width,
            height=height,
            wallpaper_id=appearance.wallpaper.id,
            font_id=appearance.font.id,
            font_color=appearance.font_color,
        )

    async def open_mirror(self) -> bool:
        if self._mirror is not None:
            return True
        if not self._mounted:
            return False

        try:
            handle = await self._channel.open(self.mirror_options())
        except UnsupportedSurface as error:
            self._logger.warning("Mirror unsupported: %s", error)
            self._notify(MSG_MIRROR_UNSUPPORTED)
            return False
        except SurfaceCreationDenied as error:
            self._logger.error("Failed to open mirror: %s", error)
            self._notify(MSG_MIRROR_DENIED)
            return False

        if not self._mounted:
            self._channel.close(handle)
            return False

        self._mirror = handle
        self._channel.on_closed(handle, lambda: self._on_mirror_closed(handle))
        self._channel.on_control_received(handle, self._on_control)
        self._push(self.machine.snapshot())
        return True

    def close_mirror(self) -> None:
        handle = self._mirror
        if handle is not None:
            self._channel.close(handle)

    async def toggle_mirror(self) -> bool:
        """Open the mirror if closed, close it if open. Returns the new state."""
        if self._mirror is not None:
            self.close_mirror()
            return False
        return await self.open_mirror()

    def unmount(self) -> None:
        if not self._mounted:
            return
        self._mounted = False
        self._unsubscribe()
        self._clock.stop()
        self.close_mirror()
        self._logger.info("Focus surface unmounted")

    def _on_session_changed(self, snapshot: SessionSnapshot, action: str) -> None:
        self._push(snapshot)
        if self._on_change is not None:
            self._on_change(snapshot, action)

    def _push(self, snapshot: SessionSnapshot) -> None:
        handle = self._mirror
        if handle is None:
            return
        self._channel.send(handle, state_push_for(snapshot))

    def _on_control(self, request: ControlRequest) -> None:
        if not self._mounted or request.action not in MIRROR_ACTIONS:
            return
        self.machine.apply(request.action)

    def _on_mirror_closed(self, handle: MirrorHandle) -> None:
        if self._mirror is handle:
            self._mirror = None
            self._logger.info("Mirror no longer active")
