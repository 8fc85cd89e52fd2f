from __future__ import annotations

import logging
from typing import Callable, Optional

from mirror import MirrorSyncChannel
from presets import PresetCatalog
from session import AmbientSnapshot, AmbientTimer, SessionClock, SessionSnapshot
from session.constants import (
    RUN_MODE_AMBIENT,
    RUN_MODE_FOCUS,
    RUN_MODE_HOME,
    RUN_MODES,
    TICK_SECONDS,
)

from .focus import FocusSurface


class TimerPage:
    """Primary surface: switches between Home, Focus, and Ambient views.

    Only the view for the current run mode is mounted. Switching modes
    unmounts the previous view, so a Focus session or an Ambient countdown
    never outlives its mode.
    """

    def __init__(
        self,
        catalog: PresetCatalog,
        channel: MirrorSyncChannel,
        *,
        tick_seconds: float = TICK_SECONDS,
        ambient_fallback_minutes: int = 5,
        mirror_size: tuple[int, int] = (400, 250),
        notify: Optional[Callable[[str], None]] = None,
        on_session_change: Optional[Callable[[SessionSnapshot, str], None]] = None,
        on_ambient_change: Optional[Callable[[AmbientSnapshot], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._catalog = catalog
        self._channel = channel
        self._tick_seconds = tick_seconds
        self._ambient_fallback_minutes = ambient_fallback_minutes
        self._mirror_size = mirror_size
        self._notify = notify
        self._on_session_change = on_session_change
        self._on_ambient_change = on_ambient_change
        self._logger = logger or logging.getLogger("runtime")
        self._run_mode = RUN_MODE_HOME
        self._focus: Optional[FocusSurface] = None
        self._ambient: Optional[AmbientTimer] = None
        self._ambient_clock: Optional[SessionClock] = None

    @property
    def run_mode(self) -> str:
        return self._run_mode

    @property
    def focus(self) -> Optional[FocusSurface]:
        return self._focus

    @property
    def ambient(self) -> Optional[AmbientTimer]:
        return self._ambient

    def set_run_mode(self, run_mode: str) -> None:
        if run_mode not in RUN_MODES:
            raise ValueError(f"Unknown run mode: {run_mode}")
        if run_mode == self._run_mode:
            return

        self._unmount()
        self._run_mode = run_mode
        if run_mode == RUN_MODE_FOCUS:
            self._focus = FocusSurface(
                self._catalog,
                self._channel,
                tick_seconds=self._tick_seconds,
                mirror_size=self._mirror_size,
                notify=self._notify,
                on_change=self._on_session_change,
                logger=self._logger,
            )
        elif run_mode == RUN_MODE_AMBIENT:
            self._ambient = AmbientTimer(self._ambient_minutes)
            self._ambient_clock = SessionClock(
                self._ambient.tick,
                period_seconds=self._tick_seconds,
            )
            self._ambient.attach_clock(self._ambient_clock)
            if self._on_ambient_change is not None:
                self._ambient.subscribe(self._on_ambient_change)
        self._logger.info("Run mode: %s", run_mode)

    def close(self) -> None:
        self._unmount()
        self._run_mode = RUN_MODE_HOME

    def preset_changed(self) -> None:
        if self._focus is not None:
            self._focus.machine.sync_preset()

    def _ambient_minutes(self) -> int:
        return self._catalog.active.short_break_minutes or self._ambient_fallback_minutes

    def _unmount(self) -> None:
        if self._focus is not None:
            self._focus.unmount()
            self._focus = None
        if self._ambient_clock is not None:
            self._ambient_clock.stop()
            self._ambient_clock = None
        self._ambient = None
