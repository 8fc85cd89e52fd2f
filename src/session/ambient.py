"""Plain countdown used by the Ambient run mode."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .machine import ClockLike


@dataclass(frozen=True)
class AmbientSnapshot:
    running: bool
    seconds_remaining: int
    duration_seconds: int


class AmbientTimer:
    """Single countdown without cycling; stops when it reaches zero."""

    def __init__(
        self,
        duration_provider: Callable[[], int],
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._duration_provider = duration_provider
        self._logger = logger or logging.getLogger("session.ambient")
        self._clock: Optional[ClockLike] = None
        self._listeners: list[Callable[[AmbientSnapshot], None]] = []
        self._running = False
        self._seconds_remaining = self._duration()

    def attach_clock(self, clock: ClockLike) -> None:
        self._clock = clock

    def subscribe(self, listener: Callable[[AmbientSnapshot], None]) -> None:
        self._listeners.append(listener)

    def snapshot(self) -> AmbientSnapshot:
        return AmbientSnapshot(
            running=self._running,
            seconds_remaining=self._seconds_remaining,
            duration_seconds=self._duration(),
        )

    def start(self) -> AmbientSnapshot:
        if self._seconds_remaining > 0:
            self._running = True
        return self._changed()

    def stop(self) -> AmbientSnapshot:
        self._running = False
        return self._changed()

    def reset(self) -> AmbientSnapshot:
        self._running = False
        self._seconds_remaining = self._duration()
        return self._changed()

    def tick(self) -> None:
        if not self._running:
            return
        self._seconds_remaining = max(0, self._seconds_remaining - 1)
        if self._seconds_remaining == 0:
            self._running = False
            self._logger.info("Ambient countdown finished")
        self._changed()

    def _duration(self) -> int:
        return max(1, int(self._duration_provider())) * 60

    def _changed(self) -> AmbientSnapshot:
        if self._clock is not None:
            if self._running:
                self._clock.start()
            else:
                self._clock.stop()
        snapshot = self.snapshot()
        for listener in tuple(self._listeners):
            listener(snapshot)
        return snapshot
