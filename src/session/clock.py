"""Drift-free periodic tick source for the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from .constants import TICK_SECONDS


class SessionClock:
    """Calls ``on_tick`` once per period while started.

    Deadlines are computed from the start time rather than from the previous
    callback, so slow callbacks do not accumulate drift. ``start`` and ``stop``
    are idempotent; a stop followed by a start begins a fresh period.
    """

    def __init__(
        self,
        on_tick: Callable[[], None],
        *,
        period_seconds: float = TICK_SECONDS,
        logger: Optional[logging.Logger] = None,
    ):
        if period_seconds <= 0:
            raise ValueError("period_seconds must be greater than zero")

        self._on_tick = on_tick
        self._period_seconds = float(period_seconds)
        self._logger = logger or logging.getLogger("session.clock")
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def period_seconds(self) -> float:
        return self._period_seconds

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(loop))

    def stop(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()

    async def _run(self, loop: asyncio.AbstractEventLoop) -> None:
        me = asyncio.current_task()
        next_deadline = loop.time() + self._period_seconds
        while self._task is me:
            await asyncio.sleep(max(0.0, next_deadline - loop.time()))
            if self._task is not me:
                return
            next_deadline += self._period_seconds
            try:
                self._on_tick()
            except Exception:
                self._logger.exception("Tick callback failed")
