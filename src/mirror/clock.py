"""Self-running countdown inside the detached view."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional

from session.clock import SessionClock
from session.constants import (
    ACTION_RESET,
    ACTION_START,
    ACTION_STOP,
    MODE_FOCUS,
    TICK_SECONDS,
)

from .protocol import ControlRequest, StatePush, decode_message


@dataclass(frozen=True)
class MirrorState:
    """What the detached view currently displays. Never authoritative.

    ``seconds`` is the remaining time, or the elapsed time when ``counts_up``.
    """
    mode: str = MODE_FOCUS
    running: bool = False
    seconds: int = 0
    duration_seconds: Optional[int] = None
    counts_up: bool = False

    @property
    def is_reset_state(self) -> bool:
        if self.counts_up:
            return not self.running and self.seconds == 0
        return not self.running and self.seconds == self.duration_seconds


class DetachedMirrorClock:
    """Extrapolates the countdown between pushes and forwards user actions.

    Every inbound ``state-push`` replaces the local state wholesale, so any
    divergence from the primary lasts at most one push interval. Button
    presses update the display immediately and are also sent to the primary
    as control requests; the primary's next push is final.
    """

    def __init__(
        self,
        send_control: Callable[[ControlRequest], None],
        *,
        render: Optional[Callable[[MirrorState], None]] = None,
        period_seconds: float = TICK_SECONDS,
        logger: Optional[logging.Logger] = None,
    ):
        self._send_control = send_control
        self._render = render
        self._logger = logger or logging.getLogger("mirror.view")
        self._state = MirrorState()
        self._ticker = SessionClock(
            self._tick,
            period_seconds=period_seconds,
            logger=self._logger,
        )

    @property
    def state(self) -> MirrorState:
        return self._state

    @property
    def ticking(self) -> bool:
        return self._ticker.running

    def handle_raw(self, raw: str | bytes) -> None:
        message = decode_message(raw)
        if isinstance(message, StatePush):
            self.apply_push(message)
        else:
            self._logger.debug("Ignoring message from primary: %s", raw)

    def apply_push(self, push: StatePush) -> None:
        duration = push.duration_seconds
        if duration is None:
            duration = self._state.duration_seconds
        self._state = MirrorState(
            mode=push.mode,
            running=push.running,
            seconds=push.seconds_remaining,
            duration_seconds=duration,
            counts_up=push.counts_up,
        )
        # Re-phase the local loop on every running push.
        self._ticker.stop()
        if self._state.running:
            self._ticker.start()
        self._emit()

    def start(self) -> None:
        self._state = replace(self._state, running=True)
        self._ticker.start()
        self._emit()
        self._send_control(ControlRequest(action=ACTION_START))

    def stop(self) -> None:
        self._set_stopped(self._state.seconds)
        self._send_control(ControlRequest(action=ACTION_STOP))

    def reset(self) -> None:
        if self._state.counts_up:
            seconds = 0
        elif self._state.duration_seconds is not None:
            seconds = self._state.duration_seconds
        else:
            seconds = self._state.seconds
        self._set_stopped(seconds)
        self._send_control(ControlRequest(action=ACTION_RESET))

    def close(self) -> None:
        self._ticker.stop()

    def _tick(self) -> None:
        state = self._state
        if not state.running:
            return
        if state.counts_up:
            self._state = replace(state, seconds=state.seconds + 1)
            self._emit()
            return

        remaining = max(0, state.seconds - 1)
        if remaining == 0:
            # Hold at zero until the primary pushes the next mode.
            self._set_stopped(0)
            return
        self._state = replace(state, seconds=remaining)
        self._emit()

    def _set_stopped(self, seconds: int) -> None:
        self._ticker.stop()
        self._state = replace(self._state, running=False, seconds=seconds)
        self._emit()

    def _emit(self) -> None:
        if self._render is not None:
            self._render(self._state)
