from .ambient import AmbientSnapshot, AmbientTimer
from .clock import SessionClock
from .constants import (
    MODE_FOCUS,
    MODE_LONG_BREAK,
    MODE_SHORT_BREAK,
    RUN_MODE_AMBIENT,
    RUN_MODE_FOCUS,
    RUN_MODE_HOME,
)
from .machine import (
    SessionActionResult,
    SessionMode,
    SessionSnapshot,
    SessionState,
    SessionStateMachine,
    duration_seconds,
)

__all__ = [
    "AmbientSnapshot",
    "AmbientTimer",
    "MODE_FOCUS",
    "MODE_LONG_BREAK",
    "MODE_SHORT_BREAK",
    "RUN_MODE_AMBIENT",
    "RUN_MODE_FOCUS",
    "RUN_MODE_HOME",
    "SessionActionResult",
    "SessionClock",
    "SessionMode",
    "SessionSnapshot",
    "SessionState",
    "SessionStateMachine",
    "duration_seconds",
]
