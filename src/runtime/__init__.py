"""Primary surface runtime: run modes, focus view, and console."""

from .console import TimerConsole, attach_line_reader
from .focus import FocusSurface, state_push_for
from .page import TimerPage

__all__ = [
    "FocusSurface",
    "TimerConsole",
    "TimerPage",
    "attach_line_reader",
    "state_push_for",
]
