"""Preset kinds, identifiers, and editor bounds."""

from __future__ import annotations

KIND_POMODORO = "pomodoro"
KIND_STOPWATCH = "stopwatch"
KIND_COUNTDOWN = "countdown"
KIND_CUSTOM = "custom"

PRESET_KINDS: frozenset[str] = frozenset(
    {KIND_POMODORO, KIND_STOPWATCH, KIND_COUNTDOWN, KIND_CUSTOM}
)

DEFAULT_PRESET_ID = "pomodoro-classic"
CUSTOM_PRESET_PREFIX = "custom-"

# (minimum, maximum) in minutes, except the interval which counts sessions.
FOCUS_MINUTES_BOUNDS = (1, 480)
SHORT_BREAK_MINUTES_BOUNDS = (1, 60)
LONG_BREAK_MINUTES_BOUNDS = (1, 120)
LONG_BREAK_INTERVAL_BOUNDS = (1, 10)

DEFAULT_FOCUS_MINUTES = 25
DEFAULT_SHORT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15
DEFAULT_LONG_BREAK_INTERVAL = 4

MAX_NAME_LENGTH = 60
MAX_DESCRIPTION_LENGTH = 200
