"""Mode, action, and reason constants used by the session state machine."""

from __future__ import annotations

TICK_SECONDS = 1.0

MODE_FOCUS = "focus"
MODE_SHORT_BREAK = "short-break"
MODE_LONG_BREAK = "long-break"

SESSION_MODES: tuple[str, ...] = (MODE_FOCUS, MODE_SHORT_BREAK, MODE_LONG_BREAK)
BREAK_MODES: frozenset[str] = frozenset({MODE_SHORT_BREAK, MODE_LONG_BREAK})

ACTION_START = "start"
ACTION_STOP = "stop"
ACTION_RESET = "reset"
ACTION_SKIP = "skip"
ACTION_SWITCH_MODE = "switch_mode"

ACTION_TICK = "tick"
ACTION_EXPIRED = "expired"
ACTION_PRESET_CHANGED = "preset_changed"

# Actions the detached view may request.
MIRROR_ACTIONS: frozenset[str] = frozenset({ACTION_START, ACTION_STOP, ACTION_RESET})

REASON_STARTED = "started"
REASON_STOPPED = "stopped"
REASON_RESET = "reset"
REASON_SKIPPED = "skipped"
REASON_SWITCHED = "switched"
REASON_ALREADY_RUNNING = "already_running"
REASON_NOT_RUNNING = "not_running"
REASON_INVALID_MODE = "invalid_mode"
REASON_UNSUPPORTED_ACTION = "unsupported_action"

RUN_MODE_HOME = "home"
RUN_MODE_FOCUS = "focus"
RUN_MODE_AMBIENT = "ambient"

RUN_MODES: tuple[str, ...] = (RUN_MODE_HOME, RUN_MODE_FOCUS, RUN_MODE_AMBIENT)
