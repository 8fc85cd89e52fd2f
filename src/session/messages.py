"""Status text builders for the console and the detached view."""

from __future__ import annotations

from .constants import MODE_FOCUS, MODE_LONG_BREAK, MODE_SHORT_BREAK

_MODE_LABELS = {
    MODE_FOCUS: "Focus",
    MODE_SHORT_BREAK: "Short break",
    MODE_LONG_BREAK: "Long break",
}


def format_duration(seconds: int) -> str:
    """Format a duration in seconds as `MM:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"


def mode_label(mode: str) -> str:
    return _MODE_LABELS.get(mode, mode)


def session_status_message(
    mode: str,
    running: bool,
    seconds: int,
    *,
    completed: int | None = None,
) -> str:
    """Build one status line, e.g. ``Focus 24:59 running (2 done)``."""
    text = f"{mode_label(mode)} {format_duration(seconds)} {'running' if running else 'paused'}"
    if completed:
        text += f" ({completed} done)"
    return text
