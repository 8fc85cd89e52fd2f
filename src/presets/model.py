"""Preset record with a repairing constructor for untrusted stored data."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Literal, Mapping

from .constants import (
    DEFAULT_FOCUS_MINUTES,
    DEFAULT_LONG_BREAK_INTERVAL,
    DEFAULT_LONG_BREAK_MINUTES,
    DEFAULT_SHORT_BREAK_MINUTES,
    FOCUS_MINUTES_BOUNDS,
    KIND_CUSTOM,
    KIND_STOPWATCH,
    LONG_BREAK_INTERVAL_BOUNDS,
    LONG_BREAK_MINUTES_BOUNDS,
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    PRESET_KINDS,
    SHORT_BREAK_MINUTES_BOUNDS,
)

PresetKind = Literal["pomodoro", "stopwatch", "countdown", "custom"]


@dataclass(frozen=True)
class Preset:
    """Named bundle of durations and auto-start flags for one timer regimen.

    Construction never fails on bad field values: durations and the long-break
    interval are clamped into the editor bounds, and a zero focus duration is
    only kept for the stopwatch kind.
    """
    id: str
    name: str
    description: str = ""
    kind: PresetKind = KIND_CUSTOM
    focus_minutes: int = DEFAULT_FOCUS_MINUTES
    short_break_minutes: int = DEFAULT_SHORT_BREAK_MINUTES
    long_break_minutes: int = DEFAULT_LONG_BREAK_MINUTES
    long_break_interval: int = DEFAULT_LONG_BREAK_INTERVAL
    auto_start_breaks: bool = True
    auto_start_focus: bool = True
    is_default: bool = False

    def __post_init__(self) -> None:
        kind = self.kind if self.kind in PRESET_KINDS else KIND_CUSTOM
        focus_low, focus_high = FOCUS_MINUTES_BOUNDS
        if kind == KIND_STOPWATCH:
            focus_low = 0

        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "name", _clean_text(self.name, MAX_NAME_LENGTH) or self.id)
        object.__setattr__(
            self,
            "description",
            _clean_text(self.description, MAX_DESCRIPTION_LENGTH),
        )
        object.__setattr__(
            self,
            "focus_minutes",
            _clamp(self.focus_minutes, focus_low, focus_high, DEFAULT_FOCUS_MINUTES),
        )
        object.__setattr__(
            self,
            "short_break_minutes",
            _clamp(self.short_break_minutes, *SHORT_BREAK_MINUTES_BOUNDS, DEFAULT_SHORT_BREAK_MINUTES),
        )
        object.__setattr__(
            self,
            "long_break_minutes",
            _clamp(self.long_break_minutes, *LONG_BREAK_MINUTES_BOUNDS, DEFAULT_LONG_BREAK_MINUTES),
        )
        object.__setattr__(
            self,
            "long_break_interval",
            _clamp(self.long_break_interval, *LONG_BREAK_INTERVAL_BOUNDS, DEFAULT_LONG_BREAK_INTERVAL),
        )
        object.__setattr__(self, "auto_start_breaks", bool(self.auto_start_breaks))
        object.__setattr__(self, "auto_start_focus", bool(self.auto_start_focus))
        object.__setattr__(self, "is_default", bool(self.is_default))

    @property
    def is_stopwatch(self) -> bool:
        return self.kind == KIND_STOPWATCH

    def with_changes(self, **changes: Any) -> "Preset":
        """Return an edited copy; the id and built-in flag cannot change."""
        changes.pop("id", None)
        changes.pop("is_default", None)
        return replace(self, **changes)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Preset":
        """Build a preset from a stored camelCase record, repairing bad fields."""
        raw_id = record.get("id")
        if not isinstance(raw_id, str) or not raw_id.strip():
            raise ValueError("preset record has no id")

        return cls(
            id=raw_id.strip(),
            name=_as_text(record.get("name")),
            description=_as_text(record.get("description")),
            kind=_as_text(record.get("kind", record.get("type"))) or KIND_CUSTOM,
            focus_minutes=record.get("focusMinutes", DEFAULT_FOCUS_MINUTES),
            short_break_minutes=record.get("shortBreakMinutes", DEFAULT_SHORT_BREAK_MINUTES),
            long_break_minutes=record.get("longBreakMinutes", DEFAULT_LONG_BREAK_MINUTES),
            long_break_interval=record.get("longBreakInterval", DEFAULT_LONG_BREAK_INTERVAL),
            auto_start_breaks=record.get("autoStartBreaks", True) is True,
            auto_start_focus=record.get("autoStartFocus", True) is True,
            is_default=record.get("isDefault", False) is True,
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "kind": self.kind,
            "focusMinutes": self.focus_minutes,
            "shortBreakMinutes": self.short_break_minutes,
            "longBreakMinutes": self.long_break_minutes,
            "longBreakInterval": self.long_break_interval,
            "autoStartBreaks": self.auto_start_breaks,
            "autoStartFocus": self.auto_start_focus,
            "isDefault": self.is_default,
        }


def _clamp(value: Any, low: int, high: int, fallback: int) -> int:
    if isinstance(value, bool):
        number = fallback
    elif isinstance(value, int):
        number = value
    elif isinstance(value, float):
        try:
            number = int(value)
        except (ValueError, OverflowError):
            number = fallback
    elif isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            number = fallback
    else:
        number = fallback
    return max(low, min(high, number))


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _clean_text(value: Any, limit: int) -> str:
    compact = " ".join(_as_text(value).split())
    return compact[:limit]
