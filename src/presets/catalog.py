"""Built-in preset catalog plus persisted selection and user presets."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from settings import (
    FIELD_APPEARANCE,
    FIELD_PRESETS,
    FIELD_SELECTED_PRESET,
    AppearanceSettings,
    SettingsRepository,
    SettingsStoreError,
)

from .constants import (
    CUSTOM_PRESET_PREFIX,
    DEFAULT_PRESET_ID,
    KIND_COUNTDOWN,
    KIND_CUSTOM,
    KIND_POMODORO,
    KIND_STOPWATCH,
)
from .model import Preset

_DEFAULT_PRESETS: tuple[Preset, ...] = (
    Preset(
        id=DEFAULT_PRESET_ID,
        name="Classic Pomodoro",
        description="25 minutes focus, 5 minutes break, 15 minutes long break",
        kind=KIND_POMODORO,
        focus_minutes=25,
        short_break_minutes=5,
        long_break_minutes=15,
        long_break_interval=4,
        auto_start_breaks=True,
        auto_start_focus=True,
        is_default=True,
    ),
    Preset(
        id="pomodoro-short",
        name="Short Pomodoro",
        description="15 minutes focus, 3 minutes break, 10 minutes long break",
        kind=KIND_POMODORO,
        focus_minutes=15,
        short_break_minutes=3,
        long_break_minutes=10,
        long_break_interval=4,
        auto_start_breaks=True,
        auto_start_focus=True,
        is_default=True,
    ),
    Preset(
        id="52-17-rule",
        name="52/17 Rule",
        description="52 minutes focus, 17 minutes break",
        kind=KIND_POMODORO,
        focus_minutes=52,
        short_break_minutes=17,
        long_break_minutes=17,
        long_break_interval=1,
        auto_start_breaks=True,
        auto_start_focus=True,
        is_default=True,
    ),
    Preset(
        id="animedoro",
        name="Animedoro",
        description="90 minutes focus, 15 minutes break, 30 minutes long break",
        kind=KIND_POMODORO,
        focus_minutes=90,
        short_break_minutes=15,
        long_break_minutes=30,
        long_break_interval=2,
        auto_start_breaks=True,
        auto_start_focus=True,
        is_default=True,
    ),
    Preset(
        id="stopwatch",
        name="Stopwatch",
        description="Count up timer for flexible timing",
        kind=KIND_STOPWATCH,
        focus_minutes=0,
        short_break_minutes=5,
        long_break_minutes=15,
        long_break_interval=4,
        auto_start_breaks=False,
        auto_start_focus=False,
        is_default=True,
    ),
    Preset(
        id="countdown-60",
        name="Countdown 60",
        description="60 minutes countdown timer",
        kind=KIND_COUNTDOWN,
        focus_minutes=60,
        short_break_minutes=5,
        long_break_minutes=15,
        long_break_interval=1,
        auto_start_breaks=False,
        auto_start_focus=False,
        is_default=True,
    ),
    Preset(
        id="countdown-30",
        name="Countdown 30",
        description="30 minutes countdown timer",
        kind=KIND_COUNTDOWN,
        focus_minutes=30,
        short_break_minutes=5,
        long_break_minutes=10,
        long_break_interval=1,
        auto_start_breaks=False,
        auto_start_focus=False,
        is_default=True,
    ),
)

_DEFAULT_IDS: frozenset[str] = frozenset(preset.id for preset in _DEFAULT_PRESETS)


def defaults() -> tuple[Preset, ...]:
    """Return the built-in presets in display order."""
    return _DEFAULT_PRESETS


def resolve(preset_id: Optional[str], all_presets: Iterable[Preset]) -> Preset:
    """Find a preset by id, degrading to Classic Pomodoro when it is missing."""
    for preset in all_presets:
        if preset.id == preset_id:
            return preset
    return _DEFAULT_PRESETS[0]


def merge(
    stored_presets: Any,
    *,
    logger: Optional[logging.Logger] = None,
) -> list[Preset]:
    """Union of the built-ins and any valid stored user presets.

    ``stored_presets`` comes straight from storage and may be anything. Stored
    copies of built-ins are ignored so that the built-in set is always the
    canonical one, and later duplicates of an id are dropped.
    """
    log = logger or logging.getLogger("presets")
    merged = list(_DEFAULT_PRESETS)
    if stored_presets is None:
        return merged
    if not isinstance(stored_presets, (list, tuple)):
        log.warning("Ignoring stored presets of type %s", type(stored_presets).__name__)
        return merged

    seen = set(_DEFAULT_IDS)
    for record in stored_presets:
        if isinstance(record, Preset):
            preset = record
        elif isinstance(record, Mapping):
            try:
                preset = Preset.from_record(record)
            except ValueError as error:
                log.warning("Skipping stored preset: %s", error)
                continue
        else:
            log.warning("Skipping stored preset of type %s", type(record).__name__)
            continue

        if preset.is_default or preset.id in seen:
            continue
        seen.add(preset.id)
        merged.append(preset)
    return merged


def _millisecond_id() -> str:
    return f"{CUSTOM_PRESET_PREFIX}{int(time.time() * 1000)}"


class PresetCatalog:
    """Selected preset and user presets, persisted best-effort.

    Every mutation lands in memory first; the repository write that follows
    may fail without affecting the running timer.
    """

    def __init__(
        self,
        repository: SettingsRepository,
        *,
        logger: Optional[logging.Logger] = None,
        id_factory: Callable[[], str] = _millisecond_id,
    ):
        self._repository = repository
        self._logger = logger or logging.getLogger("presets")
        self._id_factory = id_factory
        self._presets: list[Preset] = list(_DEFAULT_PRESETS)
        self._selected_id = DEFAULT_PRESET_ID
        self._appearance = AppearanceSettings()

    @property
    def presets(self) -> tuple[Preset, ...]:
        return tuple(self._presets)

    @property
    def selected_id(self) -> str:
        return self._selected_id

    @property
    def active(self) -> Preset:
        return resolve(self._selected_id, self._presets)

    @property
    def appearance(self) -> AppearanceSettings:
        return self._appearance

    def get(self, preset_id: str) -> Optional[Preset]:
        for preset in self._presets:
            if preset.id == preset_id:
                return preset
        return None

    def load(self) -> Preset:
        """Load stored settings, falling back to built-ins on any failure."""
        try:
            raw = self._repository.load_pomodoro_settings()
        except SettingsStoreError as error:
            self._logger.warning("Settings unavailable, using built-in presets: %s", error)
            raw = {}

        if not isinstance(raw, Mapping):
            self._logger.warning("Ignoring malformed settings payload")
            raw = {}

        self._presets = merge(raw.get(FIELD_PRESETS), logger=self._logger)
        selected = raw.get(FIELD_SELECTED_PRESET)
        self._selected_id = resolve(
            selected if isinstance(selected, str) else None,
            self._presets,
        ).id
        self._appearance = AppearanceSettings.from_record(raw.get(FIELD_APPEARANCE))
        self._logger.info(
            "Loaded %d presets (selected=%s)",
            len(self._presets),
            self._selected_id,
        )
        return self.active

    def select(self, preset_id: str) -> Preset:
        preset = resolve(preset_id, self._presets)
        if preset.id != preset_id:
            self._logger.warning("Unknown preset %r, selecting %s", preset_id, preset.id)
        self._selected_id = preset.id
        self._save(FIELD_SELECTED_PRESET)
        return preset

    def create(self, *, base: Optional[Preset] = None, **fields: Any) -> Preset:
        """Add a user preset, optionally copied from ``base``, and select it."""
        preset_id = self._unique_id()
        if base is not None:
            preset = Preset(
                id=preset_id,
                name=fields.pop("name", f"{base.name} (Custom)"),
                description=base.description,
                kind=KIND_CUSTOM,
                focus_minutes=base.focus_minutes,
                short_break_minutes=base.short_break_minutes,
                long_break_minutes=base.long_break_minutes,
                long_break_interval=base.long_break_interval,
                auto_start_breaks=base.auto_start_breaks,
                auto_start_focus=base.auto_start_focus,
            ).with_changes(**fields)
        else:
            fields.setdefault("name", "Custom Preset")
            fields.setdefault("description", "A custom timer preset")
            fields.setdefault("kind", KIND_CUSTOM)
            fields.pop("id", None)
            fields.pop("is_default", None)
            preset = Preset(id=preset_id, **fields)

        self._presets.append(preset)
        self._selected_id = preset.id
        self._logger.info("Created preset %s (%s)", preset.id, preset.name)
        self._save(FIELD_SELECTED_PRESET, FIELD_PRESETS)
        return preset

    def update(self, preset_id: str, **changes: Any) -> Preset:
        """Edit a preset; editing a built-in creates and edits a user copy."""
        current = self.get(preset_id)
        if current is None:
            raise KeyError(preset_id)
        if current.is_default:
            return self.create(base=current, **changes)

        edited = current.with_changes(**changes)
        self._presets = [edited if p.id == preset_id else p for p in self._presets]
        self._logger.info("Updated preset %s", preset_id)
        self._save(FIELD_PRESETS)
        return edited

    def delete(self, preset_id: str) -> bool:
        """Remove a user preset. Built-ins are never removed."""
        current = self.get(preset_id)
        if current is None or current.is_default:
            return False

        self._presets = [p for p in self._presets if p.id != preset_id]
        if self._selected_id == preset_id:
            self._selected_id = DEFAULT_PRESET_ID
        self._logger.info("Deleted preset %s", preset_id)
        self._save(FIELD_SELECTED_PRESET, FIELD_PRESETS)
        return True

    def _unique_id(self) -> str:
        taken = {preset.id for preset in self._presets}
        candidate = self._id_factory()
        suffix = 1
        unique = candidate
        while unique in taken:
            unique = f"{candidate}-{suffix}"
            suffix += 1
        return unique

    def _save(self, *field_mask: str) -> None:
        partial = {
            FIELD_SELECTED_PRESET: self._selected_id,
            FIELD_PRESETS: [p.to_record() for p in self._presets if not p.is_default],
        }
        try:
            self._repository.save_pomodoro_settings(partial, list(field_mask))
        except SettingsStoreError as error:
            self._logger.warning("Failed to save pomodoro settings: %s", error)
