"""Settings repository capability consumed by the preset catalog.

The repository speaks plain records: ``load_pomodoro_settings()`` returns a
mapping with ``selectedPresetId``, ``presets`` and ``appearance`` keys and
``save_pomodoro_settings(partial, field_mask)`` writes only the masked keys.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol, Sequence

FIELD_SELECTED_PRESET = "selectedPresetId"
FIELD_PRESETS = "presets"
FIELD_APPEARANCE = "appearance"

SETTINGS_FIELDS: frozenset[str] = frozenset(
    {FIELD_SELECTED_PRESET, FIELD_PRESETS, FIELD_APPEARANCE}
)


class SettingsStoreError(Exception):
    """Raised when settings cannot be loaded from or saved to the store."""


class SettingsRepository(Protocol):
    def load_pomodoro_settings(self) -> Mapping[str, Any]:
        ...

    def save_pomodoro_settings(
        self,
        partial: Mapping[str, Any],
        field_mask: Sequence[str],
    ) -> None:
        ...


def _masked_update(
    current: Mapping[str, Any],
    partial: Mapping[str, Any],
    field_mask: Sequence[str],
) -> dict[str, Any]:
    unknown = [field for field in field_mask if field not in SETTINGS_FIELDS]
    if unknown:
        raise SettingsStoreError(f"Unknown settings fields: {', '.join(unknown)}")

    updated = dict(current)
    for field in field_mask:
        if field in partial:
            updated[field] = copy.deepcopy(partial[field])
    return updated


class InMemorySettingsRepository:
    """Process-local settings store, used when no settings file is configured."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._data: dict[str, Any] = copy.deepcopy(dict(initial or {}))

    def load_pomodoro_settings(self) -> Mapping[str, Any]:
        return copy.deepcopy(self._data)

    def save_pomodoro_settings(
        self,
        partial: Mapping[str, Any],
        field_mask: Sequence[str],
    ) -> None:
        self._data = _masked_update(self._data, partial, field_mask)


class JsonFileSettingsRepository:
    """Settings store backed by a JSON document on disk."""

    def __init__(self, path: Path | str, logger: Optional[logging.Logger] = None):
        self._path = Path(path).expanduser()
        self._logger = logger or logging.getLogger("settings")

    @property
    def path(self) -> Path:
        return self._path

    def load_pomodoro_settings(self) -> Mapping[str, Any]:
        if not self._path.exists():
            self._logger.info("Settings file not found, using defaults: %s", self._path)
            return {}

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as error:
            raise SettingsStoreError(
                f"Failed to read settings file {self._path}: {error}"
            ) from error

        if not isinstance(raw, dict):
            raise SettingsStoreError(
                f"Settings file {self._path} must contain a JSON object."
            )
        return raw

    def save_pomodoro_settings(
        self,
        partial: Mapping[str, Any],
        field_mask: Sequence[str],
    ) -> None:
        try:
            current = self.load_pomodoro_settings()
        except SettingsStoreError as error:
            self._logger.warning("Overwriting unreadable settings file: %s", error)
            current = {}

        updated = _masked_update(current, partial, field_mask)
        temp_path = self._path.with_suffix(".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(
                json.dumps(updated, indent=2, sort_keys=True),
                encoding="utf-8",
            )
            os.replace(temp_path, self._path)
        except (OSError, TypeError, ValueError) as error:
            raise SettingsStoreError(
                f"Failed to write settings file {self._path}: {error}"
            ) from error
