"""Settings persistence capability and appearance lookup tables."""

from .appearance import (
    AppearanceSettings,
    Font,
    ModeAppearance,
    Wallpaper,
    resolve_font,
    resolve_wallpaper,
)
from .store import (
    FIELD_APPEARANCE,
    FIELD_PRESETS,
    FIELD_SELECTED_PRESET,
    InMemorySettingsRepository,
    JsonFileSettingsRepository,
    SettingsRepository,
    SettingsStoreError,
)

__all__ = [
    "AppearanceSettings",
    "FIELD_APPEARANCE",
    "FIELD_PRESETS",
    "FIELD_SELECTED_PRESET",
    "Font",
    "InMemorySettingsRepository",
    "JsonFileSettingsRepository",
    "ModeAppearance",
    "SettingsRepository",
    "SettingsStoreError",
    "Wallpaper",
    "resolve_font",
    "resolve_wallpaper",
]
