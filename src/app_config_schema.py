"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_CONFIG_FILE = "config.toml"
DEFAULT_SETTINGS_FILE = "~/.config/focus-mirror/settings.json"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class TimerSettings:
    """Clock period and Ambient-mode fallback from `[timer]`."""
    tick_seconds: float = 1.0
    ambient_fallback_minutes: int = 5


@dataclass(frozen=True)
class MirrorSettings:
    """Detached view host settings from `[mirror]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8766
    launcher: str = "x-terminal-emulator -e"
    open_timeout_seconds: float = 5.0
    liveness_poll_seconds: float = 1.0
    width: int = 400
    height: int = 250


@dataclass(frozen=True)
class SettingsStoreSettings:
    """Location of the persisted settings document from `[settings]`."""
    file: str = DEFAULT_SETTINGS_FILE


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    timer: TimerSettings
    mirror: MirrorSettings
    settings: SettingsStoreSettings
    source_file: str
