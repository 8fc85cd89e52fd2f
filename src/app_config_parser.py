"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    DEFAULT_SETTINGS_FILE,
    AppConfig,
    AppConfigurationError,
    MirrorSettings,
    SettingsStoreSettings,
    TimerSettings,
)


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    timer = _parse_timer_settings(_section(raw, "timer"))
    mirror = _parse_mirror_settings(_section(raw, "mirror"))
    settings = _parse_settings_store(_section(raw, "settings"), base_dir=base_dir)

    return AppConfig(
        timer=timer,
        mirror=mirror,
        settings=settings,
        source_file=source_file,
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    tick_seconds = _as_float(section.get("tick_seconds", 1.0), "timer.tick_seconds")
    if tick_seconds <= 0:
        raise AppConfigurationError("timer.tick_seconds must be > 0.")

    fallback = _as_int(
        section.get("ambient_fallback_minutes", 5),
        "timer.ambient_fallback_minutes",
    )
    if fallback < 1:
        raise AppConfigurationError("timer.ambient_fallback_minutes must be >= 1.")

    return TimerSettings(tick_seconds=tick_seconds, ambient_fallback_minutes=fallback)


def _parse_mirror_settings(section: Mapping[str, Any]) -> MirrorSettings:
    return MirrorSettings(
        enabled=_as_bool(section.get("enabled", True), "mirror.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "mirror.host"),
        port=_as_int(section.get("port", 8766), "mirror.port"),
        launcher=_as_str(
            section.get("launcher", "x-terminal-emulator -e"),
            "mirror.launcher",
        ),
        open_timeout_seconds=_as_float(
            section.get("open_timeout_seconds", 5.0),
            "mirror.open_timeout_seconds",
        ),
        liveness_poll_seconds=_as_float(
            section.get("liveness_poll_seconds", 1.0),
            "mirror.liveness_poll_seconds",
        ),
        width=_as_int(section.get("width", 400), "mirror.width"),
        height=_as_int(section.get("height", 250), "mirror.height"),
    )


def _parse_settings_store(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> SettingsStoreSettings:
    raw_file = _as_str(section.get("file", DEFAULT_SETTINGS_FILE), "settings.file")
    if not raw_file:
        raise AppConfigurationError("settings.file cannot be empty.")
    return SettingsStoreSettings(file=_resolve_path(base_dir, raw_file))


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _resolve_path(base_dir: Path, raw: str) -> str:
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
