from __future__ import annotations

import os
import sys
import tomllib
from pathlib import Path

from app_config_parser import parse_app_config
from app_config_schema import (
    DEFAULT_CONFIG_FILE,
    AppConfig,
    AppConfigurationError,
    MirrorSettings,
    SettingsStoreSettings,
    TimerSettings,
)

__all__ = [
    "AppConfig",
    "AppConfigurationError",
    "MirrorSettings",
    "SettingsStoreSettings",
    "TimerSettings",
    "load_app_config",
    "resolve_config_path",
]


def resolve_config_path(config_path: str | None = None) -> Path:
    env_path = os.getenv("APP_CONFIG_FILE")
    raw = config_path or env_path or DEFAULT_CONFIG_FILE
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    if path.exists():
        return path

    # Frozen builds ship config.toml next to the executable.
    if config_path is None and env_path is None and getattr(sys, "frozen", False):
        executable_config = Path(sys.executable).resolve().parent / DEFAULT_CONFIG_FILE
        if executable_config.exists():
            return executable_config

    return path


def load_app_config(config_path: str | None = None) -> AppConfig:
    """Load `config.toml`; a missing file yields the built-in defaults."""
    path = resolve_config_path(config_path)
    if not path.exists():
        return parse_app_config({}, base_dir=path.parent, source_file="")
    if not path.is_file():
        raise AppConfigurationError(f"Config path is not a file: {path}")

    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error

    return parse_app_config(raw, base_dir=path.parent, source_file=str(path))
