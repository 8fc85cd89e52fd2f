"""Configuration model for the websocket-backed detached view host."""

from __future__ import annotations

import shlex
from dataclasses import dataclass


class MirrorConfigurationError(Exception):
    """Raised when mirror host configuration is invalid."""


WEBSOCKET_PATH = "/ws"
HEALTHZ_PATH = "/healthz"
DEFAULT_LAUNCHER = "x-terminal-emulator -e"


@dataclass(frozen=True)
class MirrorConfig:
    """Validated detached view settings derived from app settings."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8766
    launcher: tuple[str, ...] = tuple(shlex.split(DEFAULT_LAUNCHER))
    open_timeout_seconds: float = 5.0
    liveness_poll_seconds: float = 1.0
    width: int = 400
    height: int = 250

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise MirrorConfigurationError("mirror.host cannot be empty")

        if not 0 <= self.port <= 65535:
            raise MirrorConfigurationError(
                f"mirror.port must be in [0, 65535], got: {self.port}"
            )

        if self.open_timeout_seconds <= 0:
            raise MirrorConfigurationError("mirror.open_timeout_seconds must be > 0")

        if self.liveness_poll_seconds <= 0:
            raise MirrorConfigurationError("mirror.liveness_poll_seconds must be > 0")

        if self.width <= 0 or self.height <= 0:
            raise MirrorConfigurationError("mirror.width and mirror.height must be > 0")

    @property
    def websocket_path(self) -> str:
        return WEBSOCKET_PATH

    @classmethod
    def from_settings(cls, settings) -> "MirrorConfig":
        try:
            launcher = tuple(shlex.split(settings.launcher or ""))
        except ValueError as error:
            raise MirrorConfigurationError(f"mirror.launcher is invalid: {error}") from error
        return cls(
            enabled=bool(settings.enabled),
            host=settings.host,
            port=settings.port,
            launcher=launcher,
            open_timeout_seconds=settings.open_timeout_seconds,
            liveness_poll_seconds=settings.liveness_poll_seconds,
            width=settings.width,
            height=settings.height,
        )
