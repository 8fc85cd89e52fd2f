"""Detached mirror view: sync protocol, channel, surface hosts, and clock."""

from .channel import MirrorHandle, MirrorOptions, MirrorSyncChannel
from .clock import DetachedMirrorClock, MirrorState
from .config import MirrorConfig, MirrorConfigurationError
from .errors import (
    MirrorError,
    SurfaceClosedError,
    SurfaceCreationDenied,
    UnsupportedSurface,
)
from .local import LocalSurface, LocalSurfaceHost
from .protocol import ControlRequest, StatePush, SyncMessage, decode_message, encode_message

__all__ = [
    "ControlRequest",
    "DetachedMirrorClock",
    "LocalSurface",
    "LocalSurfaceHost",
    "MirrorConfig",
    "MirrorConfigurationError",
    "MirrorError",
    "MirrorHandle",
    "MirrorOptions",
    "MirrorState",
    "MirrorSyncChannel",
    "StatePush",
    "SurfaceClosedError",
    "SurfaceCreationDenied",
    "SyncMessage",
    "UnsupportedSurface",
    "decode_message",
    "encode_message",
]
