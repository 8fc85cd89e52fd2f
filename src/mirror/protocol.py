"""SyncMessage wire format exchanged between the primary and the mirror."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Literal, Mapping, Optional, Union

from session.constants import MIRROR_ACTIONS, SESSION_MODES

MESSAGE_STATE_PUSH = "state-push"
MESSAGE_CONTROL = "control"

ControlAction = Literal["start", "stop", "reset"]


@dataclass(frozen=True)
class StatePush:
    """Authoritative snapshot pushed from the primary to the mirror."""
    seconds_remaining: int
    running: bool
    mode: str
    duration_seconds: Optional[int] = None
    counts_up: bool = False

    @property
    def type(self) -> str:
        return MESSAGE_STATE_PUSH


@dataclass(frozen=True)
class ControlRequest:
    """Action requested by the mirror; the primary decides the outcome."""
    action: ControlAction

    @property
    def type(self) -> str:
        return MESSAGE_CONTROL


SyncMessage = Union[StatePush, ControlRequest]


def encode_message(
    message: SyncMessage,
    *,
    now_fn: Callable[[], datetime] | None = None,
) -> str:
    """Serialize a sync message with type and timestamp for delivery."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    if isinstance(message, StatePush):
        payload: dict[str, Any] = {
            "secondsRemaining": message.seconds_remaining,
            "running": message.running,
            "mode": message.mode,
        }
        if message.duration_seconds is not None:
            payload["durationSeconds"] = message.duration_seconds
        if message.counts_up:
            payload["countsUp"] = True
    else:
        payload = {"action": message.action}

    return json.dumps(
        {
            "type": message.type,
            "timestamp": now.isoformat(),
            **payload,
        }
    )


def decode_message(raw: str | bytes | Mapping[str, Any]) -> Optional[SyncMessage]:
    """Parse and validate an inbound message.

    Returns ``None`` for anything that is not a well-formed message of a known
    type, so receivers can ignore it without treating it as an error.
    """
    if isinstance(raw, Mapping):
        data: Any = raw
    else:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return None

    if not isinstance(data, Mapping):
        return None

    message_type = data.get("type")
    if message_type == MESSAGE_STATE_PUSH:
        seconds = data.get("secondsRemaining")
        running = data.get("running")
        mode = data.get("mode")
        duration = data.get("durationSeconds")
        if not _is_count(seconds) or not isinstance(running, bool):
            return None
        if mode not in SESSION_MODES:
            return None
        return StatePush(
            seconds_remaining=seconds,
            running=running,
            mode=mode,
            duration_seconds=duration if _is_count(duration) else None,
            counts_up=data.get("countsUp") is True,
        )

    if message_type == MESSAGE_CONTROL:
        action = data.get("action")
        if action not in MIRROR_ACTIONS:
            return None
        return ControlRequest(action=action)

    return None


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
