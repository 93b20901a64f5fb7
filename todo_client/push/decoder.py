"""
Decoder for push messages broadcast by the TODO service.

The service sends one JSON document per WebSocket message::

    {"type": "new_todo" | "update_todo" | "delete_todo", "data": {...}}

``decode`` turns that text into an immutable ``DomainEvent``. It never
raises: malformed input comes back as a ``DecodeFailure`` carrying the raw
text and the reason, so the caller can log it and move on without
disturbing the channel or any pending subscription.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from todo_client.models import MessageType

# Payload fields every non-delete message must carry, with their JSON types.
_REQUIRED_RECORD_FIELDS: dict[str, type] = {"text": str, "completed": bool}


@dataclass(frozen=True)
class TodoPayload:
    """Entity described by a push message. Deletions carry only ``id``."""

    id: int
    text: str | None = None
    completed: bool | None = None


@dataclass(frozen=True)
class DomainEvent:
    """A decoded push notification."""

    kind: MessageType
    payload: TodoPayload


@dataclass(frozen=True)
class DecodeFailure:
    """A push message that could not be decoded, with the reason why."""

    raw: str
    reason: str


def _is_int(value: Any) -> bool:
    # bool is an int subclass; JSON true/false is never a valid id.
    return isinstance(value, int) and not isinstance(value, bool)


def decode(raw: str | bytes) -> DomainEvent | DecodeFailure:
    """
    Decode one raw push message.

    Args:
        raw: Text or UTF-8 bytes received from the channel.

    Returns:
        The decoded ``DomainEvent``, or a ``DecodeFailure`` describing why
        the message was rejected.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            text = bytes(raw).decode("utf-8")
        except UnicodeDecodeError:
            return DecodeFailure(raw=bytes(raw).decode("utf-8", "replace"), reason="payload is not valid UTF-8")
    else:
        text = raw

    try:
        document = json.loads(text)
    except (ValueError, RecursionError) as exc:
        return DecodeFailure(raw=text, reason=f"invalid JSON: {exc}")

    if not isinstance(document, dict):
        return DecodeFailure(raw=text, reason="message is not a JSON object")

    message_type = document.get("type")
    if message_type is None:
        return DecodeFailure(raw=text, reason="missing 'type'")
    try:
        kind = MessageType(message_type)
    except ValueError:
        return DecodeFailure(raw=text, reason=f"unknown message type {message_type!r}")

    data = document.get("data")
    if not isinstance(data, dict):
        return DecodeFailure(raw=text, reason="'data' must be a JSON object")

    todo_id = data.get("id")
    if not _is_int(todo_id):
        return DecodeFailure(raw=text, reason="'data.id' must be an integer")

    if kind is MessageType.DELETE_TODO:
        return DomainEvent(kind=kind, payload=TodoPayload(id=todo_id))

    for field, expected_type in _REQUIRED_RECORD_FIELDS.items():
        if field not in data:
            return DecodeFailure(raw=text, reason=f"missing 'data.{field}'")
        if not isinstance(data[field], expected_type):
            return DecodeFailure(
                raw=text, reason=f"'data.{field}' must be of type {expected_type.__name__}"
            )

    return DomainEvent(
        kind=kind,
        payload=TodoPayload(id=todo_id, text=data["text"], completed=data["completed"]),
    )
