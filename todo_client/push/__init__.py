"""
WebSocket push harness.

- ``channel``: owns the push connection and dispatches raw messages.
- ``decoder``: turns raw messages into ``DomainEvent`` values.
- ``coordinator``: lets tests wait for the event caused by a REST action.
"""

from todo_client.push.channel import ChannelListener, ChannelState, PushChannel
from todo_client.push.coordinator import EventWaitCoordinator, Subscription, event_matching
from todo_client.push.decoder import DecodeFailure, DomainEvent, TodoPayload, decode

__all__ = [
    "ChannelListener",
    "ChannelState",
    "DecodeFailure",
    "DomainEvent",
    "EventWaitCoordinator",
    "PushChannel",
    "Subscription",
    "TodoPayload",
    "decode",
    "event_matching",
]
