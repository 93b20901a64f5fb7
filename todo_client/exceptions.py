"""
Exception hierarchy for the TODO client.

Each failure mode a test can hit has its own type so that callers can tell
"the notification never arrived" apart from "the channel broke" apart from
"the server answered with an unexpected status".
"""

from __future__ import annotations


class TodoClientError(Exception):
    """Base class for all errors raised by the TODO client."""


class ConfigurationError(TodoClientError):
    """Raised when the selected environment profile is unknown or invalid."""


class ApiException(TodoClientError):
    """Raised when a REST response does not match the expected status or content type."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ChannelConnectionError(TodoClientError, ConnectionError):
    """Raised when the push channel cannot be opened or a send fails on the transport."""


class ChannelClosedError(TodoClientError):
    """Raised to a waiting caller when the push channel closed or failed underneath it."""


class EventWaitTimeout(TodoClientError, TimeoutError):
    """Raised when no matching push event arrived within the allotted window."""


class EventWaitCancelled(TodoClientError):
    """Raised when a pending wait was explicitly abandoned."""
