"""
Connection manager for the TODO service push channel.

``PushChannel`` owns the single WebSocket connection a test session uses to
observe change notifications. It opens the connection with the
``websockets`` synchronous client, reads messages on a background thread and
hands every raw message to the registered listeners.

State transitions::

    CLOSED -> CONNECTING -> OPEN -> CLOSING -> CLOSED
                  |           |
                  +-----------+--> CLOSED (failure, last_error set)

There is no automatic reconnection: a failed channel stays closed until a
caller opens it again.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import ClientConnection, connect

from config import get_config
from todo_client.exceptions import ChannelConnectionError

logger = logging.getLogger(__name__)

NORMAL_CLOSURE = 1000
# Reported when the peer vanished without a close frame.
ABNORMAL_CLOSURE = 1006
CLEAN_CLOSE_CODES = frozenset({NORMAL_CLOSURE, 1001})


class ChannelState(str, Enum):
    """Lifecycle states of a push channel."""

    CLOSED = "closed"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"


class ChannelListener:
    """
    Receives lifecycle and message callbacks from a ``PushChannel``.

    Every callback runs on the channel's reader thread and must return
    quickly; the reader does not fetch the next message until all listeners
    have returned. Subclasses override only what they need.
    """

    def on_open(self, channel: "PushChannel") -> None:
        """Called once the connection is established."""

    def on_message(self, channel: "PushChannel", raw: str | bytes) -> None:
        """Called for every message received."""

    def on_closing(self, channel: "PushChannel", code: int, reason: str) -> None:
        """Called when a local close has been requested."""

    def on_closed(self, channel: "PushChannel", code: int, reason: str) -> None:
        """Called once the connection is fully closed."""

    def on_failure(self, channel: "PushChannel", error: BaseException) -> None:
        """Called when the connection could not be opened or broke."""


class PushChannel:
    """
    A single WebSocket connection to the TODO service push endpoint.

    Example:
        channel = PushChannel()
        channel.add_message_listener(print)
        channel.open("ws://localhost:8080/ws")
        ...
        channel.close()
    """

    def __init__(self, url: str | None = None, open_timeout: float | None = None):
        settings = get_config()
        self.url = url or settings.TODO_WS_URL
        self.open_timeout = open_timeout if open_timeout is not None else settings.TODO_TIMEOUT_SECONDS

        self._lock = threading.Lock()
        self._state = ChannelState.CLOSED
        self._last_error: BaseException | None = None
        self._connection: ClientConnection | None = None
        self._reader: threading.Thread | None = None

        self._listeners: list[ChannelListener] = []
        self._message_callbacks: list[Callable[[str | bytes], None]] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is ChannelState.OPEN

    @property
    def last_error(self) -> BaseException | None:
        return self._last_error

    # ------------------------------------------------------------------
    # Listener registration
    # ------------------------------------------------------------------

    def add_listener(self, listener: ChannelListener) -> None:
        """Register a lifecycle listener."""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: ChannelListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def add_message_listener(self, callback: Callable[[str | bytes], None]) -> None:
        """Register a plain callable invoked with every raw message."""
        with self._lock:
            self._message_callbacks.append(callback)

    def remove_message_listener(self, callback: Callable[[str | bytes], None]) -> None:
        with self._lock:
            if callback in self._message_callbacks:
                self._message_callbacks.remove(callback)

    def _notify(self, method: str, *args) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                getattr(listener, method)(self, *args)
            except Exception:
                logger.exception("Push channel listener %r failed in %s", listener, method)

    def _deliver(self, raw: str | bytes) -> None:
        logger.info("Received message: %s", raw)
        with self._lock:
            callbacks = list(self._message_callbacks)
        for callback in callbacks:
            try:
                callback(raw)
            except Exception:
                logger.exception("Push message callback %r failed", callback)
        self._notify("on_message", raw)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self, url: str | None = None) -> "PushChannel":
        """
        Establish the push connection and start delivering messages.

        Args:
            url: WebSocket URL. Defaults to the URL given at construction.

        Returns:
            This channel, now open.

        Raises:
            ChannelConnectionError: If the transport cannot be established.
        """
        with self._lock:
            if self._state is not ChannelState.CLOSED:
                logger.warning("Push channel already %s; open() ignored", self._state.value)
                return self
            if url is not None:
                self.url = url
            self._state = ChannelState.CONNECTING
            self._last_error = None

        logger.info("Attempting to connect to WebSocket server at %s", self.url)
        try:
            connection = connect(self.url, open_timeout=self.open_timeout)
        except (OSError, WebSocketException) as exc:
            with self._lock:
                self._state = ChannelState.CLOSED
                self._last_error = exc
            logger.error("WebSocket connection to %s failed: %s", self.url, exc)
            self._notify("on_failure", exc)
            raise ChannelConnectionError(f"Could not connect to {self.url}: {exc}") from exc

        with self._lock:
            self._connection = connection
            self._state = ChannelState.OPEN
            self._reader = threading.Thread(
                target=self._read_loop,
                args=(connection,),
                name="push-channel-reader",
                daemon=True,
            )
        logger.info("WebSocket connection opened: %s", self.url)
        self._notify("on_open")
        self._reader.start()
        return self

    def _read_loop(self, connection: ClientConnection) -> None:
        try:
            while True:
                self._deliver(connection.recv())
        except ConnectionClosed as exc:
            code = exc.rcvd.code if exc.rcvd is not None else ABNORMAL_CLOSURE
            reason = exc.rcvd.reason if exc.rcvd is not None else ""
            with self._lock:
                requested = self._state is ChannelState.CLOSING
                failed = not requested and code not in CLEAN_CLOSE_CODES
                self._state = ChannelState.CLOSED
                self._connection = None
                if failed:
                    self._last_error = exc

            if not failed:
                logger.info("WebSocket closed: code=%s, reason=%s", code, reason)
                self._notify("on_closed", code, reason)
            else:
                logger.error("WebSocket failure: %s", exc)
                self._notify("on_failure", exc)

    def send(self, data: str | bytes) -> bool:
        """
        Send a message on the open channel.

        Returns:
            True if the message was handed to the transport, False if the
            channel is not open.

        Raises:
            ChannelConnectionError: If the transport fails while sending.
        """
        with self._lock:
            connection = self._connection if self._state is ChannelState.OPEN else None
        if connection is None:
            logger.error("Cannot send message %r: WebSocket is not connected", data)
            return False

        try:
            connection.send(data)
        except ConnectionClosed as exc:
            with self._lock:
                self._last_error = exc
            raise ChannelConnectionError(f"Send failed, connection closed: {exc}") from exc
        logger.info("Sent message: %s", data)
        return True

    def close(self, code: int = NORMAL_CLOSURE, reason: str = "Normal closure") -> None:
        """
        Close the channel.

        Closing a channel that is already closed, closing or was never
        opened logs a warning and does nothing.
        """
        with self._lock:
            if self._state is not ChannelState.OPEN or self._connection is None:
                logger.warning(
                    "Attempted to close WebSocket connection, but it is %s", self._state.value
                )
                return
            self._state = ChannelState.CLOSING
            connection = self._connection
            reader = self._reader

        logger.info("Closing WebSocket connection. Code: %s, Reason: %s", code, reason)
        self._notify("on_closing", code, reason)
        connection.close(code=code, reason=reason)

        if reader is not None and reader is not threading.current_thread():
            reader.join(timeout=self.open_timeout)

    def __enter__(self) -> "PushChannel":
        if self._state is ChannelState.CLOSED:
            self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if self._state is ChannelState.OPEN:
            self.close()
