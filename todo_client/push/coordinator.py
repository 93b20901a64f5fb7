"""
Correlation of push notifications with REST actions.

REST calls return before the matching push notification necessarily
arrives, so a test cannot simply look for "the last message". Instead it
registers a ``Subscription`` (a predicate plus a completion signal) *before*
issuing the action, then parks until an event satisfying the predicate is
broadcast or the timeout elapses::

    subscription = coordinator.subscribe(event_matching(MessageType.NEW_TODO, text=text))
    todo = todo_steps.create_todo(request)
    event = subscription.wait(timeout=5)

or, with the ordering enforced for you::

    event = coordinator.await_event(predicate, timeout=5, trigger=lambda: todo_steps.delete_todo(todo.id))

Every decoded event is offered to every active subscription (broadcast).
A subscription completes with the first event it matches and is removed
from the registry in the same critical section, so it is never evaluated
again. Predicates should be scoped to an entity id and kind so activity
from tests running in parallel cannot satisfy them.

Outcomes of a wait are distinct exception types:

- ``EventWaitTimeout``: no matching event arrived in time.
- ``EventWaitCancelled``: the wait was abandoned (e.g. teardown).
- ``ChannelClosedError``: the push channel closed or broke while waiting.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from typing import Any, TypeVar

from todo_client.exceptions import ChannelClosedError, EventWaitCancelled, EventWaitTimeout
from todo_client.models import MessageType
from todo_client.push.channel import ChannelListener, PushChannel
from todo_client.push.decoder import DecodeFailure, DomainEvent, decode

logger = logging.getLogger(__name__)

Predicate = Callable[[DomainEvent], bool]
T = TypeVar("T")

# Decode failures kept for inspection by tests.
MAX_RECORDED_FAILURES = 100


def describe(predicate: Predicate) -> str:
    """Human-readable name of a predicate for log and error messages."""
    return getattr(predicate, "__qualname__", repr(predicate))


def event_matching(
    kind: MessageType,
    todo_id: int | None = None,
    **expected_fields: Any,
) -> Predicate:
    """
    Build a predicate matching events of ``kind`` for one entity.

    Args:
        kind: Message type to match.
        todo_id: Entity id to match. None matches any id.
        **expected_fields: Payload fields (``text``, ``completed``) that must
            equal the given values.

    Returns:
        A predicate suitable for ``EventWaitCoordinator.subscribe``.
    """

    def predicate(event: DomainEvent) -> bool:
        if event.kind is not kind:
            return False
        if todo_id is not None and event.payload.id != todo_id:
            return False
        return all(getattr(event.payload, name) == value for name, value in expected_fields.items())

    predicate.__qualname__ = f"event_matching({kind.value}, id={todo_id}, {expected_fields})"
    return predicate


class Subscription:
    """
    A registered interest in one push event.

    Created by ``EventWaitCoordinator.subscribe``; completed at most once,
    either with a matching event, a cancellation or a channel failure.
    """

    def __init__(self, coordinator: "EventWaitCoordinator", predicate: Predicate):
        self._coordinator = coordinator
        self.predicate = predicate
        self._done = threading.Event()
        self._event: DomainEvent | None = None
        self._error: Exception | None = None

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def _complete(self, event: DomainEvent) -> None:
        self._event = event
        self._done.set()

    def _abort(self, error: Exception) -> None:
        self._error = error
        self._done.set()

    def wait(self, timeout: float) -> DomainEvent:
        """
        Block until a matching event arrives.

        Args:
            timeout: Maximum seconds to wait.

        Returns:
            The matching event.

        Raises:
            EventWaitTimeout: No match within ``timeout`` seconds.
            EventWaitCancelled: The subscription was cancelled.
            ChannelClosedError: The channel closed or failed.
        """
        if not self._done.wait(timeout):
            # A match may have landed between the wait expiring and this
            # removal; only time out if the subscription was still active.
            if self._coordinator._discard(self):
                self._abort(
                    EventWaitTimeout(f"No event matching {describe(self.predicate)} within {timeout}s")
                )
                raise self._error
            self._done.wait()
        if self._error is not None:
            raise self._error
        assert self._event is not None
        return self._event

    def cancel(self, reason: str = "cancelled") -> bool:
        """
        Abandon the wait, releasing any caller parked in ``wait``.

        Returns:
            True if the subscription was still pending.
        """
        if self._coordinator._discard(self):
            self._abort(EventWaitCancelled(reason))
            return True
        return False


class EventWaitCoordinator(ChannelListener):
    """
    Broadcasts decoded push events to every active subscription.

    The coordinator is attached to a ``PushChannel`` as a listener: raw
    messages arrive through ``on_message`` on the channel's reader thread
    and are decoded and published there. Callers park on their own
    subscription, so any number of waits can be pending while the reader
    keeps delivering.
    """

    def __init__(self) -> None:
        # Reentrant: predicates run under it and may query the coordinator.
        self._lock = threading.RLock()
        self._subscriptions: list[Subscription] = []
        self._decode_failures: deque[DecodeFailure] = deque(maxlen=MAX_RECORDED_FAILURES)

    def attach(self, channel: PushChannel) -> "EventWaitCoordinator":
        """Register this coordinator as a listener on ``channel``."""
        channel.add_listener(self)
        return self

    @property
    def pending(self) -> int:
        """Number of active subscriptions."""
        with self._lock:
            return len(self._subscriptions)

    @property
    def decode_failures(self) -> list[DecodeFailure]:
        with self._lock:
            return list(self._decode_failures)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def subscribe(self, predicate: Predicate) -> Subscription:
        """
        Register interest in the first event satisfying ``predicate``.

        Must be called before the action that triggers the event.
        """
        subscription = Subscription(self, predicate)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.debug("Subscribed %s", describe(predicate))
        return subscription

    def _discard(self, subscription: Subscription) -> bool:
        with self._lock:
            try:
                self._subscriptions.remove(subscription)
            except ValueError:
                return False
        return True

    def await_event(
        self,
        predicate: Predicate,
        timeout: float,
        trigger: Callable[[], T] | None = None,
    ) -> DomainEvent:
        """
        Wait for the first event satisfying ``predicate``.

        Args:
            predicate: Condition the event must satisfy.
            timeout: Maximum seconds to wait.
            trigger: Optional action run after subscribing and before
                waiting, typically the REST call that causes the event.
                If it raises, the subscription is cancelled and the error
                propagates.

        Returns:
            The matching event.
        """
        subscription = self.subscribe(predicate)
        if trigger is not None:
            try:
                trigger()
            except BaseException:
                subscription.cancel("trigger raised")
                raise
        return subscription.wait(timeout)

    def cancel_all(self, reason: str = "cancelled") -> int:
        """
        Cancel every pending subscription.

        Returns:
            The number of subscriptions released.
        """
        return self._abort_all(lambda: EventWaitCancelled(reason))

    def _abort_all(self, make_error: Callable[[], Exception]) -> int:
        with self._lock:
            released, self._subscriptions = self._subscriptions, []
        for subscription in released:
            subscription._abort(make_error())
        if released:
            logger.info("Released %d pending subscription(s)", len(released))
        return len(released)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def dispatch(self, raw: str | bytes) -> DomainEvent | None:
        """
        Decode a raw message and publish it.

        Malformed messages are logged, recorded in ``decode_failures`` and
        dropped; they never complete a subscription.

        Returns:
            The published event, or None if the message was dropped.
        """
        result = decode(raw)
        if isinstance(result, DecodeFailure):
            logger.warning("Dropping undecodable push message (%s): %s", result.reason, result.raw)
            with self._lock:
                self._decode_failures.append(result)
            return None
        self.publish(result)
        return result

    def publish(self, event: DomainEvent) -> int:
        """
        Offer ``event`` to every active subscription.

        Returns:
            The number of subscriptions the event completed.
        """
        matched: list[Subscription] = []
        with self._lock:
            for subscription in list(self._subscriptions):
                try:
                    is_match = subscription.predicate(event)
                except Exception:
                    logger.exception(
                        "Predicate %s raised on %s", describe(subscription.predicate), event
                    )
                    continue
                # A predicate may have cancelled its own subscription.
                if is_match and subscription in self._subscriptions:
                    self._subscriptions.remove(subscription)
                    matched.append(subscription)
        for subscription in matched:
            subscription._complete(event)
        logger.debug("Published %s to %d subscription(s)", event, len(matched))
        return len(matched)

    # ------------------------------------------------------------------
    # ChannelListener
    # ------------------------------------------------------------------

    def on_message(self, channel: PushChannel, raw: str | bytes) -> None:
        self.dispatch(raw)

    def on_closed(self, channel: PushChannel, code: int, reason: str) -> None:
        self._abort_all(
            lambda: ChannelClosedError(f"Push channel closed (code={code}, reason={reason!r})")
        )

    def on_failure(self, channel: PushChannel, error: BaseException) -> None:
        self._abort_all(lambda: ChannelClosedError(f"Push channel failed: {error}"))
