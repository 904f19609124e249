"""
Front Office Event Bus — Subscriber Registry
============================================
Who hears what. Handlers are keyed by event type string
(engine.domain.action); an event class carrying `event_type` is
accepted wherever a type string is.

Handlers for one type are kept in the order they were added and
each handler may appear once per type. An engine cannot listen to
its own events unless the registration says so. State lives in
memory behind a lock.
"""

import logging
from threading import Lock
from typing import Callable, Dict, FrozenSet, List, NamedTuple, Union

from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
    UnknownSubscriberError,
)

logger = logging.getLogger("front_office.events")

EventTypeRef = Union[str, type]


class Subscription(NamedTuple):
    handler: Callable
    engine: str


def resolve_event_type(event_type: EventTypeRef) -> str:
    """Accept 'engine.domain.action' or a class carrying event_type."""
    if isinstance(event_type, type):
        resolved = getattr(event_type, "event_type", "")
        if not resolved:
            raise InvalidEventTypeFormat(event_type.__name__)
        return resolved
    return event_type


def owning_engine(event_type: str) -> str:
    return event_type.partition(".")[0]


def check_event_type(event_type: str) -> str:
    if not isinstance(event_type, str) or not event_type:
        raise InvalidEventTypeFormat(str(event_type or ""))
    segments = event_type.strip().split(".")
    if len(segments) < 3 or "" in segments:
        raise InvalidEventTypeFormat(event_type)
    return event_type


def _describe(handler: Callable) -> str:
    return getattr(handler, "__qualname__", str(handler))


class SubscriberRegistry:
    """Event type → ordered list of Subscription."""

    def __init__(self):
        self._lock = Lock()
        self._by_type: Dict[str, List[Subscription]] = {}

    def register_subscriber(
        self,
        event_type: EventTypeRef,
        handler: Callable,
        subscriber_engine: str,
        allow_self_subscription: bool = False,
    ) -> None:
        """
        Add handler to the listeners of event_type.

        event_type is a string such as 'front_office.quote.approved'
        or the QuoteApproved class itself. subscriber_engine names the
        engine that owns the handler.

        Raises InvalidEventTypeFormat, DuplicateSubscriberError or
        SelfSubscriptionError; EventBusError when handler is not
        callable.
        """
        event_type = check_event_type(resolve_event_type(event_type))
        if not callable(handler):
            raise EventBusError(f"Subscriber for {event_type} is not callable: {handler!r}")
        if owning_engine(event_type) == subscriber_engine and not allow_self_subscription:
            raise SelfSubscriptionError(subscriber_engine, event_type)

        name = _describe(handler)
        with self._lock:
            listeners = self._by_type.setdefault(event_type, [])
            if any(sub.handler is handler for sub in listeners):
                raise DuplicateSubscriberError(event_type, name)
            listeners.append(Subscription(handler, subscriber_engine))

        logger.info(f"{subscriber_engine} subscribed {name} to {event_type}")

    def unregister_subscriber(self, event_type: EventTypeRef, handler: Callable) -> None:
        event_type = resolve_event_type(event_type)
        name = _describe(handler)

        with self._lock:
            listeners = self._by_type.get(event_type, [])
            kept = [sub for sub in listeners if sub.handler is not handler]
            if len(kept) == len(listeners):
                raise UnknownSubscriberError(event_type, name)
            if kept:
                self._by_type[event_type] = kept
            else:
                self._by_type.pop(event_type)

        logger.info(f"Unsubscribed {name} from {event_type}")

    def get_subscribers(self, event_type: EventTypeRef) -> List[Subscription]:
        """Snapshot of the listeners, empty when there are none."""
        key = resolve_event_type(event_type)
        with self._lock:
            return list(self._by_type.get(key, ()))

    def has_subscribers(self, event_type: EventTypeRef) -> bool:
        return self.subscriber_count(event_type) > 0

    def subscriber_count(self, event_type: EventTypeRef) -> int:
        key = resolve_event_type(event_type)
        with self._lock:
            return len(self._by_type.get(key, ()))

    def get_all_event_types(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._by_type)
