"""
Front Office Event Bus — Dispatcher
===================================
Hands one domain event to every handler registered for its type.

Handlers run one after another, in registration order. A handler
that raises is recorded in the DispatchResult and logged; the rest
still run. Nothing here touches repositories, and the event itself
is frozen.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from core.events.registry import SubscriberRegistry
from core.primitives.entity import DomainEvent

logger = logging.getLogger("front_office.events")


@dataclass(frozen=True)
class SubscriberFailure:
    handler: str
    engine: str
    error: str
    error_type: str


@dataclass(frozen=True)
class DispatchResult:
    """
    Outcome of dispatching one event.

    Fields:
        event_type:           engine.domain.action
        event_id:             str(event.event_id)
        subscribers_notified: Handlers that returned normally
        failures:             One SubscriberFailure per handler that raised
    """
    event_type: str
    event_id: str
    subscribers_notified: int = 0
    failures: Tuple[SubscriberFailure, ...] = field(default_factory=tuple)

    @property
    def subscribers_failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type,
            "event_id": self.event_id,
            "subscribers_notified": self.subscribers_notified,
            "subscribers_failed": self.subscribers_failed,
            "failures": [vars(f).copy() for f in self.failures],
        }


def _handler_name(handler) -> str:
    return getattr(handler, "__qualname__", repr(handler))


def dispatch(event: DomainEvent, registry: SubscriberRegistry) -> DispatchResult:
    """
    Run every subscriber of event.event_type. Never raises on
    handler failure.
    """
    event_type = event.event_type
    event_id = str(event.event_id)

    notified = 0
    failures: List[SubscriberFailure] = []

    for handler, engine in registry.get_subscribers(event_type):
        name = _handler_name(handler)
        try:
            handler(event)
        except Exception as exc:
            failures.append(
                SubscriberFailure(
                    handler=name,
                    engine=engine,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
            )
            logger.error(
                f"Subscriber {name} ({engine}) failed on {event_type} "
                f"[{event_id}]: {exc}",
                exc_info=True,
            )
        else:
            notified += 1

    result = DispatchResult(
        event_type=event_type,
        event_id=event_id,
        subscribers_notified=notified,
        failures=tuple(failures),
    )
    if notified or failures:
        logger.info(
            f"Dispatched {event_type} [{event_id}]: "
            f"{notified} notified, {len(failures)} failed"
        )
    else:
        logger.debug(f"No subscribers for {event_type} [{event_id}]")
    return result
