"""
Front Office Event Bus — Public API
===================================
Aggregates buffer events. The application layer commits, then
publishes. Events are heard only after they are true.
"""

from core.events.dispatcher import DispatchResult, SubscriberFailure, dispatch
from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
    UnknownSubscriberError,
)
from core.events.publisher import publish_pending_events
from core.events.registry import SubscriberRegistry

__all__ = [
    "dispatch",
    "DispatchResult",
    "SubscriberFailure",
    "publish_pending_events",
    "SubscriberRegistry",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
    "SelfSubscriptionError",
    "UnknownSubscriberError",
]
