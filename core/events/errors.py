"""
Front Office Event Bus — Errors
===============================
Raised while wiring subscribers. Handler failures during dispatch
are reported in the DispatchResult instead.
"""


class EventBusError(Exception):
    """Base error for subscriber wiring."""


class InvalidEventTypeFormat(EventBusError):
    """Event types read engine.domain.action."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(
            f"Invalid event type '{event_type}': expected engine.domain.action."
        )


class SelfSubscriptionError(EventBusError):
    def __init__(self, engine: str, event_type: str):
        self.engine = engine
        self.event_type = event_type
        super().__init__(
            f"'{engine}' may not listen to its own event '{event_type}' "
            f"unless allow_self_subscription is set."
        )


class _HandlerError(EventBusError):
    """A specific handler / event type pair."""

    reason = ""

    def __init__(self, event_type: str, handler_name: str):
        self.event_type = event_type
        self.handler_name = handler_name
        super().__init__(f"{handler_name} {self.reason} '{event_type}'.")


class DuplicateSubscriberError(_HandlerError):
    reason = "is already subscribed to"


class UnknownSubscriberError(_HandlerError):
    reason = "is not subscribed to"
