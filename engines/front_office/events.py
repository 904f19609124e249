"""
Front Office Engine — Domain Event Types
========================================
Engine: Front Office (Customer / Vehicle / Work Order / Quote)

Event types follow engine.domain.action so the subscriber registry
can enforce engine isolation.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, ClassVar

from core.events.registry import SubscriberRegistry
from core.primitives.entity import DomainEvent

FRONT_OFFICE_CUSTOMER_REGISTERED = "front_office.customer.registered"
FRONT_OFFICE_WORK_ORDER_CREATED = "front_office.work_order.created"
FRONT_OFFICE_QUOTE_PROPOSED = "front_office.quote.proposed"
FRONT_OFFICE_QUOTE_APPROVED = "front_office.quote.approved"
FRONT_OFFICE_QUOTE_REJECTED = "front_office.quote.rejected"

FRONT_OFFICE_EVENT_TYPES = (
    FRONT_OFFICE_CUSTOMER_REGISTERED,
    FRONT_OFFICE_WORK_ORDER_CREATED,
    FRONT_OFFICE_QUOTE_PROPOSED,
    FRONT_OFFICE_QUOTE_APPROVED,
    FRONT_OFFICE_QUOTE_REJECTED,
)


@dataclass(frozen=True)
class CustomerRegistered(DomainEvent):
    event_type: ClassVar[str] = FRONT_OFFICE_CUSTOMER_REGISTERED

    customer_id: uuid.UUID
    customer_name: str
    email: str
    registered_at: datetime


@dataclass(frozen=True)
class WorkOrderCreated(DomainEvent):
    event_type: ClassVar[str] = FRONT_OFFICE_WORK_ORDER_CREATED

    work_order_id: uuid.UUID
    customer_id: uuid.UUID
    vehicle_id: uuid.UUID
    service_description: str
    created_by: str
    created_at: datetime


@dataclass(frozen=True)
class QuoteProposed(DomainEvent):
    """total_amount is the quote total at proposal time."""
    event_type: ClassVar[str] = FRONT_OFFICE_QUOTE_PROPOSED

    work_order_id: uuid.UUID
    total_amount: Decimal
    currency: str
    proposed_at: datetime
    quote_validity_days: int = 30


@dataclass(frozen=True)
class QuoteApproved(DomainEvent):
    event_type: ClassVar[str] = FRONT_OFFICE_QUOTE_APPROVED

    work_order_id: uuid.UUID
    approved_amount: Decimal
    currency: str
    approved_at: datetime
    customer_signature: str


@dataclass(frozen=True)
class QuoteRejected(DomainEvent):
    event_type: ClassVar[str] = FRONT_OFFICE_QUOTE_REJECTED

    work_order_id: uuid.UUID
    rejection_reason: str
    rejected_at: datetime


def register_front_office_subscriber(
    registry: SubscriberRegistry,
    handler: Callable[[DomainEvent], None],
    subscriber_engine: str,
) -> None:
    """Subscribe one handler (audit trail, outbox) to every front office event."""
    for event_type in FRONT_OFFICE_EVENT_TYPES:
        registry.register_subscriber(event_type, handler, subscriber_engine)
