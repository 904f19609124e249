"""
Front Office Engine — Work Order Aggregate
==========================================
The unit of work a customer requests for one vehicle, from intake
to delivery. Owns the Quote.

Lifecycle (WORK_ORDER_WORKFLOW):

    Draft → PendingDiagnosis → QuoteInPreparation ⇄ AwaitingApproval
          → Approved → InProgress → Completed → Delivered
    AwaitingApproval → Rejected
    any state except Completed/Delivered → Cancelled

RULES (NON-NEGOTIABLE):
- Every status change is checked against WORK_ORDER_WORKFLOW
- A rejected operation leaves the order unchanged
- Every status change is appended to status_history
- Quote events are raised only after the quote operation succeeded
- Work orders are never hard-deleted

This file contains NO persistence logic.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from core.primitives.entity import AggregateRoot
from core.primitives.errors import InvalidOperationForState, ValidationError
from core.primitives.identity import require_id
from core.primitives.money import Money, Number
from core.primitives.party import optional_text, require_text
from core.primitives.workflow import StateTransition, WorkflowDefinition
from core.time.clock import now_utc, today_utc
from engines.front_office.errors import InvalidTransition, MissingQuote
from engines.front_office.events import (
    QuoteApproved,
    QuoteProposed,
    QuoteRejected,
    WorkOrderCreated,
)
from engines.front_office.quote import (
    DEFAULT_LABOR_RATE,
    DEFAULT_VALIDITY_DAYS,
    Quote,
    QuoteLineItem,
)


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class WorkOrderStatus(Enum):
    DRAFT = "Draft"
    PENDING_DIAGNOSIS = "PendingDiagnosis"
    QUOTE_IN_PREPARATION = "QuoteInPreparation"
    AWAITING_APPROVAL = "AwaitingApproval"
    APPROVED = "Approved"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    DELIVERED = "Delivered"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


class ServiceType(Enum):
    MAINTENANCE = "Maintenance"
    REPAIR = "Repair"
    DIAGNOSTIC = "Diagnostic"
    INSPECTION = "Inspection"
    WARRANTY = "Warranty"


class ServicePriority(Enum):
    NORMAL = "Normal"
    HIGH = "High"
    EMERGENCY = "Emergency"


# ══════════════════════════════════════════════════════════════
# WORKFLOW
# ══════════════════════════════════════════════════════════════

_S = WorkOrderStatus

# Cancelled → Cancelled and Rejected → Cancelled are deliberate:
# cancel() only refuses Completed and Delivered.
WORK_ORDER_WORKFLOW = WorkflowDefinition(
    name="WorkOrder",
    initial_state=_S.DRAFT,
    terminal_states=frozenset({_S.DELIVERED, _S.CANCELLED, _S.REJECTED}),
    transitions={
        _S.DRAFT: frozenset({_S.PENDING_DIAGNOSIS, _S.CANCELLED}),
        _S.PENDING_DIAGNOSIS: frozenset(
            {_S.QUOTE_IN_PREPARATION, _S.AWAITING_APPROVAL, _S.CANCELLED}
        ),
        _S.QUOTE_IN_PREPARATION: frozenset({_S.AWAITING_APPROVAL, _S.CANCELLED}),
        _S.AWAITING_APPROVAL: frozenset(
            {_S.APPROVED, _S.REJECTED, _S.QUOTE_IN_PREPARATION, _S.CANCELLED}
        ),
        _S.APPROVED: frozenset({_S.IN_PROGRESS, _S.CANCELLED}),
        _S.IN_PROGRESS: frozenset({_S.COMPLETED, _S.CANCELLED}),
        _S.COMPLETED: frozenset({_S.DELIVERED}),
        _S.DELIVERED: frozenset(),
        _S.REJECTED: frozenset({_S.CANCELLED}),
        _S.CANCELLED: frozenset({_S.CANCELLED}),
    },
)

CLOSED_STATUSES = frozenset({_S.COMPLETED, _S.DELIVERED, _S.CANCELLED})
FINISHED_STATUSES = frozenset({_S.COMPLETED, _S.DELIVERED})
INACTIVE_STATUSES = frozenset({_S.COMPLETED, _S.DELIVERED, _S.CANCELLED, _S.REJECTED})


# ══════════════════════════════════════════════════════════════
# AGGREGATE
# ══════════════════════════════════════════════════════════════

class WorkOrder(AggregateRoot):
    """
    Fields:
        customer_id, vehicle_id: weak references to the other aggregates
        service_description:     What the customer asked for
        service_type:            ServiceType
        priority:                ServicePriority
        status:                  WorkOrderStatus, starts at Draft
        requested_date:          When the customer wants it done
        scheduled_date:          Set by schedule()
        completed_date:          Set by complete_work()
        quote:                   Current Quote (a new proposal replaces it)
        customer_notes:          Visible to the customer
        internal_notes:          Staff only; cancel() overwrites it
        created_by:              Staff member who opened the order
        assigned_technician:     Optional
        status_history:          Tuple of StateTransition
    """

    def __init__(
        self,
        customer_id: uuid.UUID,
        vehicle_id: uuid.UUID,
        service_description: str,
        service_type: ServiceType,
        priority: ServicePriority,
        requested_date: datetime,
        created_by: str,
        customer_notes: Optional[str] = None,
    ) -> None:
        super().__init__()
        require_id(customer_id, "customer_id")
        require_id(vehicle_id, "vehicle_id")
        if not isinstance(service_type, ServiceType):
            raise TypeError("service_type must be ServiceType.")
        if not isinstance(priority, ServicePriority):
            raise TypeError("priority must be ServicePriority.")
        if not isinstance(requested_date, datetime):
            raise TypeError("requested_date must be datetime.")

        self._customer_id = customer_id
        self._vehicle_id = vehicle_id
        self._service_description = require_text(
            service_description, "service_description"
        )
        self._service_type = service_type
        self._priority = priority
        self._requested_date = requested_date
        self._created_by = require_text(created_by, "created_by")
        self._customer_notes = optional_text(customer_notes)

        self._status = WORK_ORDER_WORKFLOW.initial_state
        self._status_history: List[StateTransition] = []
        self._scheduled_date: Optional[datetime] = None
        self._completed_date: Optional[datetime] = None
        self._quote: Optional[Quote] = None
        self._internal_notes: Optional[str] = None
        self._assigned_technician: Optional[str] = None

        self.add_domain_event(
            WorkOrderCreated(
                work_order_id=self.id,
                customer_id=customer_id,
                vehicle_id=vehicle_id,
                service_description=self._service_description,
                created_by=self._created_by,
                created_at=self.created_at,
            )
        )

    # ── Read model ────────────────────────────────────────────

    @property
    def customer_id(self) -> uuid.UUID:
        return self._customer_id

    @property
    def vehicle_id(self) -> uuid.UUID:
        return self._vehicle_id

    @property
    def service_description(self) -> str:
        return self._service_description

    @property
    def service_type(self) -> ServiceType:
        return self._service_type

    @property
    def priority(self) -> ServicePriority:
        return self._priority

    @property
    def status(self) -> WorkOrderStatus:
        return self._status

    @property
    def status_history(self) -> Tuple[StateTransition, ...]:
        return tuple(self._status_history)

    @property
    def requested_date(self) -> datetime:
        return self._requested_date

    @property
    def scheduled_date(self) -> Optional[datetime]:
        return self._scheduled_date

    @property
    def completed_date(self) -> Optional[datetime]:
        return self._completed_date

    @property
    def quote(self) -> Optional[Quote]:
        return self._quote

    @property
    def customer_notes(self) -> Optional[str]:
        return self._customer_notes

    @property
    def internal_notes(self) -> Optional[str]:
        return self._internal_notes

    @property
    def created_by(self) -> str:
        return self._created_by

    @property
    def assigned_technician(self) -> Optional[str]:
        return self._assigned_technician

    # ── Derived predicates ────────────────────────────────────

    @property
    def is_overdue(self) -> bool:
        return (
            self._requested_date.date() < today_utc()
            and self._status not in CLOSED_STATUSES
        )

    @property
    def has_approved_quote(self) -> bool:
        return self._quote is not None and self._quote.is_approved

    @property
    def approved_amount(self) -> Optional[Money]:
        if not self.has_approved_quote:
            return None
        return self._quote.total_amount

    @property
    def can_start_work(self) -> bool:
        return self._status is WorkOrderStatus.APPROVED and self.has_approved_quote

    @property
    def is_final(self) -> bool:
        return WORK_ORDER_WORKFLOW.is_terminal(self._status)

    @property
    def days_open(self) -> int:
        """Creation to completion, or to now while the work is still open."""
        end = self._completed_date or now_utc()
        return (end.date() - self.created_at.date()).days

    # ── Lifecycle ─────────────────────────────────────────────

    def start_diagnosis(self) -> None:
        self._require_transition(WorkOrderStatus.PENDING_DIAGNOSIS, "start diagnosis")
        self._apply_transition(WorkOrderStatus.PENDING_DIAGNOSIS)

    def begin_quote_preparation(self) -> None:
        if self._status is not WorkOrderStatus.PENDING_DIAGNOSIS:
            raise InvalidTransition("begin quote preparation", self._status)
        self._apply_transition(WorkOrderStatus.QUOTE_IN_PREPARATION)

    def propose_quote(
        self,
        line_items: Iterable[QuoteLineItem],
        estimated_hours: Number,
        labor_rate_per_hour: Number = DEFAULT_LABOR_RATE,
        validity_days: int = DEFAULT_VALIDITY_DAYS,
        notes: Optional[str] = None,
    ) -> Quote:
        self._require_transition(WorkOrderStatus.AWAITING_APPROVAL, "propose quote")

        quote = Quote(line_items, estimated_hours, labor_rate_per_hour, validity_days, notes)
        self._quote = quote
        self._apply_transition(WorkOrderStatus.AWAITING_APPROVAL)

        self.add_domain_event(
            QuoteProposed(
                work_order_id=self.id,
                total_amount=quote.total_amount.amount,
                currency=quote.total_amount.currency,
                proposed_at=quote.created_at,
                quote_validity_days=validity_days,
            )
        )
        return quote

    def revise_quote(self, reason: Optional[str] = None) -> None:
        """Send an unanswered quote back for rework."""
        if self._status is not WorkOrderStatus.AWAITING_APPROVAL:
            raise InvalidTransition("revise quote", self._status)
        self._apply_transition(WorkOrderStatus.QUOTE_IN_PREPARATION, reason or "")

    def approve_quote(
        self, customer_signature: str, approval_date: Optional[datetime] = None
    ) -> None:
        self._require_transition(WorkOrderStatus.APPROVED, "approve quote")
        if self._quote is None:
            raise MissingQuote("approve quote", self._status)

        self._quote.approve(customer_signature, approval_date)
        self._apply_transition(WorkOrderStatus.APPROVED)

        self.add_domain_event(
            QuoteApproved(
                work_order_id=self.id,
                approved_amount=self._quote.total_amount.amount,
                currency=self._quote.total_amount.currency,
                approved_at=self._quote.approved_at,
                customer_signature=self._quote.customer_signature,
            )
        )

    def reject_quote(self, rejection_reason: str) -> None:
        self._require_transition(WorkOrderStatus.REJECTED, "reject quote")
        if self._quote is None:
            raise MissingQuote("reject quote", self._status)
        reason = require_text(rejection_reason, "rejection_reason")

        self._apply_transition(WorkOrderStatus.REJECTED, reason)
        self.add_domain_event(
            QuoteRejected(
                work_order_id=self.id,
                rejection_reason=reason,
                rejected_at=now_utc(),
            )
        )

    def schedule(
        self, scheduled_date: datetime, assigned_technician: Optional[str] = None
    ) -> None:
        if self._status is not WorkOrderStatus.APPROVED:
            raise InvalidTransition("schedule", self._status)
        if not isinstance(scheduled_date, datetime):
            raise TypeError("scheduled_date must be datetime.")
        if scheduled_date.date() < today_utc():
            raise ValidationError(
                "Scheduled date cannot be in the past.", "scheduled_date"
            )

        self._scheduled_date = scheduled_date
        self._assigned_technician = optional_text(assigned_technician)
        self.update()

    def start_work(self) -> None:
        self._require_transition(WorkOrderStatus.IN_PROGRESS, "start work")
        self._apply_transition(WorkOrderStatus.IN_PROGRESS)

    def complete_work(self, completed_date: Optional[datetime] = None) -> None:
        self._require_transition(WorkOrderStatus.COMPLETED, "complete work")
        self._completed_date = completed_date or now_utc()
        self._apply_transition(WorkOrderStatus.COMPLETED)

    def mark_as_delivered(self) -> None:
        self._require_transition(WorkOrderStatus.DELIVERED, "deliver")
        self._apply_transition(WorkOrderStatus.DELIVERED)

    def cancel(self, cancellation_reason: str) -> None:
        self._require_transition(WorkOrderStatus.CANCELLED, "cancel")
        reason = require_text(cancellation_reason, "cancellation_reason")

        self._internal_notes = f"Cancelled: {reason}"
        self._apply_transition(WorkOrderStatus.CANCELLED, reason)

    # ── Edits ─────────────────────────────────────────────────

    def update_customer_notes(self, notes: Optional[str]) -> None:
        self._customer_notes = optional_text(notes)
        self.update()

    def update_internal_notes(self, notes: Optional[str]) -> None:
        self._internal_notes = optional_text(notes)
        self.update()

    def update_service_description(self, service_description: str) -> None:
        description = require_text(service_description, "service_description")
        self._require_not_in(FINISHED_STATUSES, "update service description")
        self._service_description = description
        self.update()

    def update_priority(self, priority: ServicePriority) -> None:
        if not isinstance(priority, ServicePriority):
            raise TypeError("priority must be ServicePriority.")
        self._require_not_in(FINISHED_STATUSES, "update priority")
        self._priority = priority
        self.update()

    def assign_technician(self, technician_name: str) -> None:
        technician = require_text(technician_name, "technician_name")
        self._require_not_in(CLOSED_STATUSES, "assign technician")
        self._assigned_technician = technician
        self.update()

    # ── Internals ─────────────────────────────────────────────

    def _require_transition(self, to_status: WorkOrderStatus, operation: str) -> None:
        if not WORK_ORDER_WORKFLOW.is_valid_transition(self._status, to_status):
            raise InvalidTransition(operation, self._status)

    def _require_not_in(self, statuses: frozenset, operation: str) -> None:
        if self._status in statuses:
            raise InvalidOperationForState(operation, self._status)

    def _apply_transition(self, to_status: WorkOrderStatus, reason: str = "") -> None:
        self._status_history.append(
            StateTransition(
                from_state=self._status,
                to_state=to_status,
                transitioned_at=now_utc(),
                reason=reason,
            )
        )
        self._status = to_status
        self.update()

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "customer_id": str(self._customer_id),
            "vehicle_id": str(self._vehicle_id),
            "service_description": self._service_description,
            "service_type": self._service_type.value,
            "priority": self._priority.value,
            "status": self._status.value,
            "requested_date": self._requested_date.isoformat(),
            "scheduled_date": (
                self._scheduled_date.isoformat() if self._scheduled_date else None
            ),
            "completed_date": (
                self._completed_date.isoformat() if self._completed_date else None
            ),
            "quote": self._quote.to_dict() if self._quote else None,
            "customer_notes": self._customer_notes,
            "internal_notes": self._internal_notes,
            "created_by": self._created_by,
            "assigned_technician": self._assigned_technician,
            "status_history": [t.to_dict() for t in self._status_history],
        }
