"""
Front Office Engine — Work Order Tests
======================================
Tests verify:
- The full happy path from Draft to Delivered
- Every operation is refused outside its allowed statuses and leaves
  the order unchanged
- Quote events are raised only after the quote operation succeeded
- Cancellation boundaries (Cancelled → Cancelled, Rejected → Cancelled)
- Status history and derived predicates
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from core.primitives.errors import InvalidOperationForState, ValidationError
from core.primitives.identity import new_entity_id
from core.primitives.money import Money
from engines.front_office.errors import (
    InvalidTransition,
    MissingSignature,
    QuoteExpired,
)
from engines.front_office.events import (
    QuoteApproved,
    QuoteProposed,
    QuoteRejected,
    WorkOrderCreated,
)
from engines.front_office.work_order import (
    WORK_ORDER_WORKFLOW,
    ServicePriority,
    ServiceType,
    WorkOrder,
    WorkOrderStatus,
)

S = WorkOrderStatus


@pytest.fixture
def work_order(clock):
    wo = WorkOrder(
        customer_id=new_entity_id(),
        vehicle_id=new_entity_id(),
        service_description="Brake replacement",
        service_type=ServiceType.REPAIR,
        priority=ServicePriority.NORMAL,
        requested_date=clock.now_utc(),
        created_by="tech@shop",
    )
    wo.clear_domain_events()
    return wo


@pytest.fixture
def brake_pads(make_line_item):
    return [make_line_item("Brake pads", quantity=2, price="80.00")]


def _to_awaiting_approval(wo, items):
    wo.start_diagnosis()
    wo.propose_quote(items, estimated_hours=2, labor_rate_per_hour=150)


def _to_approved(wo, items):
    _to_awaiting_approval(wo, items)
    wo.approve_quote("J.Doe")


def _to_completed(wo, items):
    _to_approved(wo, items)
    wo.start_work()
    wo.complete_work()


def _drive_to(status, wo, items):
    """Walk a fresh order to the given status along the table."""
    if status is S.DRAFT:
        return
    if status is S.PENDING_DIAGNOSIS:
        wo.start_diagnosis()
    elif status is S.QUOTE_IN_PREPARATION:
        wo.start_diagnosis()
        wo.begin_quote_preparation()
    elif status is S.AWAITING_APPROVAL:
        _to_awaiting_approval(wo, items)
    elif status is S.APPROVED:
        _to_approved(wo, items)
    elif status is S.IN_PROGRESS:
        _to_approved(wo, items)
        wo.start_work()
    elif status is S.COMPLETED:
        _to_completed(wo, items)
    elif status is S.DELIVERED:
        _to_completed(wo, items)
        wo.mark_as_delivered()
    elif status is S.REJECTED:
        _to_awaiting_approval(wo, items)
        wo.reject_quote("Too expensive")
    elif status is S.CANCELLED:
        wo.cancel("customer no-show")
    assert wo.status is status


# ══════════════════════════════════════════════════════════════
# SCENARIOS
# ══════════════════════════════════════════════════════════════

class TestWorkOrderScenarios:
    def test_full_lifecycle(self, work_order, brake_pads, clock):
        wo = work_order
        assert wo.status is S.DRAFT

        wo.start_diagnosis()
        assert wo.status is S.PENDING_DIAGNOSIS

        quote = wo.propose_quote(brake_pads, estimated_hours=2, labor_rate_per_hour=150)
        assert wo.status is S.AWAITING_APPROVAL
        assert quote.total_amount == Money(460)
        assert wo.quote is quote

        wo.approve_quote("J.Doe", clock.now_utc())
        assert wo.status is S.APPROVED
        assert wo.quote.is_approved
        assert wo.can_start_work

        tomorrow = clock.now_utc() + timedelta(days=1)
        wo.schedule(tomorrow)
        assert wo.scheduled_date == tomorrow

        wo.start_work()
        assert wo.status is S.IN_PROGRESS

        done = clock.now_utc() + timedelta(days=2)
        wo.complete_work(done)
        assert wo.status is S.COMPLETED
        assert wo.completed_date == done

        wo.mark_as_delivered()
        assert wo.status is S.DELIVERED
        assert wo.is_final

    def test_cancel_from_draft(self, work_order):
        work_order.cancel("customer no-show")
        assert work_order.status is S.CANCELLED
        assert work_order.internal_notes == "Cancelled: customer no-show"
        assert work_order.is_final

    def test_cancel_twice_succeeds(self, work_order):
        work_order.cancel("customer no-show")
        work_order.cancel("duplicate request")
        assert work_order.status is S.CANCELLED
        assert work_order.internal_notes == "Cancelled: duplicate request"
        assert [t.to_state for t in work_order.status_history] == [S.CANCELLED, S.CANCELLED]

    def test_cancel_after_rejection_succeeds(self, work_order, brake_pads):
        _drive_to(S.REJECTED, work_order, brake_pads)
        work_order.cancel("closing file")
        assert work_order.status is S.CANCELLED

    def test_requote_cycle(self, work_order, brake_pads, make_line_item):
        _to_awaiting_approval(work_order, brake_pads)
        first = work_order.quote
        work_order.revise_quote("customer asked for cheaper parts")
        assert work_order.status is S.QUOTE_IN_PREPARATION

        second = work_order.propose_quote(
            [make_line_item("Brake pads (aftermarket)", quantity=2, price="50.00")],
            estimated_hours=2,
        )
        assert work_order.quote is second
        assert second is not first
        assert second.total_amount == Money(400)


# ══════════════════════════════════════════════════════════════
# TRANSITION TABLE
# ══════════════════════════════════════════════════════════════

OPERATIONS = {
    "start_diagnosis": (S.PENDING_DIAGNOSIS, lambda wo, items: wo.start_diagnosis()),
    "begin_quote_preparation": (
        S.QUOTE_IN_PREPARATION, lambda wo, items: wo.begin_quote_preparation(),
    ),
    "propose_quote": (
        S.AWAITING_APPROVAL, lambda wo, items: wo.propose_quote(items, estimated_hours=1),
    ),
    "start_work": (S.IN_PROGRESS, lambda wo, items: wo.start_work()),
    "complete_work": (S.COMPLETED, lambda wo, items: wo.complete_work()),
    "mark_as_delivered": (S.DELIVERED, lambda wo, items: wo.mark_as_delivered()),
    "cancel": (S.CANCELLED, lambda wo, items: wo.cancel("reason")),
}

ALLOWED_FROM = {
    "start_diagnosis": {S.DRAFT},
    "begin_quote_preparation": {S.PENDING_DIAGNOSIS},
    "propose_quote": {S.PENDING_DIAGNOSIS, S.QUOTE_IN_PREPARATION},
    "start_work": {S.APPROVED},
    "complete_work": {S.IN_PROGRESS},
    "mark_as_delivered": {S.COMPLETED},
    "cancel": set(S) - {S.COMPLETED, S.DELIVERED},
}


class TestTransitionTable:
    @pytest.mark.parametrize("operation", sorted(OPERATIONS))
    @pytest.mark.parametrize("start", list(S), ids=lambda s: s.value)
    def test_operation_allowed_only_from_listed_statuses(
        self, work_order, brake_pads, operation, start,
    ):
        _drive_to(start, work_order, brake_pads)
        target, run = OPERATIONS[operation]
        history_before = len(work_order.status_history)

        if start in ALLOWED_FROM[operation]:
            run(work_order, brake_pads)
            assert work_order.status is target
        else:
            with pytest.raises(InvalidTransition, match=start.value):
                run(work_order, brake_pads)
            assert work_order.status is start
            assert len(work_order.status_history) == history_before

    @pytest.mark.parametrize("start", list(S), ids=lambda s: s.value)
    def test_approve_and_reject_only_awaiting_approval(self, work_order, brake_pads, start):
        _drive_to(start, work_order, brake_pads)
        if start is S.AWAITING_APPROVAL:
            return
        with pytest.raises(InvalidOperationForState):
            work_order.approve_quote("J.Doe")
        with pytest.raises(InvalidOperationForState):
            work_order.reject_quote("no")
        assert work_order.status is start

    def test_invalid_transition_message(self, work_order):
        with pytest.raises(InvalidTransition) as exc_info:
            work_order.start_work()
        assert str(exc_info.value) == "Cannot start work from status: Draft."
        assert exc_info.value.current_state is S.DRAFT

    def test_workflow_terminals(self):
        assert WORK_ORDER_WORKFLOW.terminal_states == frozenset(
            {S.DELIVERED, S.CANCELLED, S.REJECTED}
        )

    def test_revise_only_from_awaiting_approval(self, work_order):
        with pytest.raises(InvalidTransition):
            work_order.revise_quote()


# ══════════════════════════════════════════════════════════════
# QUOTE OPERATIONS
# ══════════════════════════════════════════════════════════════

class TestQuoteOperations:
    def test_propose_emits_event(self, work_order, brake_pads):
        work_order.start_diagnosis()
        quote = work_order.propose_quote(brake_pads, estimated_hours=2, validity_days=15)
        (event,) = work_order.domain_events
        assert isinstance(event, QuoteProposed)
        assert event.work_order_id == work_order.id
        assert event.total_amount == Decimal("460.00")
        assert event.currency == "BRL"
        assert event.quote_validity_days == 15
        assert event.proposed_at == quote.created_at

    def test_invalid_quote_leaves_order_unchanged(self, work_order):
        work_order.start_diagnosis()
        with pytest.raises(ValidationError):
            work_order.propose_quote([], estimated_hours=1)
        assert work_order.status is S.PENDING_DIAGNOSIS
        assert work_order.quote is None
        assert not work_order.has_domain_events

    def test_approve_emits_event(self, work_order, brake_pads, clock):
        _to_awaiting_approval(work_order, brake_pads)
        work_order.clear_domain_events()
        work_order.approve_quote("  J.Doe ")
        (event,) = work_order.domain_events
        assert isinstance(event, QuoteApproved)
        assert event.approved_amount == Decimal("460.00")
        assert event.customer_signature == "J.Doe"
        assert event.approved_at == clock.now_utc()
        assert work_order.approved_amount == Money(460)

    def test_failed_approval_raises_no_event(self, work_order, brake_pads):
        _to_awaiting_approval(work_order, brake_pads)
        work_order.clear_domain_events()
        with pytest.raises(MissingSignature):
            work_order.approve_quote("")
        assert work_order.status is S.AWAITING_APPROVAL
        assert not work_order.has_domain_events

    def test_expired_quote_cannot_be_approved(self, work_order, brake_pads, clock):
        _to_awaiting_approval(work_order, brake_pads)
        clock.advance(days=31)
        with pytest.raises(QuoteExpired):
            work_order.approve_quote("J.Doe")
        assert work_order.status is S.AWAITING_APPROVAL

    def test_reject_emits_event(self, work_order, brake_pads, clock):
        _to_awaiting_approval(work_order, brake_pads)
        work_order.clear_domain_events()
        work_order.reject_quote("  Too expensive ")
        assert work_order.status is S.REJECTED
        (event,) = work_order.domain_events
        assert isinstance(event, QuoteRejected)
        assert event.rejection_reason == "Too expensive"
        assert event.rejected_at == clock.now_utc()
        assert work_order.status_history[-1].reason == "Too expensive"

    def test_reject_requires_reason(self, work_order, brake_pads):
        _to_awaiting_approval(work_order, brake_pads)
        with pytest.raises(ValidationError):
            work_order.reject_quote("  ")
        assert work_order.status is S.AWAITING_APPROVAL

    def test_approved_amount_none_until_approved(self, work_order, brake_pads):
        _to_awaiting_approval(work_order, brake_pads)
        assert work_order.approved_amount is None
        assert not work_order.has_approved_quote


# ══════════════════════════════════════════════════════════════
# SCHEDULING / CANCELLATION
# ══════════════════════════════════════════════════════════════

class TestScheduleAndCancel:
    def test_schedule_today_allowed(self, work_order, brake_pads, clock):
        _to_approved(work_order, brake_pads)
        work_order.schedule(clock.now_utc(), assigned_technician="Carlos")
        assert work_order.assigned_technician == "Carlos"
        assert work_order.status is S.APPROVED

    def test_schedule_in_past_rejected(self, work_order, brake_pads, clock):
        _to_approved(work_order, brake_pads)
        with pytest.raises(ValidationError, match="past"):
            work_order.schedule(clock.now_utc() - timedelta(days=1))
        assert work_order.scheduled_date is None

    def test_schedule_requires_approved(self, work_order, clock):
        with pytest.raises(InvalidTransition):
            work_order.schedule(clock.now_utc() + timedelta(days=1))

    def test_cancel_requires_reason(self, work_order):
        with pytest.raises(ValidationError):
            work_order.cancel("")
        assert work_order.status is S.DRAFT

    @pytest.mark.parametrize("status", [S.COMPLETED, S.DELIVERED])
    def test_cancel_blocked_when_finished(self, work_order, brake_pads, status):
        _drive_to(status, work_order, brake_pads)
        with pytest.raises(InvalidTransition):
            work_order.cancel("too late")
        assert work_order.internal_notes is None


# ══════════════════════════════════════════════════════════════
# EDITS / PREDICATES
# ══════════════════════════════════════════════════════════════

class TestEditsAndPredicates:
    def test_created_event(self, clock):
        customer_id, vehicle_id = new_entity_id(), new_entity_id()
        wo = WorkOrder(
            customer_id, vehicle_id, "Oil change", ServiceType.MAINTENANCE,
            ServicePriority.HIGH, clock.now_utc(), "front@shop",
        )
        (event,) = wo.domain_events
        assert isinstance(event, WorkOrderCreated)
        assert event.customer_id == customer_id
        assert event.vehicle_id == vehicle_id
        assert event.created_by == "front@shop"

    @pytest.mark.parametrize("status", [S.COMPLETED, S.DELIVERED])
    def test_description_and_priority_frozen_when_finished(self, work_order, brake_pads, status):
        _drive_to(status, work_order, brake_pads)
        with pytest.raises(InvalidOperationForState):
            work_order.update_service_description("Something else")
        with pytest.raises(InvalidOperationForState):
            work_order.update_priority(ServicePriority.EMERGENCY)

    def test_description_editable_while_open(self, work_order):
        work_order.update_service_description("Brakes and alignment")
        work_order.update_priority(ServicePriority.HIGH)
        assert work_order.service_description == "Brakes and alignment"
        assert work_order.priority is ServicePriority.HIGH

    @pytest.mark.parametrize("status", [S.COMPLETED, S.DELIVERED, S.CANCELLED])
    def test_assign_technician_blocked_when_closed(self, work_order, brake_pads, status):
        _drive_to(status, work_order, brake_pads)
        with pytest.raises(InvalidOperationForState):
            work_order.assign_technician("Carlos")

    def test_assign_technician(self, work_order):
        work_order.assign_technician(" Carlos ")
        assert work_order.assigned_technician == "Carlos"

    def test_notes_always_editable(self, work_order, brake_pads):
        _drive_to(S.DELIVERED, work_order, brake_pads)
        work_order.update_customer_notes("Pick-up by spouse")
        work_order.update_internal_notes("Paid in cash")
        assert work_order.customer_notes == "Pick-up by spouse"
        assert work_order.internal_notes == "Paid in cash"

    def test_is_overdue(self, work_order, clock):
        assert not work_order.is_overdue
        clock.advance(days=1)
        assert work_order.is_overdue
        work_order.cancel("gave up")
        assert not work_order.is_overdue

    def test_can_start_work_needs_approved_status(self, work_order, brake_pads):
        _to_awaiting_approval(work_order, brake_pads)
        assert not work_order.can_start_work

    def test_days_open(self, work_order, brake_pads, clock):
        clock.advance(days=3)
        assert work_order.days_open == 3
        _to_completed(work_order, brake_pads)
        clock.advance(days=10)
        assert work_order.days_open == 3

    def test_status_history(self, work_order, brake_pads, clock):
        work_order.start_diagnosis()
        clock.advance(days=1)
        work_order.propose_quote(brake_pads, estimated_hours=2)
        history = work_order.status_history
        assert [(t.from_state, t.to_state) for t in history] == [
            (S.DRAFT, S.PENDING_DIAGNOSIS),
            (S.PENDING_DIAGNOSIS, S.AWAITING_APPROVAL),
        ]
        assert history[1].transitioned_at == clock.now_utc()

    def test_to_dict(self, work_order, brake_pads):
        _to_approved(work_order, brake_pads)
        d = work_order.to_dict()
        assert d["status"] == "Approved"
        assert d["service_type"] == "Repair"
        assert d["quote"]["is_approved"] is True
        assert len(d["status_history"]) == 3
