"""
Front Office Engine — In-Memory Repositories
============================================
Deterministic, thread-safe implementations of the repository ports,
used for bootstrap, tests and single-process deployments.

Results come back in insertion order. Aggregates are stored by
reference: update() re-registers the instance it is given.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from threading import Lock
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from core.primitives.entity import AggregateRoot
from core.primitives.errors import DuplicateError, NotFoundError
from engines.front_office.config import load_front_office_settings
from engines.front_office.customer import Customer
from engines.front_office.errors import CustomerNotFound, VehicleNotFound, WorkOrderNotFound
from engines.front_office.repositories import WorkOrderStatistics
from engines.front_office.vehicle import Vehicle
from engines.front_office.work_order import (
    FINISHED_STATUSES,
    INACTIVE_STATUSES,
    ServicePriority,
    ServiceType,
    WorkOrder,
    WorkOrderStatus,
)

A = TypeVar("A", bound=AggregateRoot)


def _matches(term: str, *values: Optional[str]) -> bool:
    needle = term.strip().lower()
    if not needle:
        return False
    return any(value and needle in value.lower() for value in values)


def _normalize_plate(plate: str) -> str:
    return plate.strip().upper().replace("-", "")


def _service_interval_days() -> int:
    return load_front_office_settings().service_interval_days


class _InMemoryStore(Generic[A]):
    """Id-keyed store shared by the three repositories."""

    entity_name = "Aggregate"
    not_found_error: Optional[Callable[[uuid.UUID], NotFoundError]] = None

    def __init__(self) -> None:
        self._items: Dict[uuid.UUID, A] = {}
        self._lock = Lock()

    def add(self, aggregate: A) -> None:
        with self._lock:
            if aggregate.id in self._items:
                raise DuplicateError(self.entity_name, "id", aggregate.id)
            self._items[aggregate.id] = aggregate

    def update(self, aggregate: A) -> None:
        with self._lock:
            if aggregate.id not in self._items:
                raise self._not_found(aggregate.id)
            self._items[aggregate.id] = aggregate

    def _not_found(self, entity_id: uuid.UUID) -> NotFoundError:
        if self.not_found_error is not None:
            return self.not_found_error(entity_id)
        return NotFoundError(self.entity_name, entity_id)

    def find_by_id(self, entity_id: uuid.UUID) -> Optional[A]:
        with self._lock:
            item = self._items.get(entity_id)
        if item is None or item.is_deleted:
            return None
        return item

    def _select(self, predicate: Callable[[A], bool]) -> List[A]:
        with self._lock:
            items = list(self._items.values())
        return [item for item in items if not item.is_deleted and predicate(item)]

    def _first(self, predicate: Callable[[A], bool]) -> Optional[A]:
        found = self._select(predicate)
        return found[0] if found else None

    def __len__(self) -> int:
        return len(self._select(lambda _: True))


# ══════════════════════════════════════════════════════════════
# VEHICLES
# ══════════════════════════════════════════════════════════════

class InMemoryVehicleRepository(_InMemoryStore[Vehicle]):
    entity_name = "Vehicle"
    not_found_error = VehicleNotFound

    def find_by_vin(self, vin: str) -> Optional[Vehicle]:
        vin = vin.strip().upper()
        return self._first(lambda v: v.identification.vin == vin)

    def find_by_license_plate(self, license_plate: str) -> Optional[Vehicle]:
        plate = _normalize_plate(license_plate)
        return self._first(lambda v: v.identification.license_plate.value == plate)

    def find_by_customer_id(self, customer_id: uuid.UUID) -> List[Vehicle]:
        return self._select(lambda v: v.customer_id == customer_id)

    def find_due_for_service(
        self, max_days_since_service: Optional[int] = None
    ) -> List[Vehicle]:
        if max_days_since_service is None:
            max_days_since_service = _service_interval_days()
        return self._select(
            lambda v: v.is_active and v.days_since_last_service > max_days_since_service
        )

    def search(self, term: str) -> List[Vehicle]:
        return self._select(
            lambda v: _matches(
                term,
                v.identification.vin,
                v.identification.license_plate.value,
                v.identification.make,
                v.identification.model,
                v.identification.color,
            )
        )

    def find_active(self) -> List[Vehicle]:
        return self._select(lambda v: v.is_active)

    def exists_with_vin(self, vin: str) -> bool:
        return self.find_by_vin(vin) is not None

    def exists_with_license_plate(self, license_plate: str) -> bool:
        return self.find_by_license_plate(license_plate) is not None

    def count_active(self) -> int:
        return len(self.find_active())

    def find_by_make_and_model(self, make: str, model: Optional[str] = None) -> List[Vehicle]:
        make = make.strip().lower()
        model = model.strip().lower() if model else None
        return self._select(
            lambda v: v.identification.make.lower() == make
            and (model is None or v.identification.model.lower() == model)
        )


# ══════════════════════════════════════════════════════════════
# CUSTOMERS
# ══════════════════════════════════════════════════════════════

class InMemoryCustomerRepository(_InMemoryStore[Customer]):
    """
    find_with_vehicles_due_for_service needs a vehicle repository;
    without one it returns an empty list. Without an explicit
    service_interval_days it reads FRONT_OFFICE on every call.
    """

    entity_name = "Customer"
    not_found_error = CustomerNotFound

    def __init__(
        self,
        vehicles: Optional[InMemoryVehicleRepository] = None,
        service_interval_days: Optional[int] = None,
    ) -> None:
        super().__init__()
        self._vehicles = vehicles
        self._service_interval_days = service_interval_days

    def find_by_email(self, email: str) -> Optional[Customer]:
        email = email.strip().lower()
        return self._first(lambda c: c.email == email)

    def find_active(self) -> List[Customer]:
        return self._select(lambda c: c.is_active)

    def search(self, term: str) -> List[Customer]:
        return self._select(
            lambda c: _matches(
                term,
                c.contact_information.full_name,
                c.contact_information.email,
                c.contact_information.phone_number,
                c.cpf.number if c.cpf else None,
            )
        )

    def exists_with_email(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def find_with_vehicles_due_for_service(self) -> List[Customer]:
        if self._vehicles is None:
            return []
        due = {
            v.id
            for v in self._vehicles.find_due_for_service(self._service_interval_days)
        }
        return self._select(
            lambda c: c.is_active and any(vid in due for vid in c.vehicle_ids)
        )

    def count_active(self) -> int:
        return len(self.find_active())


# ══════════════════════════════════════════════════════════════
# WORK ORDERS
# ══════════════════════════════════════════════════════════════

class InMemoryWorkOrderRepository(_InMemoryStore[WorkOrder]):
    entity_name = "WorkOrder"
    not_found_error = WorkOrderNotFound

    def find_by_customer_id(self, customer_id: uuid.UUID) -> List[WorkOrder]:
        return self._select(lambda w: w.customer_id == customer_id)

    def find_by_vehicle_id(self, vehicle_id: uuid.UUID) -> List[WorkOrder]:
        return self._select(lambda w: w.vehicle_id == vehicle_id)

    def find_by_status(self, status: WorkOrderStatus) -> List[WorkOrder]:
        return self._select(lambda w: w.status is status)

    def find_by_statuses(self, statuses: List[WorkOrderStatus]) -> List[WorkOrder]:
        wanted = frozenset(statuses)
        return self._select(lambda w: w.status in wanted)

    def find_by_technician(self, technician: str) -> List[WorkOrder]:
        technician = technician.strip().lower()
        return self._select(
            lambda w: (w.assigned_technician or "").lower() == technician
        )

    def find_by_priority(self, priority: ServicePriority) -> List[WorkOrder]:
        return self._select(lambda w: w.priority is priority)

    def find_by_service_type(self, service_type: ServiceType) -> List[WorkOrder]:
        return self._select(lambda w: w.service_type is service_type)

    def find_overdue(self) -> List[WorkOrder]:
        return self._select(lambda w: w.is_overdue)

    def find_by_date_range(self, start: datetime, end: datetime) -> List[WorkOrder]:
        """Orders created within [start, end]."""
        return self._select(lambda w: start <= w.created_at <= end)

    def find_scheduled_for_date(self, day: date) -> List[WorkOrder]:
        return self._select(
            lambda w: w.scheduled_date is not None and w.scheduled_date.date() == day
        )

    def find_active(self) -> List[WorkOrder]:
        return self._select(lambda w: w.status not in INACTIVE_STATUSES)

    def find_awaiting_approval(self) -> List[WorkOrder]:
        return self.find_by_status(WorkOrderStatus.AWAITING_APPROVAL)

    def search(self, term: str) -> List[WorkOrder]:
        return self._select(
            lambda w: _matches(
                term,
                w.service_description,
                w.assigned_technician,
                w.customer_notes,
                w.internal_notes,
                w.created_by,
            )
        )

    def find_with_expired_quotes(self) -> List[WorkOrder]:
        return self._select(
            lambda w: w.status is WorkOrderStatus.AWAITING_APPROVAL
            and w.quote is not None
            and w.quote.is_expired
        )

    def get_status_counts(self) -> Dict[WorkOrderStatus, int]:
        counts = {status: 0 for status in WorkOrderStatus}
        for work_order in self._select(lambda _: True):
            counts[work_order.status] += 1
        return counts

    def get_statistics(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> WorkOrderStatistics:
        orders = self._select(
            lambda w: (start is None or w.created_at >= start)
            and (end is None or w.created_at <= end)
        )

        finished = [w for w in orders if w.status in FINISHED_STATUSES]
        revenue = sum(
            (w.approved_amount.amount for w in finished if w.approved_amount is not None),
            Decimal("0.00"),
        )
        completion_days = [
            (w.completed_date - w.created_at).total_seconds() / 86400
            for w in finished
            if w.completed_date is not None
        ]

        def breakdown(key: Callable[[WorkOrder], str]) -> Dict[str, int]:
            counts: Dict[str, int] = {}
            for w in orders:
                counts[key(w)] = counts.get(key(w), 0) + 1
            return counts

        return WorkOrderStatistics(
            total_work_orders=len(orders),
            completed_work_orders=len(finished),
            active_work_orders=sum(1 for w in orders if w.status not in INACTIVE_STATUSES),
            overdue_work_orders=sum(1 for w in orders if w.is_overdue),
            total_revenue=revenue,
            average_completion_days=(
                sum(completion_days) / len(completion_days) if completion_days else 0.0
            ),
            service_type_breakdown=breakdown(lambda w: w.service_type.value),
            priority_breakdown=breakdown(lambda w: w.priority.value),
            status_breakdown=breakdown(lambda w: w.status.value),
        )
