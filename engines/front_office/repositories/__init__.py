"""
Front Office Engine — Repository Ports
======================================
What the domain services need from persistence. Adapters
(in-memory here, an ORM elsewhere) implement these protocols.

Contract shared by all three:
- find_* returns None / an empty list when nothing matches
- add() of an existing id raises DuplicateError
- update() of an unknown id raises NotFoundError
- Soft-deleted aggregates are never returned
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Protocol

from engines.front_office.customer import Customer
from engines.front_office.vehicle import Vehicle
from engines.front_office.work_order import (
    ServicePriority,
    ServiceType,
    WorkOrder,
    WorkOrderStatus,
)


class CustomerRepository(Protocol):
    def find_by_id(self, customer_id: uuid.UUID) -> Optional[Customer]:
        ...  # pragma: no cover

    def find_by_email(self, email: str) -> Optional[Customer]:
        ...  # pragma: no cover

    def find_active(self) -> List[Customer]:
        ...  # pragma: no cover

    def search(self, term: str) -> List[Customer]:
        ...  # pragma: no cover

    def add(self, customer: Customer) -> None:
        ...  # pragma: no cover

    def update(self, customer: Customer) -> None:
        ...  # pragma: no cover

    def exists_with_email(self, email: str) -> bool:
        ...  # pragma: no cover

    def find_with_vehicles_due_for_service(self) -> List[Customer]:
        ...  # pragma: no cover

    def count_active(self) -> int:
        ...  # pragma: no cover


class VehicleRepository(Protocol):
    def find_by_id(self, vehicle_id: uuid.UUID) -> Optional[Vehicle]:
        ...  # pragma: no cover

    def find_by_vin(self, vin: str) -> Optional[Vehicle]:
        ...  # pragma: no cover

    def find_by_license_plate(self, license_plate: str) -> Optional[Vehicle]:
        ...  # pragma: no cover

    def find_by_customer_id(self, customer_id: uuid.UUID) -> List[Vehicle]:
        ...  # pragma: no cover

    def find_due_for_service(
        self, max_days_since_service: Optional[int] = None
    ) -> List[Vehicle]:
        """None means FRONT_OFFICE SERVICE_INTERVAL_DAYS."""
        ...  # pragma: no cover

    def search(self, term: str) -> List[Vehicle]:
        ...  # pragma: no cover

    def find_active(self) -> List[Vehicle]:
        ...  # pragma: no cover

    def add(self, vehicle: Vehicle) -> None:
        ...  # pragma: no cover

    def update(self, vehicle: Vehicle) -> None:
        ...  # pragma: no cover

    def exists_with_vin(self, vin: str) -> bool:
        ...  # pragma: no cover

    def exists_with_license_plate(self, license_plate: str) -> bool:
        ...  # pragma: no cover

    def count_active(self) -> int:
        ...  # pragma: no cover

    def find_by_make_and_model(self, make: str, model: Optional[str] = None) -> List[Vehicle]:
        ...  # pragma: no cover


@dataclass(frozen=True)
class WorkOrderStatistics:
    """
    Aggregate figures over a date range of work orders.

    Fields:
        total_work_orders:       Orders created in range
        completed_work_orders:   Completed or Delivered
        active_work_orders:      Not Completed/Delivered/Cancelled/Rejected
        overdue_work_orders:     is_overdue at computation time
        total_revenue:           Σ approved amounts of Completed/Delivered
        average_completion_days: Mean created → completed, 0.0 if none
        *_breakdown:             Counts keyed by enum value
    """
    total_work_orders: int = 0
    completed_work_orders: int = 0
    active_work_orders: int = 0
    overdue_work_orders: int = 0
    total_revenue: Decimal = Decimal("0.00")
    average_completion_days: float = 0.0
    service_type_breakdown: Dict[str, int] = field(default_factory=dict)
    priority_breakdown: Dict[str, int] = field(default_factory=dict)
    status_breakdown: Dict[str, int] = field(default_factory=dict)


class WorkOrderRepository(Protocol):
    def find_by_id(self, work_order_id: uuid.UUID) -> Optional[WorkOrder]:
        ...  # pragma: no cover

    def find_by_customer_id(self, customer_id: uuid.UUID) -> List[WorkOrder]:
        ...  # pragma: no cover

    def find_by_vehicle_id(self, vehicle_id: uuid.UUID) -> List[WorkOrder]:
        ...  # pragma: no cover

    def find_by_status(self, status: WorkOrderStatus) -> List[WorkOrder]:
        ...  # pragma: no cover

    def find_by_statuses(self, statuses: List[WorkOrderStatus]) -> List[WorkOrder]:
        ...  # pragma: no cover

    def find_by_technician(self, technician: str) -> List[WorkOrder]:
        ...  # pragma: no cover

    def find_by_priority(self, priority: ServicePriority) -> List[WorkOrder]:
        ...  # pragma: no cover

    def find_by_service_type(self, service_type: ServiceType) -> List[WorkOrder]:
        ...  # pragma: no cover

    def find_overdue(self) -> List[WorkOrder]:
        ...  # pragma: no cover

    def find_by_date_range(self, start: datetime, end: datetime) -> List[WorkOrder]:
        ...  # pragma: no cover

    def find_scheduled_for_date(self, day: date) -> List[WorkOrder]:
        ...  # pragma: no cover

    def find_active(self) -> List[WorkOrder]:
        ...  # pragma: no cover

    def find_awaiting_approval(self) -> List[WorkOrder]:
        ...  # pragma: no cover

    def search(self, term: str) -> List[WorkOrder]:
        ...  # pragma: no cover

    def add(self, work_order: WorkOrder) -> None:
        ...  # pragma: no cover

    def update(self, work_order: WorkOrder) -> None:
        ...  # pragma: no cover

    def get_statistics(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> WorkOrderStatistics:
        ...  # pragma: no cover

    def get_status_counts(self) -> Dict[WorkOrderStatus, int]:
        ...  # pragma: no cover

    def find_with_expired_quotes(self) -> List[WorkOrder]:
        ...  # pragma: no cover


__all__ = [
    "CustomerRepository",
    "VehicleRepository",
    "WorkOrderRepository",
    "WorkOrderStatistics",
]
