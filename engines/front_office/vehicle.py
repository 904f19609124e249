"""
Front Office Engine — Vehicle Aggregate
=======================================
A customer's vehicle with its odometer and service history.

RULES (NON-NEGOTIABLE):
- Mileage never decreases
- Service history is append-only text, one record per line
- last_service_date only moves forward
- Owner is referenced by id; transfers are recorded in the history
- Mutations require is_active (deactivate/reactivate are idempotent)

This file contains NO persistence logic.
"""

from __future__ import annotations

import sys
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from core.primitives.entity import AggregateRoot
from core.primitives.identity import require_id
from core.primitives.party import optional_text, require_text
from core.time.clock import now_utc, today_utc
from engines.front_office.errors import (
    InactiveVehicle,
    MileageRegression,
    NegativeMileage,
)
from engines.front_office.value_objects import VehicleIdentification

DEFAULT_SERVICE_INTERVAL_DAYS = 180
DEFAULT_SERVICE_INTERVAL_MILES = 5000

TRANSFER_RECORD = "Vehicle transferred to new customer"
REACTIVATION_RECORD = "Vehicle reactivated"


def _check_mileage(mileage: int) -> int:
    if isinstance(mileage, bool) or not isinstance(mileage, int):
        raise TypeError("mileage must be int.")
    if mileage < 0:
        raise NegativeMileage(mileage)
    return mileage


class Vehicle(AggregateRoot):
    """
    Fields:
        customer_id:          Owning customer (weak reference)
        identification:       VehicleIdentification value
        mileage:              Current odometer reading
        last_service_date:    None until the first service record
        last_service_mileage: Odometer at the last recorded service, if known
        service_history:      Tuple of "YYYY-MM-DD: description" records
        is_active:            False once deactivated
        notes:                Free text, optional
    """

    def __init__(
        self,
        customer_id: uuid.UUID,
        identification: VehicleIdentification,
        mileage: int = 0,
        notes: Optional[str] = None,
    ) -> None:
        super().__init__()
        require_id(customer_id, "customer_id")
        if not isinstance(identification, VehicleIdentification):
            raise TypeError("identification must be VehicleIdentification.")

        self._customer_id = customer_id
        self._identification = identification
        self._mileage = _check_mileage(mileage)
        self._notes = optional_text(notes)
        self._last_service_date: Optional[datetime] = None
        self._last_service_mileage: Optional[int] = None
        self._service_history: List[str] = []
        self._is_active = True

    # ── Read model ────────────────────────────────────────────

    @property
    def customer_id(self) -> uuid.UUID:
        return self._customer_id

    @property
    def identification(self) -> VehicleIdentification:
        return self._identification

    @property
    def mileage(self) -> int:
        return self._mileage

    @property
    def notes(self) -> Optional[str]:
        return self._notes

    @property
    def last_service_date(self) -> Optional[datetime]:
        return self._last_service_date

    @property
    def last_service_mileage(self) -> Optional[int]:
        return self._last_service_mileage

    @property
    def service_history(self) -> Tuple[str, ...]:
        return tuple(self._service_history)

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def days_since_last_service(self) -> int:
        """sys.maxsize when the vehicle was never serviced."""
        if self._last_service_date is None:
            return sys.maxsize
        return (today_utc() - self._last_service_date.date()).days

    def is_due_for_service(
        self,
        max_days_since_service: int = DEFAULT_SERVICE_INTERVAL_DAYS,
        max_miles_since_service: int = DEFAULT_SERVICE_INTERVAL_MILES,
    ) -> bool:
        if self.days_since_last_service > max_days_since_service:
            return True
        if self._last_service_mileage is None:
            return False
        return self._mileage - self._last_service_mileage >= max_miles_since_service

    # ── Commands ──────────────────────────────────────────────

    def update_mileage(self, new_mileage: int) -> None:
        _check_mileage(new_mileage)
        if new_mileage < self._mileage:
            raise MileageRegression(self._mileage, new_mileage)
        self._require_active("update mileage")

        self._mileage = new_mileage
        self.update()

    def add_service_record(
        self,
        description: str,
        service_date: datetime,
        mileage_at_service: Optional[int] = None,
    ) -> None:
        self._require_active("add service record")
        description = require_text(description, "description")
        if not isinstance(service_date, datetime):
            raise TypeError("service_date must be datetime.")
        if mileage_at_service is not None:
            _check_mileage(mileage_at_service)

        record = f"{service_date:%Y-%m-%d}: {description}"
        if mileage_at_service is not None:
            record += f" (Mileage: {mileage_at_service:,})"
        self._service_history.append(record)

        if mileage_at_service is not None:
            if mileage_at_service > self._mileage:
                self._mileage = mileage_at_service
            if (
                self._last_service_mileage is None
                or mileage_at_service > self._last_service_mileage
            ):
                self._last_service_mileage = mileage_at_service

        if self._last_service_date is None or service_date > self._last_service_date:
            self._last_service_date = service_date

        self.update()

    def update_identification(self, identification: VehicleIdentification) -> None:
        self._require_active("update identification")
        if not isinstance(identification, VehicleIdentification):
            raise TypeError("identification must be VehicleIdentification.")
        self._identification = identification
        self.update()

    def update_notes(self, notes: Optional[str]) -> None:
        self._require_active("update notes")
        self._notes = optional_text(notes)
        self.update()

    def transfer_to_customer(self, new_customer_id: uuid.UUID) -> None:
        require_id(new_customer_id, "new_customer_id")
        self._require_active("transfer vehicle")
        if new_customer_id == self._customer_id:
            return

        self._customer_id = new_customer_id
        self._append_history(TRANSFER_RECORD)
        self.update()

    def deactivate(self, reason: Optional[str] = None) -> None:
        if not self._is_active:
            return
        reason = optional_text(reason)
        if reason:
            self._append_history(f"Vehicle deactivated: {reason}")
        self._is_active = False
        self.update()

    def reactivate(self) -> None:
        if self._is_active:
            return
        self._is_active = True
        self._append_history(REACTIVATION_RECORD)
        self.update()

    def _append_history(self, text: str) -> None:
        """Administrative record; does not count as a service visit."""
        self._service_history.append(f"{now_utc():%Y-%m-%d}: {text}")

    def _require_active(self, operation: str) -> None:
        if not self._is_active:
            raise InactiveVehicle(operation)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "customer_id": str(self._customer_id),
            "identification": self._identification.to_dict(),
            "mileage": self._mileage,
            "last_service_date": (
                self._last_service_date.isoformat() if self._last_service_date else None
            ),
            "last_service_mileage": self._last_service_mileage,
            "service_history": list(self._service_history),
            "is_active": self._is_active,
            "notes": self._notes,
        }
