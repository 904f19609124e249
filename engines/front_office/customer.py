"""
Front Office Engine — Customer Aggregate
========================================
A registered customer and the set of vehicles they own.

RULES (NON-NEGOTIABLE):
- Registration raises CustomerRegistered
- vehicle_ids is a set: duplicate add and absent remove are no-ops
- Every mutation except deactivate/reactivate requires is_active
- deactivate/reactivate are idempotent
- Vehicles are referenced by id only

This file contains NO persistence logic.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Dict, FrozenSet, Optional

from core.primitives.entity import AggregateRoot
from core.primitives.identity import require_id
from core.primitives.party import ContactInformation, Cpf, optional_text
from core.time.clock import now_utc
from engines.front_office.errors import InactiveCustomer
from engines.front_office.events import CustomerRegistered


class Customer(AggregateRoot):
    """
    Fields:
        contact_information:      ContactInformation value
        date_registered:          UTC registration time
        is_active:                False once deactivated
        preferred_contact_method: e.g. "email", "whatsapp"; optional
        cpf:                      Cpf; optional
        vehicle_ids:              frozenset of owned vehicle ids
    """

    def __init__(
        self,
        contact_information: ContactInformation,
        preferred_contact_method: Optional[str] = None,
        cpf: Optional[Cpf] = None,
    ) -> None:
        super().__init__()
        if not isinstance(contact_information, ContactInformation):
            raise TypeError("contact_information must be ContactInformation.")
        if cpf is not None and not isinstance(cpf, Cpf):
            raise TypeError("cpf must be Cpf.")

        self._contact_information = contact_information
        self._preferred_contact_method = optional_text(preferred_contact_method)
        self._cpf = cpf
        self._date_registered: datetime = now_utc()
        self._is_active = True
        # dict keeps insertion order for stable snapshots
        self._vehicle_ids: Dict[uuid.UUID, None] = {}

        self.add_domain_event(
            CustomerRegistered(
                customer_id=self.id,
                customer_name=contact_information.full_name,
                email=contact_information.email,
                registered_at=self._date_registered,
            )
        )

    # ── Read model ────────────────────────────────────────────

    @property
    def contact_information(self) -> ContactInformation:
        return self._contact_information

    @property
    def email(self) -> str:
        return self._contact_information.email

    @property
    def preferred_contact_method(self) -> Optional[str]:
        return self._preferred_contact_method

    @property
    def cpf(self) -> Optional[Cpf]:
        return self._cpf

    @property
    def date_registered(self) -> datetime:
        return self._date_registered

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def vehicle_ids(self) -> FrozenSet[uuid.UUID]:
        return frozenset(self._vehicle_ids)

    @property
    def vehicle_count(self) -> int:
        return len(self._vehicle_ids)

    def owns_vehicle(self, vehicle_id: uuid.UUID) -> bool:
        return vehicle_id in self._vehicle_ids

    # ── Commands ──────────────────────────────────────────────

    def update_contact_information(self, contact_information: ContactInformation) -> None:
        self._require_active("update contact information")
        if not isinstance(contact_information, ContactInformation):
            raise TypeError("contact_information must be ContactInformation.")
        self._contact_information = contact_information
        self.update()

    def update_preferred_contact_method(self, method: Optional[str]) -> None:
        self._require_active("update preferred contact method")
        self._preferred_contact_method = optional_text(method)
        self.update()

    def add_vehicle(self, vehicle_id: uuid.UUID) -> None:
        self._require_active("add vehicle")
        require_id(vehicle_id, "vehicle_id")
        if vehicle_id in self._vehicle_ids:
            return
        self._vehicle_ids[vehicle_id] = None
        self.update()

    def remove_vehicle(self, vehicle_id: uuid.UUID) -> None:
        self._require_active("remove vehicle")
        if vehicle_id not in self._vehicle_ids:
            return
        del self._vehicle_ids[vehicle_id]
        self.update()

    def deactivate(self) -> None:
        if not self._is_active:
            return
        self._is_active = False
        self.update()

    def reactivate(self) -> None:
        if self._is_active:
            return
        self._is_active = True
        self.update()

    def _require_active(self, operation: str) -> None:
        if not self._is_active:
            raise InactiveCustomer(operation)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "contact_information": self._contact_information.to_dict(),
            "preferred_contact_method": self._preferred_contact_method,
            "cpf": self._cpf.number if self._cpf else None,
            "date_registered": self._date_registered.isoformat(),
            "is_active": self._is_active,
            "vehicle_ids": [str(v) for v in self._vehicle_ids],
        }
