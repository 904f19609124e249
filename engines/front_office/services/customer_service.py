"""
Front Office Engine — Customer Domain Service
=============================================
Operations that span Customer and Vehicle, plus loyalty scoring.

Orchestrations validate every precondition before mutating anything,
then run their repository writes inside the unit of work. With the
default BestEffortUnitOfWork the writes are sequential and not
atomic; pass a DjangoUnitOfWork to commit them together.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, Optional

from django.core.exceptions import ImproperlyConfigured

from core.primitives.errors import DuplicateError
from core.primitives.money import Money
from core.primitives.party import ContactInformation, Cpf
from core.time.clock import now_utc
from engines.front_office.config import FrontOfficeSettings, load_front_office_settings
from engines.front_office.customer import Customer
from engines.front_office.errors import (
    CustomerNotFound,
    DuplicateEmail,
    InactiveCustomer,
    InactiveVehicle,
    VehicleNotFound,
)
from engines.front_office.repositories import CustomerRepository, VehicleRepository
from engines.front_office.unit_of_work import BestEffortUnitOfWork, UnitOfWork
from engines.front_office.value_objects import VehicleIdentification
from engines.front_office.vehicle import Vehicle
from engines.front_office.work_order import WorkOrder, WorkOrderStatus

logger = logging.getLogger("front_office.services")


# ══════════════════════════════════════════════════════════════
# LOYALTY
# ══════════════════════════════════════════════════════════════

class LoyaltyLevel(Enum):
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"


# Highest first: the first level whose thresholds are met wins
_LEVELS_DESCENDING = (LoyaltyLevel.PLATINUM, LoyaltyLevel.GOLD, LoyaltyLevel.SILVER)

LOYALTY_DISCOUNTS: Dict[LoyaltyLevel, Decimal] = {
    LoyaltyLevel.PLATINUM: Decimal("15"),
    LoyaltyLevel.GOLD: Decimal("10"),
    LoyaltyLevel.SILVER: Decimal("5"),
    LoyaltyLevel.BRONZE: Decimal("0"),
}


@dataclass(frozen=True)
class CustomerLoyaltyScore:
    """
    Fields:
        level:              LoyaltyLevel reached
        completed_services: Delivered work orders counted
        total_spent:        Σ approved amounts of those orders
        years_as_customer:  Days since registration / 365
        vehicle_count:      Vehicles currently owned
    """
    level: LoyaltyLevel
    completed_services: int
    total_spent: Money
    years_as_customer: float
    vehicle_count: int

    @property
    def discount_percentage(self) -> Decimal:
        return LOYALTY_DISCOUNTS[self.level]

    @property
    def is_vip(self) -> bool:
        return self.level in (LoyaltyLevel.GOLD, LoyaltyLevel.PLATINUM)


# ══════════════════════════════════════════════════════════════
# SERVICE
# ══════════════════════════════════════════════════════════════

class CustomerDomainService:
    def __init__(
        self,
        customer_repository: CustomerRepository,
        vehicle_repository: VehicleRepository,
        unit_of_work: Optional[UnitOfWork] = None,
        settings: Optional[FrontOfficeSettings] = None,
    ) -> None:
        self._customers = customer_repository
        self._vehicles = vehicle_repository
        self._uow = unit_of_work or BestEffortUnitOfWork()
        self._settings = settings or load_front_office_settings()
        self._thresholds = self._resolve_thresholds(self._settings)

    @staticmethod
    def _resolve_thresholds(settings: FrontOfficeSettings) -> Dict[LoyaltyLevel, tuple]:
        thresholds = {}
        for name, threshold in settings.loyalty_thresholds.items():
            try:
                level = LoyaltyLevel(name)
            except ValueError:
                raise ImproperlyConfigured(
                    f"Unknown loyalty level in FRONT_OFFICE: '{name}'."
                ) from None
            thresholds[level] = threshold
        return thresholds

    # ── Registration ──────────────────────────────────────────

    def can_create_customer_with_email(self, email: Optional[str]) -> bool:
        if not email or not email.strip():
            return False
        return not self._customers.exists_with_email(email.strip().lower())

    def register_new_customer(
        self,
        contact_information: ContactInformation,
        first_vehicle: Optional[VehicleIdentification] = None,
        initial_mileage: int = 0,
        preferred_contact_method: Optional[str] = None,
        cpf: Optional[Cpf] = None,
    ) -> Customer:
        """
        Register a customer and, optionally, their first vehicle.

        Raises:
            DuplicateEmail: email already registered
            DuplicateError: first_vehicle's VIN already registered
        """
        if self._customers.exists_with_email(contact_information.email):
            raise DuplicateEmail(contact_information.email)
        if first_vehicle is not None and self._vehicles.exists_with_vin(first_vehicle.vin):
            raise DuplicateError("Vehicle", "vin", first_vehicle.vin)

        customer = Customer(contact_information, preferred_contact_method, cpf)
        vehicle = None
        if first_vehicle is not None:
            vehicle = Vehicle(customer.id, first_vehicle, initial_mileage)

        with self._uow.atomic():
            self._customers.add(customer)
            if vehicle is not None:
                self._vehicles.add(vehicle)
                customer.add_vehicle(vehicle.id)
                self._customers.update(customer)
            self._uow.collect(customer, vehicle)

        logger.info(
            f"Customer registered: {customer.id} ({customer.email})"
            + (f" with vehicle {vehicle.id}" if vehicle else "")
        )
        return customer

    # ── Ownership ─────────────────────────────────────────────

    def transfer_vehicle(self, vehicle_id: uuid.UUID, new_customer_id: uuid.UUID) -> Vehicle:
        """
        Move a vehicle to another customer: remove from the old owner,
        re-home the vehicle, add to the new owner.

        Raises:
            VehicleNotFound / CustomerNotFound: any party missing
            InactiveVehicle / InactiveCustomer: any party inactive
        """
        vehicle = self._vehicles.find_by_id(vehicle_id)
        if vehicle is None:
            raise VehicleNotFound(vehicle_id)
        new_customer = self._customers.find_by_id(new_customer_id)
        if new_customer is None:
            raise CustomerNotFound(new_customer_id)
        old_customer = self._customers.find_by_id(vehicle.customer_id)
        if old_customer is None:
            raise CustomerNotFound(vehicle.customer_id)

        if old_customer.id == new_customer.id:
            return vehicle

        if not vehicle.is_active:
            raise InactiveVehicle("transfer vehicle")
        if not old_customer.is_active:
            raise InactiveCustomer("remove vehicle")
        if not new_customer.is_active:
            raise InactiveCustomer("add vehicle")

        with self._uow.atomic():
            old_customer.remove_vehicle(vehicle.id)
            self._customers.update(old_customer)

            vehicle.transfer_to_customer(new_customer.id)
            self._vehicles.update(vehicle)

            new_customer.add_vehicle(vehicle.id)
            self._customers.update(new_customer)

            self._uow.collect(old_customer, vehicle, new_customer)

        logger.info(
            f"Vehicle {vehicle.id} transferred: "
            f"{old_customer.id} → {new_customer.id}"
        )
        return vehicle

    # ── Service reminders ─────────────────────────────────────

    def is_vehicle_due_for_service(self, vehicle: Vehicle) -> bool:
        """Vehicle.is_due_for_service against the configured intervals."""
        return vehicle.is_due_for_service(
            max_days_since_service=self._settings.service_interval_days,
            max_miles_since_service=self._settings.service_interval_miles,
        )

    # ── Loyalty ───────────────────────────────────────────────

    def calculate_loyalty_score(
        self, customer: Customer, work_orders: Iterable[WorkOrder]
    ) -> CustomerLoyaltyScore:
        """
        Reads the given history, writes nothing.

        total_spent is summed in the currency the orders were approved
        in (the settings currency when there are none). Raises
        CurrencyMismatch when delivered orders were approved in
        different currencies.
        """
        delivered = [w for w in work_orders if w.status is WorkOrderStatus.DELIVERED]
        amounts = [w.approved_amount for w in delivered if w.approved_amount is not None]

        currency = amounts[0].currency if amounts else self._settings.currency
        total_spent = Money.zero(currency)
        for amount in amounts:
            total_spent = total_spent + amount

        days = (now_utc() - customer.date_registered).days
        level = self._level_for(len(delivered), total_spent.amount)

        return CustomerLoyaltyScore(
            level=level,
            completed_services=len(delivered),
            total_spent=total_spent,
            years_as_customer=days / 365.0,
            vehicle_count=customer.vehicle_count,
        )

    def _level_for(self, completed_services: int, total_spent: Decimal) -> LoyaltyLevel:
        for level in _LEVELS_DESCENDING:
            threshold = self._thresholds.get(level)
            if threshold is None:
                continue
            min_services, min_spent = threshold
            if completed_services >= min_services and total_spent >= min_spent:
                return level
        return LoyaltyLevel.BRONZE

    @staticmethod
    def is_vip_customer(score: CustomerLoyaltyScore) -> bool:
        return score.is_vip
