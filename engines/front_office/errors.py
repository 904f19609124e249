"""
Front Office Engine — Errors
============================
Engine-specific refinements of the core domain error taxonomy.
Catch the core categories (ValidationError, InvalidOperationForState,
NotFoundError, DuplicateError) to handle a whole family at once.
"""

from __future__ import annotations

import uuid
from typing import Any

from core.primitives.errors import (
    DuplicateError,
    InvalidOperationForState,
    NotFoundError,
    ValidationError,
)


# ── Quote ─────────────────────────────────────────────────────

class EmptyQuote(ValidationError):
    """A quote needs at least one line item."""

    def __init__(self):
        super().__init__("Quote must have at least one line item.", "line_items")


class InvalidHours(ValidationError):
    """Estimated hours or labor rate is negative."""

    def __init__(self, field: str, value: Any):
        self.value = value
        super().__init__(f"{field} cannot be negative, got {value}.", field)


class MissingSignature(ValidationError):
    """Approval requires a customer signature."""

    def __init__(self):
        super().__init__(
            "Customer signature is required for approval.", "customer_signature"
        )


class AlreadyApproved(InvalidOperationForState):
    """Approved quotes are frozen."""

    def __init__(self, operation: str):
        super().__init__(
            operation, "Approved", f"Cannot {operation}: quote is already approved."
        )


class QuoteExpired(InvalidOperationForState):
    """Quote validity window has passed."""

    def __init__(self, expires_at: Any):
        self.expires_at = expires_at
        super().__init__(
            "approve quote", "Expired", f"Quote expired at {expires_at}."
        )


# ── Work order ────────────────────────────────────────────────

class InvalidTransition(InvalidOperationForState):
    """Operation not allowed from the work order's current status."""

    def __init__(self, operation: str, current_status: Any):
        status = getattr(current_status, "value", current_status)
        super().__init__(
            operation,
            current_status,
            f"Cannot {operation} from status: {status}.",
        )


class MissingQuote(InvalidOperationForState):
    """Operation needs a proposed quote."""

    def __init__(self, operation: str, current_status: Any):
        super().__init__(
            operation, current_status, f"Cannot {operation}: no quote available."
        )


# ── Customer / vehicle ────────────────────────────────────────

class InactiveCustomer(InvalidOperationForState):
    def __init__(self, operation: str):
        super().__init__(
            operation, "Inactive", f"Cannot {operation} for inactive customer."
        )


class InactiveVehicle(InvalidOperationForState):
    def __init__(self, operation: str):
        super().__init__(
            operation, "Inactive", f"Cannot {operation} for inactive vehicle."
        )


class NegativeMileage(ValidationError):
    def __init__(self, mileage: int):
        self.mileage = mileage
        super().__init__(f"Mileage cannot be negative, got {mileage}.", "mileage")


class MileageRegression(ValidationError):
    """Odometer readings only move forward."""

    def __init__(self, current: int, proposed: int):
        self.current = current
        self.proposed = proposed
        super().__init__(
            f"New mileage {proposed} cannot be less than current mileage {current}.",
            "mileage",
        )


# ── Lookup / uniqueness ───────────────────────────────────────

class CustomerNotFound(NotFoundError):
    def __init__(self, customer_id: uuid.UUID):
        super().__init__("Customer", customer_id)


class VehicleNotFound(NotFoundError):
    def __init__(self, vehicle_id: uuid.UUID):
        super().__init__("Vehicle", vehicle_id)


class WorkOrderNotFound(NotFoundError):
    def __init__(self, work_order_id: uuid.UUID):
        super().__init__("WorkOrder", work_order_id)


class DuplicateEmail(DuplicateError):
    def __init__(self, email: str):
        super().__init__("Customer", "email", email)
