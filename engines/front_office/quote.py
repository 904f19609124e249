"""
Front Office Engine — Quote
===========================
A priced proposal for a work order: parts line items plus labor.

RULES (NON-NEGOTIABLE):
- At least one line item at creation
- All line items share one currency; labor is priced in it too
- parts_cost = Σ line totals, labor_cost = hours × rate,
  total_amount = parts_cost + labor_cost, recomputed on every change
- Approval needs a signature and an unexpired quote
- Once approved, items, hours and expiry are frozen

This file contains NO persistence logic.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from core.primitives.entity import Entity
from core.primitives.errors import CurrencyMismatch, ValidationError
from core.primitives.identity import new_entity_id
from core.primitives.money import Money, Number, to_decimal
from core.primitives.party import optional_text, require_text
from core.time.clock import now_utc, today_utc
from engines.front_office.errors import (
    AlreadyApproved,
    EmptyQuote,
    InvalidHours,
    MissingSignature,
    QuoteExpired,
)

DEFAULT_LABOR_RATE = Decimal("150")
DEFAULT_VALIDITY_DAYS = 30


# ══════════════════════════════════════════════════════════════
# LINE ITEM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class QuoteLineItem:
    """
    One priced line of a quote.

    Fields:
        description: What is being charged, trimmed
        quantity:    Positive integer
        unit_price:  Money per unit
        part_number: Catalog reference, None for services
        is_labor:    True for labor lines
        id:          Time-ordered id, used by Quote.remove_line_item
    """
    description: str
    quantity: int
    unit_price: Money
    part_number: Optional[str] = None
    is_labor: bool = False
    id: uuid.UUID = field(default_factory=new_entity_id)

    def __post_init__(self):
        object.__setattr__(
            self, "description", require_text(self.description, "description")
        )
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValidationError("quantity must be an integer.", "quantity")
        if self.quantity <= 0:
            raise ValidationError(
                f"quantity must be positive, got {self.quantity}.", "quantity"
            )
        if not isinstance(self.unit_price, Money):
            raise TypeError("unit_price must be Money.")
        object.__setattr__(self, "part_number", optional_text(self.part_number))

    @property
    def total_price(self) -> Money:
        return self.unit_price.multiply(self.quantity)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "description": self.description,
            "quantity": self.quantity,
            "unit_price": self.unit_price.to_dict(),
            "total_price": self.total_price.to_dict(),
            "part_number": self.part_number,
            "is_labor": self.is_labor,
        }


# ══════════════════════════════════════════════════════════════
# QUOTE
# ══════════════════════════════════════════════════════════════

def _non_negative(value: Number, field_name: str) -> Decimal:
    amount = to_decimal(value)
    if not amount.is_finite() or amount < 0:
        raise InvalidHours(field_name, value)
    return amount


def _positive_days(days: int, field_name: str) -> int:
    if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
        raise ValidationError(f"{field_name} must be a positive integer, got {days}.", field_name)
    return days


class Quote(Entity):
    """
    Owned by a WorkOrder; never loaded on its own.
    """

    def __init__(
        self,
        line_items: Iterable[QuoteLineItem],
        estimated_hours: Number,
        labor_rate_per_hour: Number = DEFAULT_LABOR_RATE,
        validity_days: int = DEFAULT_VALIDITY_DAYS,
        notes: Optional[str] = None,
    ) -> None:
        super().__init__()
        items: List[QuoteLineItem] = list(line_items or ())
        if not items:
            raise EmptyQuote()
        for item in items:
            if not isinstance(item, QuoteLineItem):
                raise TypeError("line_items must contain QuoteLineItem.")

        self._currency = items[0].unit_price.currency
        for item in items:
            self._assert_currency(item)

        self._line_items = items
        self._estimated_hours = _non_negative(estimated_hours, "estimated_hours")
        self._labor_rate_per_hour = _non_negative(
            labor_rate_per_hour, "labor_rate_per_hour"
        )
        self._validity_days = _positive_days(validity_days, "validity_days")
        self._expires_at = self.created_at + timedelta(days=validity_days)
        self._notes = optional_text(notes)

        self._is_approved = False
        self._approved_at: Optional[datetime] = None
        self._customer_signature: Optional[str] = None

        self._recalculate()

    # ── Read model ────────────────────────────────────────────

    @property
    def line_items(self) -> Tuple[QuoteLineItem, ...]:
        return tuple(self._line_items)

    @property
    def currency(self) -> str:
        return self._currency

    @property
    def estimated_hours(self) -> Decimal:
        return self._estimated_hours

    @property
    def labor_rate_per_hour(self) -> Decimal:
        return self._labor_rate_per_hour

    @property
    def parts_cost(self) -> Money:
        return self._parts_cost

    @property
    def labor_cost(self) -> Money:
        return self._labor_cost

    @property
    def total_amount(self) -> Money:
        return self._total_amount

    @property
    def validity_days(self) -> int:
        return self._validity_days

    @property
    def expires_at(self) -> datetime:
        return self._expires_at

    @property
    def is_approved(self) -> bool:
        return self._is_approved

    @property
    def approved_at(self) -> Optional[datetime]:
        return self._approved_at

    @property
    def customer_signature(self) -> Optional[str]:
        return self._customer_signature

    @property
    def notes(self) -> Optional[str]:
        return self._notes

    @property
    def is_expired(self) -> bool:
        return not self._is_approved and now_utc() > self._expires_at

    @property
    def days_until_expiration(self) -> int:
        """Negative once the expiry date has passed."""
        return (self._expires_at.date() - today_utc()).days

    # ── Commands ──────────────────────────────────────────────

    def approve(self, customer_signature: str, approval_date: Optional[datetime] = None) -> None:
        if self._is_approved:
            raise AlreadyApproved("approve quote")
        if now_utc() > self._expires_at:
            raise QuoteExpired(self._expires_at)
        if not isinstance(customer_signature, str) or not customer_signature.strip():
            raise MissingSignature()

        self._is_approved = True
        self._approved_at = approval_date or now_utc()
        self._customer_signature = customer_signature.strip()
        self.update()

    def add_line_item(self, item: QuoteLineItem) -> None:
        if self._is_approved:
            raise AlreadyApproved("add line item")
        if not isinstance(item, QuoteLineItem):
            raise TypeError("item must be QuoteLineItem.")
        self._assert_currency(item)

        self._line_items.append(item)
        self._recalculate()
        self.update()

    def remove_line_item(self, item_id: uuid.UUID) -> bool:
        """Returns False (and changes nothing) when the id is absent."""
        if self._is_approved:
            raise AlreadyApproved("remove line item")

        for index, item in enumerate(self._line_items):
            if item.id == item_id:
                del self._line_items[index]
                self._recalculate()
                self.update()
                return True
        return False

    def update_estimated_hours(
        self,
        estimated_hours: Number,
        labor_rate_per_hour: Optional[Number] = None,
    ) -> None:
        """Rate defaults to the quote's current rate."""
        if self._is_approved:
            raise AlreadyApproved("update estimated hours")
        hours = _non_negative(estimated_hours, "estimated_hours")
        rate = self._labor_rate_per_hour
        if labor_rate_per_hour is not None:
            rate = _non_negative(labor_rate_per_hour, "labor_rate_per_hour")

        self._estimated_hours = hours
        self._labor_rate_per_hour = rate
        self._recalculate()
        self.update()

    def extend_expiration(self, additional_days: int) -> None:
        if self._is_approved:
            raise AlreadyApproved("extend expiration")
        _positive_days(additional_days, "additional_days")

        self._expires_at = self._expires_at + timedelta(days=additional_days)
        self._validity_days += additional_days
        self.update()

    # ── Internals ─────────────────────────────────────────────

    def _assert_currency(self, item: QuoteLineItem) -> None:
        if item.unit_price.currency != self._currency:
            raise CurrencyMismatch(self._currency, item.unit_price.currency)

    def _recalculate(self) -> None:
        parts = Money.zero(self._currency)
        for item in self._line_items:
            parts = parts + item.total_price
        labor = Money(self._estimated_hours * self._labor_rate_per_hour, self._currency)

        self._parts_cost = parts
        self._labor_cost = labor
        self._total_amount = parts + labor

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "line_items": [item.to_dict() for item in self._line_items],
            "estimated_hours": str(self._estimated_hours),
            "labor_rate_per_hour": str(self._labor_rate_per_hour),
            "parts_cost": self._parts_cost.to_dict(),
            "labor_cost": self._labor_cost.to_dict(),
            "total_amount": self._total_amount.to_dict(),
            "created_at": self.created_at.isoformat(),
            "expires_at": self._expires_at.isoformat(),
            "is_approved": self._is_approved,
            "approved_at": self._approved_at.isoformat() if self._approved_at else None,
            "customer_signature": self._customer_signature,
            "notes": self._notes,
        }
