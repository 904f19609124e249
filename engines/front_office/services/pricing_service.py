"""
Front Office Engine — Quote Pricing Service
===========================================
Turns a list of parts and an hour estimate into a Quote, using the
labor-rate and markup tables from FrontOfficeSettings.

Labor is priced once, through the quote's hours × rate. No labor
line item is added, so parts_cost stays the sum of the line items.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from core.primitives.errors import ValidationError
from core.primitives.money import Money, Number, to_decimal
from core.primitives.party import optional_text, require_text
from engines.front_office.config import (
    STANDARD_CATEGORY,
    FrontOfficeSettings,
    load_front_office_settings,
)
from engines.front_office.errors import InvalidHours
from engines.front_office.quote import Quote, QuoteLineItem
from engines.front_office.services.customer_service import CustomerLoyaltyScore
from engines.front_office.work_order import WorkOrder

logger = logging.getLogger("front_office.services")

DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_FIXED = "fixed"


@dataclass(frozen=True)
class ServiceItem:
    """
    A part (or consumable) to be priced.

    Fields:
        description: Line description
        category:    Markup category ("Standard", "OEM", "Aftermarket")
        quantity:    Positive integer
        unit_cost:   Cost before markup
        part_number: Catalog reference, optional
    """
    description: str
    category: str
    quantity: int
    unit_cost: Money
    part_number: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(
            self, "description", require_text(self.description, "description")
        )
        object.__setattr__(
            self, "category", optional_text(self.category) or STANDARD_CATEGORY
        )
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValidationError("quantity must be an integer.", "quantity")
        if self.quantity <= 0:
            raise ValidationError(
                f"quantity must be positive, got {self.quantity}.", "quantity"
            )
        if not isinstance(self.unit_cost, Money):
            raise TypeError("unit_cost must be Money.")


class QuotePricingService:
    def __init__(self, settings: Optional[FrontOfficeSettings] = None) -> None:
        self._settings = settings or load_front_office_settings()

    @property
    def settings(self) -> FrontOfficeSettings:
        return self._settings

    def labor_rate_for(self, service_category: str) -> Decimal:
        """Unknown categories are charged at the Standard rate."""
        return self._settings.labor_rate_for(service_category)

    def calculate_labor_cost(
        self,
        service_category: str,
        estimated_hours: Number,
        currency: Optional[str] = None,
    ) -> Money:
        hours = to_decimal(estimated_hours)
        if hours < 0:
            raise InvalidHours("estimated_hours", estimated_hours)
        rate = self.labor_rate_for(service_category)
        return Money(hours * rate, currency or self._settings.currency)

    def calculate_part_cost(self, base_cost: Money, part_category: str) -> Money:
        """Unknown categories get the Standard markup."""
        return base_cost.multiply(self._settings.markup_for(part_category))

    def generate_quote(
        self,
        service_items: Iterable[ServiceItem],
        estimated_hours: Number,
        service_category: str = STANDARD_CATEGORY,
        validity_days: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Quote:
        line_items = [
            QuoteLineItem(
                description=item.description,
                quantity=item.quantity,
                unit_price=self.calculate_part_cost(item.unit_cost, item.category),
                part_number=item.part_number,
            )
            for item in service_items
        ]
        rate = self.labor_rate_for(service_category)

        quote = Quote(
            line_items,
            estimated_hours,
            labor_rate_per_hour=rate,
            validity_days=validity_days or self._settings.quote_validity_days,
            notes=notes,
        )
        logger.debug(
            f"Quote priced: {len(line_items)} item(s), {estimated_hours}h "
            f"@ {rate} ({service_category}) = {quote.total_amount}"
        )
        return quote

    def propose_quote(
        self,
        work_order: WorkOrder,
        line_items: Iterable[QuoteLineItem],
        estimated_hours: Number,
        labor_rate_per_hour: Optional[Number] = None,
        validity_days: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Quote:
        """
        Propose a quote on work_order, filling the labor rate and
        validity from FrontOfficeSettings when they are not given.
        """
        if labor_rate_per_hour is None:
            labor_rate_per_hour = self._settings.default_labor_rate
        return work_order.propose_quote(
            line_items,
            estimated_hours,
            labor_rate_per_hour=labor_rate_per_hour,
            validity_days=validity_days or self._settings.quote_validity_days,
            notes=notes,
        )

    def calculate_discount(
        self, total_amount: Money, discount_type: str, discount_value: Number
    ) -> Money:
        """
        "percentage": total × value / 100
        "fixed":      value, in the total's currency
        anything else: zero
        """
        value = to_decimal(discount_value)
        kind = (discount_type or "").strip().lower()
        if kind == DISCOUNT_PERCENTAGE:
            return total_amount.multiply(value / Decimal(100))
        if kind == DISCOUNT_FIXED:
            return Money(value, total_amount.currency)
        return Money.zero(total_amount.currency)

    def apply_loyalty_discount(
        self, total_amount: Money, score: CustomerLoyaltyScore
    ) -> Money:
        discount = self.calculate_discount(
            total_amount, DISCOUNT_PERCENTAGE, score.discount_percentage
        )
        return total_amount - discount
