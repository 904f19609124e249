"""
Front Office Money Primitive — Decimal Monetary Value
=====================================================
Engine: Core Primitives

Money is the only way amounts travel through quotes, pricing and
loyalty scoring.

RULES (NON-NEGOTIABLE):
- amount is a Decimal rounded to 2 places (half-even); NO floats kept
- amount is never negative; a subtraction that would go below zero fails
- currency is an upper-cased 3-letter code, BRL when omitted
- + and - require the same currency; * takes a plain scalar
- Immutable: every operation returns a new Money

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Any, Union

from core.primitives.errors import CurrencyMismatch, InvalidAmount, InvalidFormat

DEFAULT_CURRENCY = "BRL"

_CENTS = Decimal("0.01")

_DISPLAY_SYMBOLS = {
    "BRL": "R$",
    "USD": "$",
    "EUR": "€",
}

Number = Union[int, float, Decimal, str]


def to_decimal(value: Any) -> Decimal:
    """
    Convert a scalar to Decimal without binary float noise.
    Floats go through str() so 0.1 stays 0.1.
    """
    if isinstance(value, bool):
        raise TypeError("bool is not a numeric amount.")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, (float, str)):
        try:
            return Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmount(value) from None
    raise TypeError(f"Cannot convert {type(value).__name__} to Decimal.")


# ══════════════════════════════════════════════════════════════
# MONEY VALUE OBJECT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Money:
    """
    Non-negative monetary value.

    Fields:
        amount:   Decimal, quantized to cents
        currency: 3-letter code (e.g. "BRL", "USD", "EUR")
    """
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        amount = to_decimal(self.amount)
        if not amount.is_finite() or amount < 0:
            raise InvalidAmount(self.amount)
        if amount == 0:
            amount = Decimal(0)

        if not isinstance(self.currency, str) or not self.currency.strip():
            raise InvalidFormat("currency", self.currency, "a 3-letter code")
        currency = self.currency.strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            raise InvalidFormat("currency", self.currency, "a 3-letter code")

        object.__setattr__(
            self, "amount", amount.quantize(_CENTS, rounding=ROUND_HALF_EVEN)
        )
        object.__setattr__(self, "currency", currency)

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> Money:
        return cls(Decimal(0), currency)

    # ── Arithmetic ────────────────────────────────────────────

    def add(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def subtract(self, other: Money) -> Money:
        """Raises InvalidAmount when the result would be negative."""
        self._assert_same_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def multiply(self, factor: Number) -> Money:
        return Money(self.amount * to_decimal(factor), self.currency)

    def __add__(self, other: Money) -> Money:
        return self.add(other)

    def __sub__(self, other: Money) -> Money:
        return self.subtract(other)

    def __mul__(self, factor: Number) -> Money:
        if isinstance(factor, Money):
            return NotImplemented
        return self.multiply(factor)

    __rmul__ = __mul__

    # ── Comparison (same currency only) ───────────────────────

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    def is_zero(self) -> bool:
        return self.amount == 0

    def _assert_same_currency(self, other: Money) -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot operate with {type(other).__name__}.")
        if self.currency != other.currency:
            raise CurrencyMismatch(self.currency, other.currency)

    # ── Presentation ──────────────────────────────────────────

    def to_display_string(self) -> str:
        symbol = _DISPLAY_SYMBOLS.get(self.currency)
        if symbol:
            return f"{symbol} {self.amount:,.2f}"
        return f"{self.amount:,.2f} {self.currency}"

    def __str__(self) -> str:
        return self.to_display_string()

    def to_dict(self) -> dict:
        return {"amount": str(self.amount), "currency": self.currency}

    @classmethod
    def from_dict(cls, data: dict) -> Money:
        return cls(
            amount=Decimal(str(data["amount"])),
            currency=data.get("currency", DEFAULT_CURRENCY),
        )
