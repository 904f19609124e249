"""
Front Office Party Primitive — Contact, Address and Taxpayer Values
===================================================================
Engine: Core Primitives

Value objects that describe the people the shop deals with.

RULES (NON-NEGOTIABLE):
- All values are immutable snapshots; updates return new instances
- Required text is trimmed and must be non-blank
- Email is stored lower-cased
- CPF is stored as its 11 digits and must pass the mod-11 check

This file contains NO persistence logic.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Optional

from core.primitives.errors import InvalidFormat, ValidationError

DEFAULT_COUNTRY = "Brasil"

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_text(value: Optional[str], field: str) -> str:
    """Trim a required string field, rejecting blanks."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required.", field)
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    """Trim an optional string field; blank collapses to None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


# ══════════════════════════════════════════════════════════════
# ADDRESS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Address:
    """
    Postal address.

    Fields:
        street:      Street and number
        city:        City name
        state:       State / province (e.g. "SP")
        postal_code: Postal code as written (CEP)
        country:     Country name, "Brasil" when omitted
    """
    street: str
    city: str
    state: str
    postal_code: str
    country: str = DEFAULT_COUNTRY

    def __post_init__(self):
        object.__setattr__(self, "street", require_text(self.street, "street"))
        object.__setattr__(self, "city", require_text(self.city, "city"))
        object.__setattr__(self, "state", require_text(self.state, "state"))
        object.__setattr__(
            self, "postal_code", require_text(self.postal_code, "postal_code")
        )
        object.__setattr__(
            self, "country", optional_text(self.country) or DEFAULT_COUNTRY
        )

    def to_full_address(self) -> str:
        return (
            f"{self.street}, {self.city}, {self.state} "
            f"{self.postal_code}, {self.country}"
        )

    def to_dict(self) -> dict:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Address:
        return cls(
            street=data["street"],
            city=data["city"],
            state=data["state"],
            postal_code=data["postal_code"],
            country=data.get("country", DEFAULT_COUNTRY),
        )


# ══════════════════════════════════════════════════════════════
# CONTACT INFORMATION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ContactInformation:
    """
    How to reach a customer.

    Fields:
        full_name:    Customer's name as registered
        email:        Lower-cased, trimmed; unique across customers
        phone_number: Free-form, trimmed
        address:      Postal address
    """
    full_name: str
    email: str
    phone_number: str
    address: Address

    def __post_init__(self):
        object.__setattr__(
            self, "full_name", require_text(self.full_name, "full_name")
        )
        email = require_text(self.email, "email").lower()
        if not _EMAIL_PATTERN.match(email):
            raise InvalidFormat("email", self.email, "name@domain.tld")
        object.__setattr__(self, "email", email)
        object.__setattr__(
            self, "phone_number", require_text(self.phone_number, "phone_number")
        )
        if not isinstance(self.address, Address):
            raise TypeError("address must be Address.")

    def update_email(self, new_email: str) -> ContactInformation:
        return replace(self, email=new_email)

    def update_phone_number(self, new_phone_number: str) -> ContactInformation:
        return replace(self, phone_number=new_phone_number)

    def update_address(self, new_address: Address) -> ContactInformation:
        return replace(self, address=new_address)

    def to_dict(self) -> dict:
        return {
            "full_name": self.full_name,
            "email": self.email,
            "phone_number": self.phone_number,
            "address": self.address.to_dict(),
        }


# ══════════════════════════════════════════════════════════════
# CPF (Brazilian individual taxpayer number)
# ══════════════════════════════════════════════════════════════

def _cpf_check_digit(digits: str) -> int:
    weight = len(digits) + 1
    total = sum(int(d) * (weight - i) for i, d in enumerate(digits))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


@dataclass(frozen=True)
class Cpf:
    """
    11-digit CPF. Accepts "123.456.789-09" or "12345678909".
    """
    number: str

    def __post_init__(self):
        if not isinstance(self.number, str) or not self.number.strip():
            raise ValidationError("CPF is required.", "cpf")
        digits = re.sub(r"\D", "", self.number)
        if len(digits) != 11 or len(set(digits)) == 1:
            raise InvalidFormat("cpf", self.number, "11 digits")
        if _cpf_check_digit(digits[:9]) != int(digits[9]):
            raise InvalidFormat("cpf", self.number, "a valid check digit")
        if _cpf_check_digit(digits[:10]) != int(digits[10]):
            raise InvalidFormat("cpf", self.number, "a valid check digit")
        object.__setattr__(self, "number", digits)

    def formatted(self) -> str:
        n = self.number
        return f"{n[:3]}.{n[3:6]}.{n[6:9]}-{n[9:]}"

    def __str__(self) -> str:
        return self.formatted()
