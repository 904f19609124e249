"""
Front Office Engine — Vehicle Value Objects
===========================================
LicensePlate and VehicleIdentification.

RULES (NON-NEGOTIABLE):
- Plates are normalised (trim, upper-case, hyphens removed) and must
  match the classic (ABC1234) or Mercosul (ABC1D23) layout
- VIN is 17 alphanumeric characters, upper-cased
- Model year lies in [1900, current year + 1]
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from core.primitives.errors import InvalidFormat, ValidationError
from core.primitives.party import require_text
from core.time.clock import today_utc

MIN_MODEL_YEAR = 1900

_CLASSIC_PLATE = re.compile(r"^[A-Z]{3}[0-9]{4}$")
_MERCOSUL_PLATE = re.compile(r"^[A-Z]{3}[0-9][A-Z][0-9]{2}$")
_VIN = re.compile(r"^[A-Z0-9]{17}$")


@dataclass(frozen=True)
class LicensePlate:
    """Brazilian license plate, stored in normalised form."""
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValidationError("license_plate is required.", "license_plate")
        normalized = self.value.strip().upper().replace("-", "")
        if not (_CLASSIC_PLATE.match(normalized) or _MERCOSUL_PLATE.match(normalized)):
            raise InvalidFormat("license_plate", self.value, "ABC1234 or ABC1D23")
        object.__setattr__(self, "value", normalized)

    @property
    def is_mercosul(self) -> bool:
        return bool(_MERCOSUL_PLATE.match(self.value))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class VehicleIdentification:
    """
    What identifies a physical vehicle.

    Fields:
        vin:           17-character vehicle identification number
        license_plate: LicensePlate (a plain string is accepted and parsed)
        make:          Manufacturer, e.g. "Toyota"
        model:         e.g. "Corolla"
        year:          Model year
        color:         Paint color as described by the owner
    """
    vin: str
    license_plate: LicensePlate
    make: str
    model: str
    year: int
    color: str

    def __post_init__(self):
        vin = require_text(self.vin, "vin").upper()
        if not _VIN.match(vin):
            raise InvalidFormat("vin", self.vin, "17 alphanumeric characters")
        object.__setattr__(self, "vin", vin)

        plate = self.license_plate
        if not isinstance(plate, LicensePlate):
            plate = LicensePlate(plate)
        object.__setattr__(self, "license_plate", plate)

        object.__setattr__(self, "make", require_text(self.make, "make"))
        object.__setattr__(self, "model", require_text(self.model, "model"))
        object.__setattr__(self, "color", require_text(self.color, "color"))

        if isinstance(self.year, bool) or not isinstance(self.year, int):
            raise ValidationError("year must be an integer.", "year")
        max_year = today_utc().year + 1
        if not MIN_MODEL_YEAR <= self.year <= max_year:
            raise ValidationError(
                f"year must be between {MIN_MODEL_YEAR} and {max_year}, "
                f"got {self.year}.",
                "year",
            )

    def with_color(self, color: str) -> VehicleIdentification:
        return replace(self, color=color)

    def with_license_plate(self, plate: str) -> VehicleIdentification:
        return replace(self, license_plate=LicensePlate(plate))

    def to_display_string(self) -> str:
        return (
            f"{self.year} {self.make} {self.model} "
            f"({self.color}) - {self.license_plate}"
        )

    def to_dict(self) -> dict:
        return {
            "vin": self.vin,
            "license_plate": self.license_plate.value,
            "make": self.make,
            "model": self.model,
            "year": self.year,
            "color": self.color,
        }
