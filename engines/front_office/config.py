"""
Front Office Engine — Settings
==============================
Tunable pricing and loyalty numbers, read from Django settings.

    FRONT_OFFICE = {
        "CURRENCY": "BRL",
        "DEFAULT_LABOR_RATE": "150",
        "QUOTE_VALIDITY_DAYS": 30,
        "LABOR_RATES": {"Standard": "120", ...},
        "MARKUP_RATES": {"Standard": "1.25", ...},
        "LOYALTY_THRESHOLDS": {"Platinum": [10, "10000"], ...},
        "SERVICE_INTERVAL_DAYS": 180,
        "SERVICE_INTERVAL_MILES": 5000,
    }

Keys left out fall back to DEFAULTS. When Django settings are not
configured at all, DEFAULTS are used as-is.

Services and the in-memory repositories read settings; aggregates
never do.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping, Tuple

from django.conf import settings as django_settings
from django.core.exceptions import ImproperlyConfigured

from core.primitives.money import to_decimal

logger = logging.getLogger("front_office.config")

DEFAULTS: Dict[str, Any] = {
    "CURRENCY": "BRL",
    "DEFAULT_LABOR_RATE": "150",
    "QUOTE_VALIDITY_DAYS": 30,
    "LABOR_RATES": {
        "Standard": "120",
        "Diagnostic": "150",
        "Specialist": "180",
        "Emergency": "220",
    },
    "MARKUP_RATES": {
        "Standard": "1.25",
        "OEM": "1.15",
        "Aftermarket": "1.35",
    },
    # level: (min completed services, min total spent); checked top-down
    "LOYALTY_THRESHOLDS": {
        "Platinum": (10, "10000"),
        "Gold": (5, "5000"),
        "Silver": (3, "2000"),
    },
    "SERVICE_INTERVAL_DAYS": 180,
    "SERVICE_INTERVAL_MILES": 5000,
}

STANDARD_CATEGORY = "Standard"


@dataclass(frozen=True)
class FrontOfficeSettings:
    """
    Resolved, validated settings.

    Fields:
        currency:               Currency new prices are expressed in
        default_labor_rate:     Hourly rate when none is given
        quote_validity_days:    Days a quote stays open
        labor_rates:            Hourly rate per service category
        markup_rates:           Multiplier per part category
        loyalty_thresholds:     level → (services, spent)
        service_interval_days:  Days between recommended services
        service_interval_miles: Distance between recommended services
    """
    currency: str
    default_labor_rate: Decimal
    quote_validity_days: int
    labor_rates: Mapping[str, Decimal]
    markup_rates: Mapping[str, Decimal]
    loyalty_thresholds: Mapping[str, Tuple[int, Decimal]]
    service_interval_days: int
    service_interval_miles: int

    def __post_init__(self):
        if STANDARD_CATEGORY not in self.labor_rates:
            raise ImproperlyConfigured("FRONT_OFFICE LABOR_RATES needs a 'Standard' rate.")
        if STANDARD_CATEGORY not in self.markup_rates:
            raise ImproperlyConfigured("FRONT_OFFICE MARKUP_RATES needs a 'Standard' markup.")
        if self.quote_validity_days <= 0:
            raise ImproperlyConfigured("FRONT_OFFICE QUOTE_VALIDITY_DAYS must be positive.")
        for name, rate in {**self.labor_rates, **self.markup_rates}.items():
            if rate < 0:
                raise ImproperlyConfigured(f"FRONT_OFFICE rate '{name}' cannot be negative.")

    def labor_rate_for(self, category: str) -> Decimal:
        return self.labor_rates.get(category, self.labor_rates[STANDARD_CATEGORY])

    def markup_for(self, category: str) -> Decimal:
        return self.markup_rates.get(category, self.markup_rates[STANDARD_CATEGORY])


def _decimal(value: Any, key: str) -> Decimal:
    try:
        return to_decimal(value)
    except (TypeError, ValueError) as exc:
        raise ImproperlyConfigured(f"FRONT_OFFICE {key}: {exc}") from exc


def build_settings(overrides: Mapping[str, Any] | None = None) -> FrontOfficeSettings:
    """Merge overrides onto DEFAULTS and validate."""
    raw = dict(DEFAULTS)
    unknown = set(overrides or {}) - set(DEFAULTS)
    if unknown:
        raise ImproperlyConfigured(f"Unknown FRONT_OFFICE keys: {sorted(unknown)}.")
    raw.update(overrides or {})

    try:
        thresholds = {
            level: (int(services), _decimal(spent, f"LOYALTY_THRESHOLDS.{level}"))
            for level, (services, spent) in raw["LOYALTY_THRESHOLDS"].items()
        }
        return FrontOfficeSettings(
            currency=str(raw["CURRENCY"]).strip().upper(),
            default_labor_rate=_decimal(raw["DEFAULT_LABOR_RATE"], "DEFAULT_LABOR_RATE"),
            quote_validity_days=int(raw["QUOTE_VALIDITY_DAYS"]),
            labor_rates={
                k: _decimal(v, f"LABOR_RATES.{k}") for k, v in raw["LABOR_RATES"].items()
            },
            markup_rates={
                k: _decimal(v, f"MARKUP_RATES.{k}") for k, v in raw["MARKUP_RATES"].items()
            },
            loyalty_thresholds=thresholds,
            service_interval_days=int(raw["SERVICE_INTERVAL_DAYS"]),
            service_interval_miles=int(raw["SERVICE_INTERVAL_MILES"]),
        )
    except (TypeError, ValueError, AttributeError) as exc:
        raise ImproperlyConfigured(f"Invalid FRONT_OFFICE settings: {exc}") from exc


def load_front_office_settings() -> FrontOfficeSettings:
    """
    Read settings.FRONT_OFFICE from Django, or DEFAULTS when Django
    settings are not configured.
    """
    try:
        overrides = getattr(django_settings, "FRONT_OFFICE", {})
    except ImproperlyConfigured:
        logger.debug("Django settings not configured; using FRONT_OFFICE defaults")
        return build_settings()
    return build_settings(overrides)
