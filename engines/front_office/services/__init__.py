"""
Front Office Engine — Domain Services
"""

from engines.front_office.services.customer_service import (
    LOYALTY_DISCOUNTS,
    CustomerDomainService,
    CustomerLoyaltyScore,
    LoyaltyLevel,
)
from engines.front_office.services.pricing_service import (
    DISCOUNT_FIXED,
    DISCOUNT_PERCENTAGE,
    QuotePricingService,
    ServiceItem,
)

__all__ = [
    "CustomerDomainService",
    "CustomerLoyaltyScore",
    "LoyaltyLevel",
    "LOYALTY_DISCOUNTS",
    "QuotePricingService",
    "ServiceItem",
    "DISCOUNT_PERCENTAGE",
    "DISCOUNT_FIXED",
]
