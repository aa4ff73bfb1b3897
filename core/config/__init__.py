"""
FOS Core Config — Public API
===============================
Admin-configurable pricing data (discount tiers, fee tables, switches).
Doctrine: engines receive configuration, they never look it up.
"""

from core.config.rules import (
    ALL_BRANCHES,
    HEADQUARTERS,
    HEADQUARTERS_SCOPES,
    MIN_POINT_ORDER_VALUE,
    OTHER_DISTRICT,
    BranchProfile,
    ConfigStore,
    DeliveryFeeRow,
    DeliveryFeeTable,
    DiscountTier,
    InMemoryConfigStore,
    PricingRules,
    Surcharges,
)

__all__ = [
    "ALL_BRANCHES",
    "HEADQUARTERS",
    "HEADQUARTERS_SCOPES",
    "MIN_POINT_ORDER_VALUE",
    "OTHER_DISTRICT",
    "BranchProfile",
    "ConfigStore",
    "DeliveryFeeRow",
    "DeliveryFeeTable",
    "DiscountTier",
    "InMemoryConfigStore",
    "PricingRules",
    "Surcharges",
]
