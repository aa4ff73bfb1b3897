"""
FOS Core Config — Admin-Configurable Rules
=============================================
Doctrine: engines never reach into ambient settings.
Discount tiers, delivery fee tables and pricing switches are
admin-configured data passed into the engines explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from core.primitives.money import require_money

logger = logging.getLogger("fos.config")

# Distinguished fee-table row used when a district has no entry of its own.
OTHER_DISTRICT = "기타"

# Branch names that mean "every branch" (headquarters scope).
HEADQUARTERS = "본사"
ALL_BRANCHES = "전체"
HEADQUARTERS_SCOPES = frozenset({HEADQUARTERS, ALL_BRANCHES})

# Discounted subtotal required before points may be redeemed or earned.
# A business constant, deliberately not part of PricingRules.
MIN_POINT_ORDER_VALUE = 5000


# ══════════════════════════════════════════════════════════════
# PRICING RULES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PricingRules:
    """
    Global pricing switches.

    earn_rate_percent:         Points earned per 100 of net payable.
    max_custom_discount_rate:  Cap applied to a hand-typed discount rate.
    allow_point_accumulation:  Global on/off for point earning.
    earn_on_simplified_entry:  Whether the simplified (mobile) order
                               entry path earns points at all.
    """

    earn_rate_percent: int = 2
    max_custom_discount_rate: int = 50
    allow_point_accumulation: bool = True
    earn_on_simplified_entry: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.earn_rate_percent <= 100:
            raise ValueError(
                f"earn_rate_percent must be between 0 and 100, "
                f"got {self.earn_rate_percent}."
            )
        if not 0 <= self.max_custom_discount_rate <= 100:
            raise ValueError(
                f"max_custom_discount_rate must be between 0 and 100, "
                f"got {self.max_custom_discount_rate}."
            )

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> PricingRules:
        """
        Build rules from the persisted system-settings document.

        A stored maxDiscountRate replaces the built-in cap of 50 outright,
        in either direction; the cap only applies when the key is absent.
        """
        defaults = cls()
        rules = cls(
            earn_rate_percent=int(
                settings.get("pointEarnRate", defaults.earn_rate_percent)
            ),
            max_custom_discount_rate=int(
                settings.get("maxDiscountRate", defaults.max_custom_discount_rate)
            ),
            allow_point_accumulation=bool(
                settings.get(
                    "allowPointAccumulation", defaults.allow_point_accumulation
                )
            ),
            earn_on_simplified_entry=bool(
                settings.get(
                    "earnPointsOnSimplifiedEntry",
                    defaults.earn_on_simplified_entry,
                )
            ),
        )
        logger.debug(f"Pricing rules loaded from settings: {rules}")
        return rules


# ══════════════════════════════════════════════════════════════
# DISCOUNT TIER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DiscountTier:
    """A configured discount button (e.g. "VIP 10%") for one branch."""

    label: str
    rate: int
    branch_id: str
    is_active: bool = True
    min_subtotal: int = 0

    def __post_init__(self) -> None:
        if not self.label:
            raise ValueError("label must be non-empty.")
        if not 0 <= self.rate <= 100:
            raise ValueError(f"Tier rate must be between 0 and 100, got {self.rate}.")
        require_money(self.min_subtotal, "min_subtotal")


# ══════════════════════════════════════════════════════════════
# DELIVERY FEE TABLE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DeliveryFeeRow:
    district: str
    fee: int

    def __post_init__(self) -> None:
        if not self.district:
            raise ValueError("district must be non-empty.")
        require_money(self.fee, "fee")


@dataclass(frozen=True)
class Surcharges:
    """Per-branch surcharge amounts. Stored, never summed automatically."""

    medium_item: int = 0
    large_item: int = 0
    express: int = 0

    def __post_init__(self) -> None:
        require_money(self.medium_item, "medium_item")
        require_money(self.large_item, "large_item")
        require_money(self.express, "express")


@dataclass(frozen=True)
class DeliveryFeeTable:
    """Ordered district → fee rows for one branch, plus surcharges."""

    rows: Tuple[DeliveryFeeRow, ...] = ()
    surcharges: Surcharges = field(default_factory=Surcharges)

    @classmethod
    def from_mapping(
        cls,
        fees: Mapping[str, int],
        surcharges: Optional[Surcharges] = None,
    ) -> DeliveryFeeTable:
        return cls(
            rows=tuple(DeliveryFeeRow(d, f) for d, f in fees.items()),
            surcharges=surcharges or Surcharges(),
        )

    def fee_for(self, district: Optional[str]) -> Optional[int]:
        """Exact-match fee, or None when the district has no row."""
        if not district:
            return None
        for row in self.rows:
            if row.district == district:
                return row.fee
        return None

    def has_district(self, district: Optional[str]) -> bool:
        return self.fee_for(district) is not None

    @property
    def districts(self) -> Tuple[str, ...]:
        return tuple(row.district for row in self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows


# ══════════════════════════════════════════════════════════════
# BRANCH PROFILE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BranchProfile:
    """Branch registry record as far as pricing is concerned."""

    branch_id: str
    name: str
    branch_type: str = "가맹점"
    fee_table: Optional[DeliveryFeeTable] = None

    @property
    def is_headquarters(self) -> bool:
        return self.branch_type == HEADQUARTERS or self.name in HEADQUARTERS_SCOPES


# ══════════════════════════════════════════════════════════════
# CONFIG STORE PROTOCOL
# ══════════════════════════════════════════════════════════════

class ConfigStore(Protocol):
    """
    Protocol for admin-configured data.

    Implementations may back this with the document store or memory.
    """

    def get_pricing_rules(self) -> PricingRules:
        ...  # pragma: no cover

    def get_branch(self, branch_id: str) -> Optional[BranchProfile]:
        ...  # pragma: no cover

    def get_discount_tiers(self, branch_id: str) -> List[DiscountTier]:
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IN-MEMORY CONFIG STORE (for testing / bootstrap)
# ══════════════════════════════════════════════════════════════

class InMemoryConfigStore:
    """Simple in-memory config store for testing and bootstrap."""

    def __init__(self, rules: Optional[PricingRules] = None) -> None:
        self._rules = rules or PricingRules()
        self._branches: Dict[str, BranchProfile] = {}
        self._tiers: List[DiscountTier] = []

    def set_pricing_rules(self, rules: PricingRules) -> None:
        self._rules = rules

    def add_branch(self, branch: BranchProfile) -> None:
        self._branches[branch.branch_id] = branch

    def add_discount_tier(self, tier: DiscountTier) -> None:
        self._tiers.append(tier)

    def get_pricing_rules(self) -> PricingRules:
        return self._rules

    def get_branch(self, branch_id: str) -> Optional[BranchProfile]:
        return self._branches.get(branch_id)

    def get_discount_tiers(self, branch_id: str) -> List[DiscountTier]:
        return [t for t in self._tiers if t.branch_id == branch_id]
