"""
FOS Discount Engine — Service Layer
===================================
Resolves the single effective discount rate for an order and the
floored discount amount. A zero rate is a normal outcome, not an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from core.config.rules import ConfigStore, DiscountTier
from core.primitives.money import Rate, clamp, floor_percent, require_money
from engines.discount.commands import (
    MAX_CUSTOM_RATE,
    CustomSelection,
    DiscountSelection,
    ResolveDiscountRequest,
    TierSelection,
    selection_from_inputs,
)
from engines.discount.policies import (
    EligibilityPredicate,
    discount_eligibility_policy,
)

logger = logging.getLogger("fos.engines.discount")


@dataclass(frozen=True)
class DiscountResult:
    rate: Rate
    amount: int

    @classmethod
    def none(cls) -> DiscountResult:
        return cls(rate=0, amount=0)


# ── Tier configuration ────────────────────────────────────────

def active_tiers(tiers: Iterable[DiscountTier], branch_id: str) -> List[DiscountTier]:
    """A branch's active tiers, in configured order."""
    return [t for t in tiers if t.branch_id == branch_id and t.is_active]


def make_eligibility(tiers: Iterable[DiscountTier]) -> EligibilityPredicate:
    """
    Default eligibility: the branch has at least one active tier and
    the subtotal meets the smallest configured minimum.
    """
    configured = tuple(tiers)

    def can_apply_discount(branch_id: str, subtotal: int) -> bool:
        branch_tiers = active_tiers(configured, branch_id)
        if not branch_tiers:
            return False
        return subtotal >= min(t.min_subtotal for t in branch_tiers)

    return can_apply_discount


# ── Resolution ────────────────────────────────────────────────

def effective_rate(selection: DiscountSelection, max_custom_rate: int = MAX_CUSTOM_RATE) -> Rate:
    if isinstance(selection, TierSelection):
        return selection.rate
    if isinstance(selection, CustomSelection):
        return clamp(selection.rate, 0, max_custom_rate)
    return 0


def resolve_selection(
    subtotal: int,
    selection: DiscountSelection,
    eligible: bool = True,
    max_custom_rate: int = MAX_CUSTOM_RATE,
) -> DiscountResult:
    require_money(subtotal, "subtotal")
    if not eligible:
        return DiscountResult.none()
    rate = effective_rate(selection, max_custom_rate)
    return DiscountResult(rate=rate, amount=floor_percent(subtotal, rate))


def resolve_discount(
    subtotal: int,
    tiers: Iterable[DiscountTier],
    selected_rate: Rate = 0,
    custom_rate: Rate = 0,
    eligibility: Optional[EligibilityPredicate] = None,
    *,
    branch_id: Optional[str] = None,
    max_custom_rate: int = MAX_CUSTOM_RATE,
) -> DiscountResult:
    """
    Resolve the order discount from raw entry values.

    When no eligibility predicate is given it is built from `tiers`.
    When no branch_id is given it is taken from the tiers; an order
    without any tiers is never eligible under the default predicate.
    """
    tiers = tuple(tiers)
    if eligibility is None:
        eligibility = make_eligibility(tiers)
    if branch_id is None:
        branch_id = tiers[0].branch_id if tiers else ""

    rejection = discount_eligibility_policy(branch_id, subtotal, eligibility)
    selection = selection_from_inputs(selected_rate, custom_rate)
    result = resolve_selection(
        subtotal, selection,
        eligible=rejection is None,
        max_custom_rate=max_custom_rate,
    )
    logger.debug(
        f"Discount resolved: branch={branch_id} subtotal={subtotal} "
        f"selection={selection} → rate={result.rate} amount={result.amount}"
        + (f" ({rejection.code})" if rejection else "")
    )
    return result


# ── Service ───────────────────────────────────────────────────

class DiscountService:
    """Discount resolution backed by the admin-configured tier store."""

    def __init__(self, *, config_store: ConfigStore):
        self._config = config_store

    def tiers_for(self, branch_id: str) -> List[DiscountTier]:
        return active_tiers(self._config.get_discount_tiers(branch_id), branch_id)

    def can_apply_discount(self, branch_id: str, subtotal: int) -> bool:
        return make_eligibility(self.tiers_for(branch_id))(branch_id, subtotal)

    def resolve(self, request: ResolveDiscountRequest) -> DiscountResult:
        rules = self._config.get_pricing_rules()
        return resolve_selection(
            request.subtotal,
            request.selection,
            eligible=self.can_apply_discount(request.branch_id, request.subtotal),
            max_custom_rate=rules.max_custom_discount_rate,
        )
