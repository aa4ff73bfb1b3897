"""
FOS Loyalty Engine — Service Layer
==================================
Point redemption caps and point earning.

Redemption is silently clamped: a request above the cap is reduced,
never rejected. Earning is computed on net payable (discounted
subtotal minus points used); the delivery fee never earns points.

Nothing here writes a balance. settle_balance() computes the
post-commit balance; the customer store applies it atomically.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from core.config.rules import PricingRules
from core.errors import IneligibleRedemptionError
from core.events import SubscriberRegistry, publish
from core.primitives.money import clamp, floor_percent
from core.time.clock import Clock
from engines.loyalty.commands import LoyaltyAccount
from engines.loyalty.events import (
    POINTS_EARNED_V1,
    POINTS_REDEEMED_V1,
    build_points_earned_payload,
    build_points_redeemed_payload,
)
from engines.loyalty.policies import (
    customer_selected_policy,
    point_threshold_policy,
    sufficient_balance_policy,
)

logger = logging.getLogger("fos.engines.loyalty")


# ── Redemption ────────────────────────────────────────────────

@dataclass(frozen=True)
class RedemptionQuote:
    """What the entry screen shows next to the points box."""
    can_redeem: bool
    max_usable: int
    points_used: int


def can_redeem(discounted_subtotal: int, customer_selected: bool = True) -> bool:
    return (
        customer_selected_policy(customer_selected) is None
        and point_threshold_policy(discounted_subtotal) is None
    )


def max_usable_points(balance: int, discounted_subtotal: int, customer_selected: bool = True) -> int:
    if not can_redeem(discounted_subtotal, customer_selected):
        return 0
    return max(0, min(balance, discounted_subtotal))


def redeem_points(
    balance: int,
    discounted_subtotal: int,
    requested: int,
    customer_selected: bool = True,
) -> int:
    """Points actually used: the request clamped into [0, max usable]."""
    cap = max_usable_points(balance, discounted_subtotal, customer_selected)
    used = clamp(requested, 0, cap)
    if used != requested:
        logger.debug(f"Point request clamped: requested={requested} cap={cap} → {used}")
    return used


def quote_redemption(
    balance: int,
    discounted_subtotal: int,
    requested: int,
    customer_selected: bool = True,
) -> RedemptionQuote:
    allowed = can_redeem(discounted_subtotal, customer_selected)
    cap = max_usable_points(balance, discounted_subtotal, customer_selected)
    return RedemptionQuote(
        can_redeem=allowed,
        max_usable=cap,
        points_used=clamp(requested, 0, cap),
    )


def strict_redeem(
    balance: int,
    discounted_subtotal: int,
    requested: int,
    customer_selected: bool = True,
) -> int:
    """
    Like redeem_points() but raises instead of clamping.
    For integrations that must not silently change the amount.
    """
    rejection = (
        customer_selected_policy(customer_selected)
        or point_threshold_policy(discounted_subtotal)
    )
    if requested > 0 and rejection is not None:
        raise IneligibleRedemptionError(requested, 0, rejection.message)
    cap = max_usable_points(balance, discounted_subtotal, customer_selected)
    if requested > cap:
        raise IneligibleRedemptionError(
            requested, cap, f"at most {cap} points usable on this order."
        )
    return max(0, requested)


# ── Earning ───────────────────────────────────────────────────

def can_earn(discounted_subtotal: int) -> bool:
    return point_threshold_policy(discounted_subtotal) is None


def earn_points(
    net_payable: int,
    accumulation_enabled: bool = True,
    *,
    earn_rate_percent: int = 2,
    discounted_subtotal: Optional[int] = None,
) -> int:
    """
    floor(net_payable * earn_rate_percent / 100).

    When discounted_subtotal is given, orders below the minimum
    order value earn nothing.
    """
    if not accumulation_enabled or net_payable <= 0:
        return 0
    if discounted_subtotal is not None and not can_earn(discounted_subtotal):
        return 0
    return floor_percent(net_payable, earn_rate_percent)


# ── Commit-time balance ───────────────────────────────────────

def settle_balance(account: LoyaltyAccount, points_used: int, points_earned: int) -> int:
    """Balance after an order commits. Raises if points_used exceeds it."""
    rejection = sufficient_balance_policy(account.balance, points_used)
    if rejection is not None:
        raise IneligibleRedemptionError(points_used, account.balance, rejection.message)
    return account.balance - points_used + points_earned


# ── Service ───────────────────────────────────────────────────

class LoyaltyService:
    """Announces point movements of a committed order."""

    def __init__(
        self,
        *,
        rules: PricingRules,
        clock: Clock,
        subscribers: Optional[SubscriberRegistry] = None,
    ):
        self._rules = rules
        self._clock = clock
        self._subscribers = subscribers

    def earn(self, net_payable: int, discounted_subtotal: Optional[int] = None) -> int:
        return earn_points(
            net_payable,
            self._rules.allow_point_accumulation,
            earn_rate_percent=self._rules.earn_rate_percent,
            discounted_subtotal=discounted_subtotal,
        )

    def commit(
        self,
        account: LoyaltyAccount,
        order_id: str,
        points_used: int,
        points_earned: int,
        net_payable: int,
    ) -> int:
        """Compute the new balance and announce the movements."""
        new_balance = settle_balance(account, points_used, points_earned)
        now = self._clock.now_utc()
        if points_used > 0:
            publish(
                self._subscribers, POINTS_REDEEMED_V1,
                build_points_redeemed_payload(
                    account.customer_id, order_id, points_used,
                    account.balance - points_used,
                ),
                now,
            )
        if points_earned > 0:
            publish(
                self._subscribers, POINTS_EARNED_V1,
                build_points_earned_payload(
                    account.customer_id, order_id, points_earned, net_payable,
                ),
                now,
            )
        logger.info(
            f"Points settled: customer={account.customer_id} order={order_id} "
            f"used={points_used} earned={points_earned} balance={new_balance}"
        )
        return new_balance
