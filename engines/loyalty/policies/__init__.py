"""
FOS Loyalty Engine — Policies
=============================
Redemption guards. The calculator turns a rejection into a zero
cap; the strict path and balance settlement turn it into an error.
"""

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.config.rules import MIN_POINT_ORDER_VALUE


def customer_selected_policy(customer_selected: bool) -> Optional[RejectionReason]:
    """Points belong to a customer; anonymous orders cannot redeem."""
    if not customer_selected:
        return RejectionReason(
            code=ReasonCode.NO_CUSTOMER_SELECTED,
            message="No customer selected for this order.",
            policy_name="customer_selected_policy",
        )
    return None


def point_threshold_policy(discounted_subtotal: int) -> Optional[RejectionReason]:
    """Discounted subtotal must reach the minimum order value."""
    if discounted_subtotal < MIN_POINT_ORDER_VALUE:
        return RejectionReason(
            code=ReasonCode.BELOW_POINT_THRESHOLD,
            message=(
                f"Points require an order of at least {MIN_POINT_ORDER_VALUE}, "
                f"got {discounted_subtotal}."
            ),
            policy_name="point_threshold_policy",
        )
    return None


def sufficient_balance_policy(balance: int, points: int) -> Optional[RejectionReason]:
    """Customer must hold the points being spent."""
    if points > balance:
        return RejectionReason(
            code=ReasonCode.INSUFFICIENT_POINTS,
            message=f"Customer has {balance} points, needs {points}.",
            policy_name="sufficient_balance_policy",
        )
    return None
