"""
FOS Orders Engine — Policies
============================
Commit-time guards. The calculator itself never rejects; callers run
these before persisting an order.
"""

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from engines.orders.commands import PAYMENT_STATUS_SPLIT


def payable_total_policy(total: int) -> Optional[RejectionReason]:
    """A committed order cannot owe the customer money."""
    if total < 0:
        return RejectionReason(
            code=ReasonCode.NEGATIVE_TOTAL,
            message=f"Order total must not be negative, got {total}.",
            policy_name="payable_total_policy",
        )
    return None


def split_payment_policy(status: str, has_split_terms: bool) -> Optional[RejectionReason]:
    """Only an open split payment has a second tranche to collect."""
    if status != PAYMENT_STATUS_SPLIT or not has_split_terms:
        return RejectionReason(
            code=ReasonCode.NOT_SPLIT_PAYMENT,
            message=f"Payment with status '{status}' has no outstanding second tranche.",
            policy_name="split_payment_policy",
        )
    return None
