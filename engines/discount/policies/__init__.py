"""
FOS Discount Engine — Policies
==============================
Eligibility and rate guards.
"""

from typing import Callable, Optional

from core.commands.rejection import ReasonCode, RejectionReason

EligibilityPredicate = Callable[[str, int], bool]


def discount_eligibility_policy(
    branch_id: str,
    subtotal: int,
    can_apply_discount: Optional[EligibilityPredicate] = None,
) -> Optional[RejectionReason]:
    """Branch must have an active tier configuration the subtotal meets."""
    if can_apply_discount is None:
        return None
    if not can_apply_discount(branch_id, subtotal):
        return RejectionReason(
            code=ReasonCode.DISCOUNT_NOT_ELIGIBLE,
            message=f"Branch '{branch_id}' offers no discount for subtotal {subtotal}.",
            policy_name="discount_eligibility_policy",
        )
    return None


def custom_rate_range_policy(rate, max_rate: int = 50) -> Optional[RejectionReason]:
    """Hand-typed rates must fall within [0, max_rate]."""
    if rate < 0 or rate > max_rate:
        return RejectionReason(
            code=ReasonCode.DISCOUNT_RATE_OUT_OF_RANGE,
            message=f"Discount rate must be between 0 and {max_rate}, got {rate}.",
            policy_name="custom_rate_range_policy",
        )
    return None
