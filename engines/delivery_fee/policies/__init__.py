"""
FOS Delivery Fee Engine — Policies
==================================
"""

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from engines.fulfillment.models import Fulfillment, is_delivery


def branch_required_for_delivery_policy(
    branch_id: Optional[str],
    fulfillment: Fulfillment,
) -> Optional[RejectionReason]:
    """A delivery needs a branch: the fee table and carrier belong to it."""
    if is_delivery(fulfillment) and not branch_id:
        return RejectionReason(
            code=ReasonCode.BRANCH_REQUIRED_FOR_DELIVERY,
            message="A branch must be selected before requesting delivery.",
            policy_name="branch_required_for_delivery_policy",
        )
    return None
