"""
FOS Fulfillment Engine — Policies
=================================
Guards for administrative corrections.
"""

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from engines.fulfillment.models import FulfillmentRecord, is_delivery


def system_generated_policy(record: FulfillmentRecord) -> Optional[RejectionReason]:
    """System-generated orders accept no corrections."""
    if record.system_generated:
        return RejectionReason(
            code=ReasonCode.SYSTEM_GENERATED_ORDER,
            message=f"Order '{record.order_id}' was generated by the system.",
            policy_name="system_generated_policy",
        )
    return None


def delivery_only_policy(record: FulfillmentRecord) -> Optional[RejectionReason]:
    """Driver and delivery-cost corrections apply to deliveries only."""
    if not is_delivery(record.fulfillment):
        return RejectionReason(
            code=ReasonCode.NOT_A_DELIVERY,
            message=f"Order '{record.order_id}' is {record.receipt_type}, not a delivery.",
            policy_name="delivery_only_policy",
        )
    return None
