"""
FOS Outsource Engine — Policies
===============================
"""

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from engines.outsource.commands import OutsourceRecord


def open_record_policy(record: OutsourceRecord) -> Optional[RejectionReason]:
    """Completed or canceled partner orders are settled; prices are final."""
    if record.is_closed:
        return RejectionReason(
            code=ReasonCode.OUTSOURCE_CLOSED,
            message=f"Outsourced order '{record.order_id}' is already {record.state}.",
            policy_name="open_record_policy",
        )
    return None
