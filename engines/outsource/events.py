"""
FOS Outsource Engine — Event Types
==================================
One event per partner-order state. Subscribers notify the branch.
"""

# ── Event Types ───────────────────────────────────────────────

OUTSOURCE_REQUESTED_V1 = "outsource.order.pending.v1"
OUTSOURCE_ACCEPTED_V1 = "outsource.order.accepted.v1"
OUTSOURCE_COMPLETED_V1 = "outsource.order.completed.v1"
OUTSOURCE_CANCELED_V1 = "outsource.order.canceled.v1"

ALL_EVENT_TYPES = (
    OUTSOURCE_REQUESTED_V1,
    OUTSOURCE_ACCEPTED_V1,
    OUTSOURCE_COMPLETED_V1,
    OUTSOURCE_CANCELED_V1,
)


def event_type_for(state):
    return f"outsource.order.{state}.v1"


# ── Payload Builders ──────────────────────────────────────────

def build_outsource_payload(record, from_state=None):
    return {
        "order_id": record.order_id,
        "partner_name": record.partner_name,
        "branch_name": record.branch_name,
        "from_state": from_state,
        "to_state": record.state,
        "partner_price": record.partner_price,
        "profit": record.profit,
    }
