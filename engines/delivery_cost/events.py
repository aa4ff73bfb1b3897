"""
FOS Delivery Cost Engine — Event Types
======================================
"""

# ── Event Types ───────────────────────────────────────────────

DELIVERY_COST_RECORDED_V1 = "delivery.cost.recorded.v1"

ALL_EVENT_TYPES = (
    DELIVERY_COST_RECORDED_V1,
)


# ── Payload Builders ──────────────────────────────────────────

def build_delivery_cost_recorded_payload(order_id, branch_name, customer_fee,
                                         actual_cost, profit, carrier):
    return {
        "order_id": order_id,
        "branch_name": branch_name,
        "customer_fee": customer_fee,
        "actual_cost": actual_cost,
        "profit": profit,
        "carrier": carrier,
    }
