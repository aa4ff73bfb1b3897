"""
FOS Loyalty Engine — Event Types
================================
Point movements announced when an order is committed.
The balance write itself belongs to the customer store.
"""

# ── Event Types ───────────────────────────────────────────────

POINTS_REDEEMED_V1 = "loyalty.points.redeemed.v1"
POINTS_EARNED_V1 = "loyalty.points.earned.v1"

ALL_EVENT_TYPES = (
    POINTS_REDEEMED_V1,
    POINTS_EARNED_V1,
)


# ── Payload Builders ──────────────────────────────────────────

def _base_fields(customer_id, order_id, points):
    return {
        "customer_id": customer_id,
        "order_id": order_id,
        "points": points,
    }


def build_points_redeemed_payload(customer_id, order_id, points, balance_after):
    base = _base_fields(customer_id, order_id, points)
    base["balance_after"] = balance_after
    return base


def build_points_earned_payload(customer_id, order_id, points, net_payable):
    base = _base_fields(customer_id, order_id, points)
    base["net_payable"] = net_payable
    return base
