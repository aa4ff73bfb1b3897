"""
FOS Orders Engine — Event Types
===============================
Order status changes. Notification delivery is a subscriber concern.
"""

# ── Event Types ───────────────────────────────────────────────

ORDER_COMPLETED_V1 = "orders.order.completed.v1"
ORDER_CANCELED_V1 = "orders.order.canceled.v1"
SPLIT_PAYMENT_COMPLETED_V1 = "orders.payment.split_completed.v1"

ALL_EVENT_TYPES = (
    ORDER_COMPLETED_V1,
    ORDER_CANCELED_V1,
    SPLIT_PAYMENT_COMPLETED_V1,
)


# ── Payload Builders ──────────────────────────────────────────

def build_order_status_payload(order_id, from_status, to_status, actor_id=None):
    return {
        "order_id": order_id,
        "from_status": from_status,
        "to_status": to_status,
        "actor_id": actor_id,
    }


def build_split_payment_completed_payload(order_id, second_payment_amount,
                                          second_payment_method, recognized_on):
    return {
        "order_id": order_id,
        "second_payment_amount": second_payment_amount,
        "second_payment_method": second_payment_method,
        "recognized_on": recognized_on.isoformat(),
    }
