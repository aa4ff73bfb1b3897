"""
FOS Delivery Cost Engine — Commands
===================================
A completed delivery whose carrier cost is being entered, and the
cost record kept alongside the order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from core.errors import ValidationError
from core.primitives.money import require_money
from engines.fulfillment.models import FulfillmentRecord, ReservedDelivery

COST_STATUS_PENDING = "pending"
COST_STATUS_COMPLETED = "completed"

DEFAULT_CARRIER = "carrier"


@dataclass(frozen=True)
class DeliveryOrder:
    """The parts of an order a delivery cost entry reads."""
    record: FulfillmentRecord
    branch_name: str
    delivery_fee: int
    order_date: date

    def __post_init__(self):
        require_money(self.delivery_fee, "delivery_fee", allow_negative=True)
        if not self.branch_name:
            raise ValidationError("branch_name", "must be non-empty.")

    @property
    def order_id(self) -> str:
        return self.record.order_id

    @property
    def district(self) -> str:
        f = self.record.fulfillment
        return f.district if isinstance(f, ReservedDelivery) else ""

    @property
    def carrier(self) -> str:
        f = self.record.fulfillment
        if isinstance(f, ReservedDelivery) and f.driver and f.driver.affiliation:
            return f.driver.affiliation
        return DEFAULT_CARRIER


@dataclass(frozen=True)
class DeliveryCostRecord:
    """
    Customer fee against actual carrier cost.

    Created empty when the delivery is scheduled; filled once the cost
    is known. Re-entering a cost replaces the record.
    """
    order_id: str
    customer_fee: int
    order_date: date
    district: str = ""
    actual_cost: Optional[int] = None
    status: str = COST_STATUS_PENDING
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None
    reason: str = ""

    @classmethod
    def pending(cls, order: DeliveryOrder) -> DeliveryCostRecord:
        return cls(
            order_id=order.order_id,
            customer_fee=order.delivery_fee,
            order_date=order.order_date,
            district=order.district,
        )

    @property
    def has_cost(self) -> bool:
        return self.actual_cost is not None

    @property
    def profit(self) -> Optional[int]:
        if self.actual_cost is None:
            return None
        return self.customer_fee - self.actual_cost

    def to_dict(self) -> dict:
        return {
            "actualDeliveryCost": self.actual_cost,
            "deliveryCostStatus": self.status,
            "deliveryProfit": self.profit,
            "deliveryCostReason": self.reason,
            "deliveryCostUpdatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "deliveryCostUpdatedBy": self.updated_by,
        }
