"""
FOS Outsource Engine — Commands
===============================
An order handed to an external fulfillment partner.

The shop keeps the customer's total and pays the partner its price;
the difference is the shop's margin on the order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from core.errors import ValidationError
from core.primitives.money import require_money
from core.primitives.workflow import OUTSOURCE_ORDER_WORKFLOW, StateTransition

OUTSOURCE_PENDING = "pending"
OUTSOURCE_ACCEPTED = "accepted"
OUTSOURCE_COMPLETED = "completed"
OUTSOURCE_CANCELED = "canceled"

UNNAMED_PARTNER = "미지정"


@dataclass(frozen=True)
class OutsourceRecord:
    order_id: str
    partner_name: str
    order_total: int
    partner_price: int
    outsourced_at: datetime
    state: str = OUTSOURCE_PENDING
    branch_name: str = ""
    history: Tuple[StateTransition, ...] = ()

    def __post_init__(self):
        if not self.order_id:
            raise ValidationError("order_id", "must be non-empty.")
        require_money(self.order_total, "order_total")
        require_money(self.partner_price, "partner_price")
        if self.state not in OUTSOURCE_ORDER_WORKFLOW.states:
            raise ValidationError("state", f"unknown outsource state {self.state!r}.")

    @property
    def profit(self) -> int:
        return self.order_total - self.partner_price

    @property
    def is_closed(self) -> bool:
        return OUTSOURCE_ORDER_WORKFLOW.is_terminal(self.state)

    @property
    def last_transition(self) -> Optional[StateTransition]:
        return self.history[-1] if self.history else None

    def to_dict(self) -> dict:
        return {
            "partnerName": self.partner_name,
            "partnerPrice": self.partner_price,
            "profit": self.profit,
            "status": self.state,
            "outsourcedAt": self.outsourced_at.isoformat(),
        }
