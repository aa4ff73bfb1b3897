"""
FOS Delivery Cost Engine — Service Layer
========================================
Records what a delivery actually cost and posts it as a transport
expense.

    profit = customer delivery fee − actual carrier cost

The expense write is the only external side effect in the pricing
engines. It goes through the injected ExpenseLedger; this service
keeps no state between calls, so making a re-entered cost overwrite
instead of double-post is up to the ledger wiring (see
InMemoryExpenseLedger.replace_for_source).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from core.config.rules import OTHER_DISTRICT
from core.errors import ValidationError
from core.events import SubscriberRegistry, publish
from core.primitives.ledger import ExpenseCategory, ExpenseEntry, ExpenseLedger
from core.primitives.money import require_money
from core.time.clock import Clock
from engines.delivery_cost.commands import (
    COST_STATUS_COMPLETED,
    DeliveryCostRecord,
    DeliveryOrder,
)
from engines.delivery_cost.events import (
    DELIVERY_COST_RECORDED_V1,
    build_delivery_cost_recorded_payload,
)
from engines.fulfillment.policies import delivery_only_policy

logger = logging.getLogger("fos.engines.delivery_cost")

SOURCE_PREFIX = "delivery-cost"


def source_ref_for(order_id: str) -> str:
    return f"{SOURCE_PREFIX}:{order_id}"


class DeliveryCostService:
    def __init__(
        self,
        *,
        expense_ledger: ExpenseLedger,
        clock: Clock,
        subscribers: Optional[SubscriberRegistry] = None,
    ):
        self._ledger = expense_ledger
        self._clock = clock
        self._subscribers = subscribers

    def record_actual_cost(
        self,
        order: DeliveryOrder,
        actual_cost: int,
        *,
        recorded_by: str = "unknown",
        reason: str = "",
    ) -> DeliveryCostRecord:
        """
        Fill the cost record and post the transport expense.
        Raises ValidationError for a non-delivery or a negative cost.
        """
        rejection = delivery_only_policy(order.record)
        if rejection is not None:
            raise ValidationError("order", rejection.message)
        require_money(actual_cost, "actual_cost")

        now = self._clock.now_utc()
        record = DeliveryCostRecord(
            order_id=order.order_id,
            customer_fee=order.delivery_fee,
            order_date=order.order_date,
            district=order.district,
            actual_cost=actual_cost,
            status=COST_STATUS_COMPLETED,
            updated_at=now,
            updated_by=recorded_by,
            reason=reason,
        )

        carrier = order.carrier
        self._ledger.append(ExpenseEntry(
            category=ExpenseCategory.TRANSPORT,
            sub_category="delivery",
            supplier=carrier,
            amount=actual_cost,
            branch_name=order.branch_name,
            description=f"배송비 - 주문 {order.order_id}",
            source_ref=source_ref_for(order.order_id),
            recorded_at=now,
        ))

        publish(
            self._subscribers, DELIVERY_COST_RECORDED_V1,
            build_delivery_cost_recorded_payload(
                order.order_id, order.branch_name, order.delivery_fee,
                actual_cost, record.profit, carrier,
            ),
            now,
        )
        logger.info(
            f"Delivery cost recorded: order={order.order_id} "
            f"fee={order.delivery_fee} cost={actual_cost} profit={record.profit}"
        )
        return record


# ══════════════════════════════════════════════════════════════
# ANALYTICS
# ══════════════════════════════════════════════════════════════

@dataclass
class CostBucket:
    key: str
    customer_fees: int = 0
    actual_costs: int = 0
    profit: int = 0
    order_count: int = 0

    def add(self, record: DeliveryCostRecord) -> None:
        self.customer_fees += record.customer_fee
        self.actual_costs += record.actual_cost
        self.profit += record.profit
        self.order_count += 1


@dataclass(frozen=True)
class ProfitDistribution:
    profitable: int = 0
    break_even: int = 0
    loss: int = 0


@dataclass(frozen=True)
class DeliveryCostSummary:
    total_orders: int
    orders_with_cost: int
    total_customer_fees: int
    total_actual_costs: int
    total_profit: int
    average_profit: float
    this_month_profit: int
    this_month_orders: int
    monthly: List[CostBucket] = field(default_factory=list)
    by_district: List[CostBucket] = field(default_factory=list)
    distribution: ProfitDistribution = field(default_factory=ProfitDistribution)


def summarize_costs(records: Iterable[DeliveryCostRecord], today: date) -> DeliveryCostSummary:
    """
    Fee-vs-cost analytics over completed deliveries.

    Records without an entered cost count toward total_orders only.
    Months are keyed "YYYY-MM" in ascending order; districts keep
    first-seen order, with blank districts under "기타".
    """
    records = list(records)
    costed = [r for r in records if r.has_cost]

    monthly: Dict[str, CostBucket] = {}
    districts: Dict[str, CostBucket] = {}
    profitable = break_even = loss = 0
    this_month = CostBucket(key=f"{today.year:04d}-{today.month:02d}")

    for r in costed:
        month_key = f"{r.order_date.year:04d}-{r.order_date.month:02d}"
        monthly.setdefault(month_key, CostBucket(key=month_key)).add(r)
        district = r.district or OTHER_DISTRICT
        districts.setdefault(district, CostBucket(key=district)).add(r)
        if month_key == this_month.key:
            this_month.add(r)

        if r.profit > 0:
            profitable += 1
        elif r.profit == 0:
            break_even += 1
        else:
            loss += 1

    total_fees = sum(r.customer_fee for r in costed)
    total_costs = sum(r.actual_cost for r in costed)
    total_profit = total_fees - total_costs

    return DeliveryCostSummary(
        total_orders=len(records),
        orders_with_cost=len(costed),
        total_customer_fees=total_fees,
        total_actual_costs=total_costs,
        total_profit=total_profit,
        average_profit=total_profit / len(costed) if costed else 0,
        this_month_profit=this_month.profit,
        this_month_orders=this_month.order_count,
        monthly=[monthly[k] for k in sorted(monthly)],
        by_district=list(districts.values()),
        distribution=ProfitDistribution(profitable, break_even, loss),
    )
