"""
FOS Orders Engine — Service Layer
=================================
Order summary composition, split payments and order completion.

compute_summary() is pure: it is called on every keystroke of order
entry and never touches a balance, a ledger or a clock. Point
deduction happens at commit, in the order store.

Formula:
    subtotal            = Σ price × quantity
    discounted_subtotal = subtotal − discount_amount
    total               = discounted_subtotal − points_used + delivery_fee
    points_earned       = earn(discounted_subtotal − points_used)

Split payments collect the total in two tranches. The first is
revenue on the order date, the second on the date the order is
later completed. Only the first amount is stored; the second is
always total − first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterable, List, Optional

from core.config.rules import PricingRules
from core.errors import ValidationError
from core.events import SubscriberRegistry, publish
from core.primitives.money import Rate, clamp
from core.primitives.workflow import ORDER_STATUS_WORKFLOW, StateTransition
from core.time.clock import Clock, business_date
from engines.delivery_fee.services import (
    require_branch_for_delivery,
    resolve_delivery_fee,
)
from engines.discount.services import resolve_discount
from engines.fulfillment.models import Fulfillment
from engines.loyalty.commands import PointInputs
from engines.loyalty.services import earn_points, redeem_points
from engines.orders.commands import (
    ENTRY_PATH_FULL,
    ENTRY_PATH_SIMPLIFIED,
    ORDER_STATUS_CANCELED,
    ORDER_STATUS_COMPLETED,
    PAYMENT_STATUS_COMPLETED,
    PAYMENT_STATUS_PAID,
    VALID_ENTRY_PATHS,
    DeliveryInputs,
    DiscountInputs,
    OrderItem,
    PaymentRequest,
)
from engines.orders.events import (
    ORDER_CANCELED_V1,
    ORDER_COMPLETED_V1,
    SPLIT_PAYMENT_COMPLETED_V1,
    build_order_status_payload,
    build_split_payment_completed_payload,
)
from engines.orders.policies import payable_total_policy, split_payment_policy

logger = logging.getLogger("fos.engines.orders")


# ══════════════════════════════════════════════════════════════
# ORDER SUMMARY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OrderSummary:
    subtotal: int
    discount_rate: Rate
    discount_amount: int
    delivery_fee: int
    points_used: int
    points_earned: int
    total: int

    @property
    def discounted_subtotal(self) -> int:
        return self.subtotal - self.discount_amount

    @property
    def net_payable(self) -> int:
        """Point-earning base. Excludes the delivery fee."""
        return self.discounted_subtotal - self.points_used

    @property
    def is_payable(self) -> bool:
        return self.total >= 0

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "discountRate": self.discount_rate,
            "discountAmount": self.discount_amount,
            "deliveryFee": self.delivery_fee,
            "pointsUsed": self.points_used,
            "pointsEarned": self.points_earned,
            "total": self.total,
        }


def subtotal_of(items: Iterable[OrderItem]) -> int:
    return sum(item.line_total for item in items)


def compute_summary(
    items: Iterable[OrderItem],
    discount_inputs: Optional[DiscountInputs] = None,
    delivery_inputs: Optional[DeliveryInputs] = None,
    point_inputs: Optional[PointInputs] = None,
    rules: Optional[PricingRules] = None,
    entry_path: str = ENTRY_PATH_FULL,
) -> OrderSummary:
    """Compose discount, points and delivery fee into the order summary."""
    if entry_path not in VALID_ENTRY_PATHS:
        raise ValidationError(
            "entry_path", f"must be one of {sorted(VALID_ENTRY_PATHS)}, got {entry_path!r}."
        )
    discount_inputs = discount_inputs or DiscountInputs()
    delivery_inputs = delivery_inputs or DeliveryInputs()
    point_inputs = point_inputs or PointInputs()
    rules = rules or PricingRules()

    subtotal = subtotal_of(items)

    discount = resolve_discount(
        subtotal,
        discount_inputs.tiers,
        discount_inputs.selected_rate,
        discount_inputs.custom_rate,
        discount_inputs.can_apply_discount,
        branch_id=discount_inputs.branch_id or None,
        max_custom_rate=rules.max_custom_discount_rate,
    )
    discounted_subtotal = subtotal - discount.amount

    points_used = redeem_points(
        point_inputs.balance,
        discounted_subtotal,
        point_inputs.requested,
        customer_selected=point_inputs.customer_selected,
    )

    delivery_fee = resolve_delivery_fee(
        delivery_inputs.fulfillment,
        delivery_inputs.mode,
        delivery_inputs.manual_fee,
        delivery_inputs.fee_table,
        delivery_inputs.district,
    )

    net_payable = discounted_subtotal - points_used
    if entry_path == ENTRY_PATH_SIMPLIFIED and not rules.earn_on_simplified_entry:
        points_earned = 0
    else:
        points_earned = earn_points(
            net_payable,
            rules.allow_point_accumulation,
            earn_rate_percent=rules.earn_rate_percent,
            discounted_subtotal=discounted_subtotal,
        )

    summary = OrderSummary(
        subtotal=subtotal,
        discount_rate=discount.rate,
        discount_amount=discount.amount,
        delivery_fee=delivery_fee,
        points_used=points_used,
        points_earned=points_earned,
        total=net_payable + delivery_fee,
    )
    logger.debug(f"Order summary ({entry_path}): {summary.to_dict()}")
    return summary


def validate_for_commit(
    summary: OrderSummary,
    branch_id: Optional[str],
    fulfillment: Fulfillment,
) -> None:
    """Checks the calculator leaves to the caller. Raises ValidationError."""
    require_branch_for_delivery(branch_id, fulfillment)
    rejection = payable_total_policy(summary.total)
    if rejection is not None:
        raise ValidationError("total", rejection.message)


# ══════════════════════════════════════════════════════════════
# PAYMENT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SplitTerms:
    first_payment_amount: int
    first_payment_method: Optional[str]
    second_payment_method: Optional[str]


@dataclass(frozen=True)
class PaymentRecord:
    """
    Payment as persisted with the order.

    completed_at decides which accounting period the revenue lands in:
    set at commit for a plain paid/completed order, left empty for a
    split or pending order until the order is completed.
    """
    method: str
    status: str
    total: int
    completed_at: Optional[datetime] = None
    split: Optional[SplitTerms] = None

    @property
    def first_payment_amount(self) -> int:
        return self.split.first_payment_amount if self.split else self.total

    @property
    def second_payment_amount(self) -> int:
        if self.split is None:
            return 0
        return self.total - self.split.first_payment_amount

    def to_dict(self) -> dict:
        doc = {
            "method": self.method,
            "status": self.status,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "isSplitPayment": self.split is not None,
        }
        if self.split is not None:
            doc.update({
                "firstPaymentAmount": self.split.first_payment_amount,
                "firstPaymentMethod": self.split.first_payment_method,
                "secondPaymentAmount": self.second_payment_amount,
                "secondPaymentMethod": self.split.second_payment_method,
            })
        return doc


def split_amounts(total: int, requested_first: int) -> tuple:
    """(first, second) with first clamped into [0, total]."""
    first = clamp(requested_first, 0, max(total, 0))
    return first, total - first


def build_payment_record(
    request: PaymentRequest,
    total: int,
    committed_at: datetime,
) -> PaymentRecord:
    if request.is_split:
        first, _ = split_amounts(total, request.first_payment_amount)
        return PaymentRecord(
            method=request.method,
            status=request.status,
            total=total,
            completed_at=None,
            split=SplitTerms(
                first_payment_amount=first,
                first_payment_method=request.first_payment_method or request.method,
                second_payment_method=request.second_payment_method,
            ),
        )

    completed_at = None
    if request.status in (PAYMENT_STATUS_PAID, PAYMENT_STATUS_COMPLETED):
        completed_at = committed_at
    return PaymentRecord(
        method=request.method,
        status=request.status,
        total=total,
        completed_at=completed_at,
    )


def complete_split_payment(payment: PaymentRecord, completed_at: datetime) -> PaymentRecord:
    """Mark the deferred second tranche collected."""
    rejection = split_payment_policy(payment.status, payment.split is not None)
    if rejection is not None:
        raise ValidationError("payment", rejection.message)
    return replace(payment, status=PAYMENT_STATUS_COMPLETED, completed_at=completed_at)


# ── Revenue recognition ───────────────────────────────────────

@dataclass(frozen=True)
class RevenueTranche:
    label: str
    amount: int
    method: Optional[str]
    recognized_on: Optional[date]


def revenue_tranches(
    payment: PaymentRecord,
    order_date: date,
    completed_date: Optional[date] = None,
) -> List[RevenueTranche]:
    """
    Revenue per accounting date.

    A tranche whose date is None is not yet revenue: the order has not
    been completed.
    """
    if payment.split is not None:
        return [
            RevenueTranche(
                label="first",
                amount=payment.split.first_payment_amount,
                method=payment.split.first_payment_method,
                recognized_on=order_date,
            ),
            RevenueTranche(
                label="second",
                amount=payment.second_payment_amount,
                method=payment.split.second_payment_method,
                recognized_on=completed_date,
            ),
        ]

    if payment.status in (PAYMENT_STATUS_PAID, PAYMENT_STATUS_COMPLETED):
        recognized_on = business_date(payment.completed_at) if payment.completed_at else order_date
    else:
        recognized_on = completed_date
    return [
        RevenueTranche(
            label="full",
            amount=payment.total,
            method=payment.method,
            recognized_on=recognized_on,
        )
    ]


# ══════════════════════════════════════════════════════════════
# ORDER STATUS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OrderStatusChange:
    order_id: str
    transition: StateTransition
    payment: Optional[PaymentRecord] = None


class OrderService:
    """
    Order status transitions (processing → completed | canceled).

    Completing an order with an open split payment collects the second
    tranche and dates it to the completion day.
    """

    def __init__(
        self,
        *,
        clock: Clock,
        subscribers: Optional[SubscriberRegistry] = None,
    ):
        self._clock = clock
        self._subscribers = subscribers

    def complete_order(
        self,
        order_id: str,
        current_status: str,
        payment: Optional[PaymentRecord] = None,
        actor_id: Optional[str] = None,
    ) -> OrderStatusChange:
        now = self._clock.now_utc()
        transition = ORDER_STATUS_WORKFLOW.transition(
            current_status, ORDER_STATUS_COMPLETED, now, actor_id=actor_id,
        )

        if payment is not None and payment.split is not None and payment.completed_at is None:
            payment = complete_split_payment(payment, now)
            publish(
                self._subscribers, SPLIT_PAYMENT_COMPLETED_V1,
                build_split_payment_completed_payload(
                    order_id,
                    payment.second_payment_amount,
                    payment.split.second_payment_method,
                    business_date(now),
                ),
                now,
            )

        publish(
            self._subscribers, ORDER_COMPLETED_V1,
            build_order_status_payload(order_id, current_status, transition.to_state, actor_id),
            now,
        )
        logger.info(f"Order completed: {order_id}")
        return OrderStatusChange(order_id=order_id, transition=transition, payment=payment)

    def cancel_order(
        self,
        order_id: str,
        current_status: str,
        actor_id: Optional[str] = None,
        reason: str = "",
    ) -> OrderStatusChange:
        now = self._clock.now_utc()
        transition = ORDER_STATUS_WORKFLOW.transition(
            current_status, ORDER_STATUS_CANCELED, now, actor_id=actor_id, reason=reason,
        )
        publish(
            self._subscribers, ORDER_CANCELED_V1,
            build_order_status_payload(order_id, current_status, transition.to_state, actor_id),
            now,
        )
        logger.info(f"Order canceled: {order_id}")
        return OrderStatusChange(order_id=order_id, transition=transition)
