"""
FOS Orders Engine — Commands
============================
Order entry inputs: line items, discount / delivery / payment choices.

All money is integer currency units. Inputs validate their own shape;
the calculator never raises for incomplete-but-valid entry state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from core.config.rules import DeliveryFeeTable, DiscountTier
from core.errors import ValidationError
from core.primitives.money import Rate, require_money
from engines.delivery_fee.services import FEE_MODE_AUTO, VALID_FEE_MODES
from engines.discount.policies import EligibilityPredicate
from engines.fulfillment.models import Fulfillment, ImmediatePickup

# ══════════════════════════════════════════════════════════════
# CONSTANTS
# ══════════════════════════════════════════════════════════════

ENTRY_PATH_FULL = "full"
ENTRY_PATH_SIMPLIFIED = "simplified"
VALID_ENTRY_PATHS = frozenset({ENTRY_PATH_FULL, ENTRY_PATH_SIMPLIFIED})

PAYMENT_METHOD_CARD = "card"
PAYMENT_METHOD_CASH = "cash"
PAYMENT_METHOD_TRANSFER = "transfer"
PAYMENT_METHOD_MAINPAY = "mainpay"
PAYMENT_METHOD_SHOPPING_MALL = "shopping_mall"
PAYMENT_METHOD_EPAY = "epay"
VALID_PAYMENT_METHODS = frozenset({
    PAYMENT_METHOD_CARD,
    PAYMENT_METHOD_CASH,
    PAYMENT_METHOD_TRANSFER,
    PAYMENT_METHOD_MAINPAY,
    PAYMENT_METHOD_SHOPPING_MALL,
    PAYMENT_METHOD_EPAY,
})

ORDER_STATUS_PROCESSING = "processing"
ORDER_STATUS_COMPLETED = "completed"
ORDER_STATUS_CANCELED = "canceled"

PAYMENT_STATUS_PENDING = "pending"
PAYMENT_STATUS_PAID = "paid"
PAYMENT_STATUS_COMPLETED = "completed"
PAYMENT_STATUS_SPLIT = "split_payment"
VALID_PAYMENT_STATUSES = frozenset({
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_COMPLETED,
    PAYMENT_STATUS_SPLIT,
})


# ══════════════════════════════════════════════════════════════
# LINE ITEMS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OrderItem:
    """
    A cart line.

    Custom (free-form) products bypass stock limits and may carry a
    zero quantity while being typed in; catalog items need >= 1.
    """
    item_id: str
    name: str
    price: int
    quantity: int = 1
    is_custom_product: bool = False

    def __post_init__(self):
        if not self.item_id:
            raise ValidationError("item_id", "must be non-empty.")
        require_money(self.price, "price")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValidationError("quantity", "must be int.")
        if self.quantity < 0:
            raise ValidationError("quantity", f"must be >= 0, got {self.quantity}.")
        if self.quantity == 0 and not self.is_custom_product:
            raise ValidationError(
                "quantity", f"catalog item '{self.item_id}' needs quantity >= 1."
            )

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


# ══════════════════════════════════════════════════════════════
# PRICING INPUTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DiscountInputs:
    """
    Discount part of an order entry, as raw UI values.

    can_apply_discount overrides the tier-derived eligibility when the
    caller already knows the answer.
    """
    branch_id: str = ""
    tiers: Tuple[DiscountTier, ...] = ()
    selected_rate: Rate = 0
    custom_rate: Rate = 0
    can_apply_discount: Optional[EligibilityPredicate] = None


@dataclass(frozen=True)
class DeliveryInputs:
    fulfillment: Fulfillment = ImmediatePickup()
    mode: str = FEE_MODE_AUTO
    manual_fee: int = 0
    fee_table: Optional[DeliveryFeeTable] = None
    district: Optional[str] = None

    def __post_init__(self):
        if self.mode not in VALID_FEE_MODES:
            raise ValidationError(
                "mode", f"must be one of {sorted(VALID_FEE_MODES)}, got {self.mode!r}."
            )


# ══════════════════════════════════════════════════════════════
# PAYMENT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PaymentRequest:
    """
    Payment choice at commit time.

    For a split payment, first_payment_amount is whatever was typed;
    it is clamped against the order total when the record is built.
    """
    method: str
    status: str = PAYMENT_STATUS_PAID
    first_payment_amount: int = 0
    first_payment_method: Optional[str] = None
    second_payment_method: Optional[str] = None

    def __post_init__(self):
        if self.method not in VALID_PAYMENT_METHODS:
            raise ValidationError(
                "method", f"must be one of {sorted(VALID_PAYMENT_METHODS)}, got {self.method!r}."
            )
        if self.status not in VALID_PAYMENT_STATUSES:
            raise ValidationError(
                "status", f"must be one of {sorted(VALID_PAYMENT_STATUSES)}, got {self.status!r}."
            )
        require_money(self.first_payment_amount, "first_payment_amount", allow_negative=True)
        for name in ("first_payment_method", "second_payment_method"):
            value = getattr(self, name)
            if value is not None and value not in VALID_PAYMENT_METHODS:
                raise ValidationError(name, f"unknown payment method {value!r}.")

    @property
    def is_split(self) -> bool:
        return self.status == PAYMENT_STATUS_SPLIT
