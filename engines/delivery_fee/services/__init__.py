"""
FOS Delivery Fee Engine — Service Layer
=======================================
Resolves what the customer is charged for delivery.

Rules:
- Any pickup variant costs 0, whatever the mode.
- manual mode returns the typed fee verbatim (no bounds).
- auto mode looks up the district, then the "기타" row, then 0.
- A branch without a fee table is NOT switched to manual here;
  fee_mode_for() is the helper callers use to make that choice.
- Surcharges are exposed for lookup and never added in.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.config.rules import OTHER_DISTRICT, DeliveryFeeTable
from core.errors import ValidationError
from core.primitives.money import require_money
from engines.delivery_fee.policies import branch_required_for_delivery_policy
from engines.fulfillment.models import Fulfillment, ReservedDelivery, is_pickup

logger = logging.getLogger("fos.engines.delivery_fee")

FEE_MODE_AUTO = "auto"
FEE_MODE_MANUAL = "manual"
VALID_FEE_MODES = frozenset({FEE_MODE_AUTO, FEE_MODE_MANUAL})

SURCHARGE_MEDIUM_ITEM = "medium_item"
SURCHARGE_LARGE_ITEM = "large_item"
SURCHARGE_EXPRESS = "express"
VALID_SURCHARGE_KINDS = frozenset({
    SURCHARGE_MEDIUM_ITEM, SURCHARGE_LARGE_ITEM, SURCHARGE_EXPRESS,
})


def lookup_fee(fee_table: Optional[DeliveryFeeTable], district: Optional[str]) -> int:
    """District fee, else the "기타" fee, else 0."""
    if fee_table is None:
        return 0
    fee = fee_table.fee_for(district)
    if fee is not None:
        return fee
    fallback = fee_table.fee_for(OTHER_DISTRICT)
    return fallback if fallback is not None else 0


def resolve_delivery_fee(
    fulfillment: Fulfillment,
    mode: str,
    manual_fee: int,
    fee_table: Optional[DeliveryFeeTable],
    district: Optional[str] = None,
) -> int:
    if mode not in VALID_FEE_MODES:
        raise ValidationError("mode", f"must be one of {sorted(VALID_FEE_MODES)}, got {mode!r}.")

    if is_pickup(fulfillment):
        return 0

    if mode == FEE_MODE_MANUAL:
        fee = require_money(manual_fee, "manual_fee", allow_negative=True)
        logger.debug(f"Delivery fee (manual): {fee}")
        return fee

    if district is None and isinstance(fulfillment, ReservedDelivery):
        district = fulfillment.district
    fee = lookup_fee(fee_table, district)
    logger.debug(f"Delivery fee (auto): district={district!r} → {fee}")
    return fee


def resolve_district(fee_table: Optional[DeliveryFeeTable], district: Optional[str]) -> Optional[str]:
    """
    District to preselect after an address search: the district itself
    when the branch prices it, otherwise "기타". None without a table.
    """
    if fee_table is None or fee_table.is_empty:
        return None
    if fee_table.has_district(district):
        return district
    return OTHER_DISTRICT


def fee_mode_for(fee_table: Optional[DeliveryFeeTable]) -> str:
    """Caller-side default: branches without fee rows are priced by hand."""
    if fee_table is None or fee_table.is_empty:
        return FEE_MODE_MANUAL
    return FEE_MODE_AUTO


def surcharge_for(fee_table: Optional[DeliveryFeeTable], kind: str) -> int:
    if kind not in VALID_SURCHARGE_KINDS:
        raise ValidationError("kind", f"unknown surcharge {kind!r}.")
    if fee_table is None:
        return 0
    return getattr(fee_table.surcharges, kind)


def require_branch_for_delivery(branch_id: Optional[str], fulfillment: Fulfillment) -> None:
    rejection = branch_required_for_delivery_policy(branch_id, fulfillment)
    if rejection is not None:
        raise ValidationError("branch_id", rejection.message)
