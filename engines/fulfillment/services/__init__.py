"""
FOS Fulfillment Engine — Service Layer
======================================
Builds, switches and corrects fulfillment variants.

Switching between pickup and delivery pre-fills the new variant's
contact fields from the orderer. That is an editable default: the
caller may overwrite the fields afterwards.

Corrections (driver, schedule) never change the variant type.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, time
from typing import Any, Mapping, Optional, Tuple

from core.errors import ImmutableEntryError, ValidationError
from engines.fulfillment.models import (
    PICKUP_RESERVATION,
    STORE_PICKUP,
    VALID_RECEIPT_TYPES,
    DriverAssignment,
    Fulfillment,
    FulfillmentRecord,
    ImmediatePickup,
    Party,
    ReservedDelivery,
    ReservedPickup,
)
from engines.fulfillment.policies import (
    delivery_only_policy,
    system_generated_policy,
)

logger = logging.getLogger("fos.engines.fulfillment")


# ── Parsing persisted values ──────────────────────────────────

def parse_date(value: Any) -> Optional[date]:
    """'yyyy-MM-dd' (or date/datetime) → date; blank → None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValidationError("date", f"expected yyyy-MM-dd, got {value!r}.") from exc


def parse_time(value: Any) -> Optional[time]:
    """'HH:MM' (or time) → time; blank → None."""
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    try:
        hours, minutes = str(value).strip().split(":")[:2]
        return time(int(hours), int(minutes))
    except ValueError as exc:
        raise ValidationError("time", f"expected HH:MM, got {value!r}.") from exc


def from_receipt_type(
    receipt_type: str,
    pickup_info: Optional[Mapping[str, Any]] = None,
    delivery_info: Optional[Mapping[str, Any]] = None,
) -> Fulfillment:
    """Build a variant from the order document's receipt type and info blocks."""
    if receipt_type not in VALID_RECEIPT_TYPES:
        raise ValidationError("receipt_type", f"unknown receipt type {receipt_type!r}.")

    if receipt_type == STORE_PICKUP:
        return ImmediatePickup()

    if receipt_type == PICKUP_RESERVATION:
        info = pickup_info or {}
        return ReservedPickup(
            date=parse_date(info.get("date")),
            time=parse_time(info.get("time")),
            picker_name=info.get("pickerName", ""),
            picker_contact=info.get("pickerContact", ""),
        )

    info = delivery_info or {}
    driver = None
    if info.get("driverAffiliation") or info.get("driverName"):
        driver = DriverAssignment(
            affiliation=info.get("driverAffiliation", ""),
            name=info.get("driverName", ""),
            contact=info.get("driverContact", ""),
        )
    return ReservedDelivery(
        date=parse_date(info.get("date")),
        time=parse_time(info.get("time")),
        recipient_name=info.get("recipientName", ""),
        recipient_contact=info.get("recipientContact", ""),
        address=info.get("address", ""),
        district=info.get("district", ""),
        driver=driver,
    )


# ── Switching variants ────────────────────────────────────────

def schedule_of(fulfillment: Fulfillment) -> Optional[Tuple[Optional[date], Optional[time]]]:
    """(date, time) of a reservation; None for an immediate pickup."""
    if isinstance(fulfillment, ImmediatePickup):
        return None
    return fulfillment.date, fulfillment.time


def switch_fulfillment(
    current: Fulfillment,
    target_receipt_type: str,
    orderer: Party,
) -> Fulfillment:
    """
    Move an order to another receipt type.

    pickup → delivery pre-fills the recipient from the orderer;
    delivery → pickup pre-fills the picker from the orderer.
    The reserved date and time carry over.
    """
    if target_receipt_type not in VALID_RECEIPT_TYPES:
        raise ValidationError(
            "receipt_type", f"unknown receipt type {target_receipt_type!r}."
        )
    if current.receipt_type == target_receipt_type:
        return current

    when = schedule_of(current) or (None, None)

    if target_receipt_type == STORE_PICKUP:
        return ImmediatePickup()

    if target_receipt_type == PICKUP_RESERVATION:
        return ReservedPickup(
            date=when[0], time=when[1],
            picker_name=orderer.name, picker_contact=orderer.contact,
        )

    return ReservedDelivery(
        date=when[0], time=when[1],
        recipient_name=orderer.name, recipient_contact=orderer.contact,
    )


# ── Administrative corrections ────────────────────────────────

def ensure_mutable(record: FulfillmentRecord) -> None:
    rejection = system_generated_policy(record)
    if rejection is not None:
        raise ImmutableEntryError(record.order_id, "system", action="correct")


def assign_driver(record: FulfillmentRecord, driver: DriverAssignment) -> FulfillmentRecord:
    """Attach or replace carrier details on a delivery."""
    ensure_mutable(record)
    rejection = delivery_only_policy(record)
    if rejection is not None:
        raise ValidationError("fulfillment", rejection.message)

    updated = replace(record, fulfillment=replace(record.fulfillment, driver=driver))
    logger.info(
        f"Driver assigned: order={record.order_id} "
        f"affiliation={driver.affiliation or '-'}"
    )
    return updated


def reschedule(
    record: FulfillmentRecord,
    new_date: Optional[date],
    new_time: Optional[time],
) -> FulfillmentRecord:
    """Correct the reserved date/time of a pickup or delivery reservation."""
    ensure_mutable(record)
    if isinstance(record.fulfillment, ImmediatePickup):
        raise ValidationError(
            "fulfillment", f"Order '{record.order_id}' has no reservation to move."
        )
    return replace(
        record,
        fulfillment=replace(record.fulfillment, date=new_date, time=new_time),
    )


def to_document(fulfillment: Fulfillment) -> dict:
    """Order document fields for a variant (receiptType, pickupInfo, deliveryInfo)."""
    doc = {"receiptType": fulfillment.receipt_type, "pickupInfo": None, "deliveryInfo": None}
    when = schedule_of(fulfillment)
    date_str = when[0].isoformat() if when and when[0] else ""
    time_str = when[1].strftime("%H:%M") if when and when[1] else ""

    if isinstance(fulfillment, ReservedPickup):
        doc["pickupInfo"] = {
            "date": date_str,
            "time": time_str,
            "pickerName": fulfillment.picker_name,
            "pickerContact": fulfillment.picker_contact,
        }
    elif isinstance(fulfillment, ReservedDelivery):
        info = {
            "date": date_str,
            "time": time_str,
            "recipientName": fulfillment.recipient_name,
            "recipientContact": fulfillment.recipient_contact,
            "address": fulfillment.address,
            "district": fulfillment.district,
        }
        if fulfillment.driver is not None:
            info.update({
                "driverAffiliation": fulfillment.driver.affiliation,
                "driverName": fulfillment.driver.name,
                "driverContact": fulfillment.driver.contact,
            })
        doc["deliveryInfo"] = info
    return doc
