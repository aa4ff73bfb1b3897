"""
FOS Fulfillment Engine — Variants
=================================
How an order reaches the customer. Exactly one variant per order:

    ImmediatePickup   — taken at the counter (store_pickup)
    ReservedPickup    — collected later by a named picker (pickup_reservation)
    ReservedDelivery  — delivered to a recipient address (delivery_reservation)

A pickup can never carry an address; a delivery always has a district
slot. The variant, not a set of nullable fields, says which is which.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import ClassVar, Optional, Union

STORE_PICKUP = "store_pickup"
PICKUP_RESERVATION = "pickup_reservation"
DELIVERY_RESERVATION = "delivery_reservation"

VALID_RECEIPT_TYPES = frozenset({
    STORE_PICKUP, PICKUP_RESERVATION, DELIVERY_RESERVATION,
})


@dataclass(frozen=True)
class Party:
    """A named person with a contact number (orderer, picker, recipient)."""
    name: str = ""
    contact: str = ""


@dataclass(frozen=True)
class ImmediatePickup:
    receipt_type: ClassVar[str] = STORE_PICKUP


@dataclass(frozen=True)
class ReservedPickup:
    receipt_type: ClassVar[str] = PICKUP_RESERVATION

    date: Optional[date] = None
    time: Optional[time] = None
    picker_name: str = ""
    picker_contact: str = ""

    @property
    def picker(self) -> Party:
        return Party(self.picker_name, self.picker_contact)


@dataclass(frozen=True)
class DriverAssignment:
    """Carrier details entered after scheduling."""
    affiliation: str = ""
    name: str = ""
    contact: str = ""


@dataclass(frozen=True)
class ReservedDelivery:
    receipt_type: ClassVar[str] = DELIVERY_RESERVATION

    date: Optional[date] = None
    time: Optional[time] = None
    recipient_name: str = ""
    recipient_contact: str = ""
    address: str = ""
    district: str = ""
    driver: Optional[DriverAssignment] = None

    @property
    def recipient(self) -> Party:
        return Party(self.recipient_name, self.recipient_contact)


Fulfillment = Union[ImmediatePickup, ReservedPickup, ReservedDelivery]


def is_pickup(fulfillment: Fulfillment) -> bool:
    return isinstance(fulfillment, (ImmediatePickup, ReservedPickup))


def is_delivery(fulfillment: Fulfillment) -> bool:
    return isinstance(fulfillment, ReservedDelivery)


def is_reservation(fulfillment: Fulfillment) -> bool:
    return isinstance(fulfillment, (ReservedPickup, ReservedDelivery))


@dataclass(frozen=True)
class FulfillmentRecord:
    """
    Fulfillment as stored with an order.

    system_generated marks orders produced by another subsystem
    (e.g. a recurring payment reminder); those are never corrected.
    """
    order_id: str
    fulfillment: Fulfillment
    system_generated: bool = False

    @property
    def receipt_type(self) -> str:
        return self.fulfillment.receipt_type
