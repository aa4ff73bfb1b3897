"""
FOS Calendar Engine — Entries, Origins and Viewers
==================================================
One entry type for the whole calendar. Where an entry came from is
its origin tag:

    Manual                          — written by a user, editable
    DerivedFromOrder(order_id)      — a reserved pickup or delivery
    DerivedFromPaymentSchedule(id)  — a company customer's payment day

Derived entries carry a related id and are read-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Union

from core.config.rules import HEADQUARTERS_SCOPES
from core.errors import ValidationError
from engines.fulfillment.models import Fulfillment

# ══════════════════════════════════════════════════════════════
# CONSTANTS
# ══════════════════════════════════════════════════════════════

ENTRY_DELIVERY = "delivery"
ENTRY_PICKUP = "pickup"
ENTRY_MATERIAL = "material"
ENTRY_EMPLOYEE = "employee"
ENTRY_NOTICE = "notice"
ENTRY_PAYMENT = "payment"
VALID_ENTRY_TYPES = frozenset({
    ENTRY_DELIVERY, ENTRY_PICKUP, ENTRY_MATERIAL,
    ENTRY_EMPLOYEE, ENTRY_NOTICE, ENTRY_PAYMENT,
})

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"
VALID_ENTRY_STATUSES = frozenset({STATUS_PENDING, STATUS_COMPLETED, STATUS_CANCELLED})

ROLE_ADMIN = "본사 관리자"
ROLE_BRANCH_MANAGER = "가맹점 관리자"

CUSTOMER_TYPE_COMPANY = "company"


# ══════════════════════════════════════════════════════════════
# ORIGIN
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Manual:
    label = "manual"


@dataclass(frozen=True)
class DerivedFromOrder:
    order_id: str
    label = "order"


@dataclass(frozen=True)
class DerivedFromPaymentSchedule:
    customer_id: str
    label = "payment schedule"


EntryOrigin = Union[Manual, DerivedFromOrder, DerivedFromPaymentSchedule]

MANUAL = Manual()


def related_id_of(origin: EntryOrigin) -> Optional[str]:
    if isinstance(origin, DerivedFromOrder):
        return origin.order_id
    if isinstance(origin, DerivedFromPaymentSchedule):
        return origin.customer_id
    return None


def is_derived(origin: EntryOrigin) -> bool:
    return not isinstance(origin, Manual)


# ══════════════════════════════════════════════════════════════
# CALENDAR ENTRY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CalendarEntry:
    entry_id: str
    type: str
    title: str
    start: datetime
    branch_name: str
    end: Optional[datetime] = None
    status: str = STATUS_PENDING
    origin: EntryOrigin = MANUAL
    description: str = ""
    color: str = ""
    is_all_day: bool = False
    created_by: Optional[str] = None
    created_by_role: Optional[str] = None
    created_by_branch: Optional[str] = None

    def __post_init__(self):
        if not self.entry_id:
            raise ValidationError("entry_id", "must be non-empty.")
        if self.type not in VALID_ENTRY_TYPES:
            raise ValidationError("type", f"unknown entry type {self.type!r}.")
        if self.status not in VALID_ENTRY_STATUSES:
            raise ValidationError("status", f"unknown status {self.status!r}.")
        if self.start.tzinfo is None:
            raise ValidationError("start", "must be timezone-aware.")
        if self.end is not None and self.end.tzinfo is None:
            raise ValidationError("end", "must be timezone-aware.")
        if self.end is not None and self.end < self.start:
            raise ValidationError("end", "must not precede start.")

    @property
    def related_id(self) -> Optional[str]:
        return related_id_of(self.origin)

    @property
    def is_derived(self) -> bool:
        return is_derived(self.origin)

    @property
    def is_headquarters_scope(self) -> bool:
        return self.branch_name in HEADQUARTERS_SCOPES

    @property
    def has_author(self) -> bool:
        return bool(self.created_by or self.created_by_role or self.created_by_branch)


# ══════════════════════════════════════════════════════════════
# VIEWER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Viewer:
    """The signed-in user looking at the calendar."""
    role: Optional[str]
    branch: Optional[str] = None
    uid: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_branch_manager(self) -> bool:
        return self.role == ROLE_BRANCH_MANAGER


# ══════════════════════════════════════════════════════════════
# READ-ONLY SOURCES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OrderSnapshot:
    """The fields of a persisted order the calendar reads."""
    order_id: str
    branch_name: str
    status: str
    orderer_name: str
    fulfillment: Fulfillment
    item_names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CustomerSnapshot:
    """
    A customer as the calendar sees it.

    monthly_payment_day is stored as free text; only a non-blank
    integer value schedules anything.
    """
    customer_id: str
    name: str
    branch_name: str
    customer_type: str = "personal"
    company_name: str = ""
    monthly_payment_day: Union[str, int, None] = None

    @property
    def is_company(self) -> bool:
        return self.customer_type == CUSTOMER_TYPE_COMPANY

    @property
    def payment_day(self) -> Optional[int]:
        value = self.monthly_payment_day
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        text = str(value).strip()
        if not text.isdigit():
            return None
        return int(text)
