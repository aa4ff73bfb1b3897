"""
FOS Calendar Engine — Service Layer
===================================
Builds the visible schedule for one rendered month.

Sources, merged into one list of CalendarEntry:
1. Manual entries (user-authored).
2. Reserved pickups and deliveries of processing/completed orders.
   Default times: pickup 09:00, delivery 14:00.
3. Payment-due reminders for company customers with a monthly
   payment day, for the previous, current and next month. A day the
   month does not have (31 in April) produces nothing.

Then visibility (branch and role), the optional admin branch and
type selectors, and the rendered range.

The aggregator never writes. Edits and deletes go through
ensure_editable() / ensure_deletable() before reaching the store.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, time
from typing import Dict, Iterable, List, Optional

from core.config.rules import ALL_BRANCHES as SHOW_ALL
from core.errors import ImmutableEntryError, PermissionDeniedError
from core.time.clock import KST, business_date
from core.time.temporal import (
    DateWindow,
    covers_day,
    day_in_month,
    month_window,
    shift_month,
)
from engines.calendar.models import (
    ENTRY_DELIVERY,
    ENTRY_NOTICE,
    ENTRY_PAYMENT,
    ENTRY_PICKUP,
    STATUS_COMPLETED,
    STATUS_PENDING,
    CalendarEntry,
    CustomerSnapshot,
    DerivedFromOrder,
    DerivedFromPaymentSchedule,
    OrderSnapshot,
    Viewer,
)
from engines.calendar.policies import derived_entry_policy, entry_permission_policy
from engines.fulfillment.models import ReservedDelivery, ReservedPickup

logger = logging.getLogger("fos.engines.calendar")

DEFAULT_PICKUP_TIME = time(9, 0)
DEFAULT_DELIVERY_TIME = time(14, 0)

SCHEDULED_ORDER_STATUSES = frozenset({"processing", "completed"})

COLOR_PICKUP = "bg-blue-500"
COLOR_DELIVERY = "bg-green-500"
COLOR_PAYMENT = "bg-purple-500"


# ══════════════════════════════════════════════════════════════
# DERIVATION
# ══════════════════════════════════════════════════════════════

def _at(day: date, at: Optional[time], default: time) -> datetime:
    return datetime.combine(day, at or default, tzinfo=KST)


def derive_order_entry(order: OrderSnapshot) -> Optional[CalendarEntry]:
    """One entry for a reserved pickup or delivery; None otherwise."""
    if order.status not in SCHEDULED_ORDER_STATUSES:
        return None

    status = STATUS_COMPLETED if order.status == "completed" else STATUS_PENDING
    f = order.fulfillment

    if isinstance(f, ReservedPickup):
        if f.date is None:
            logger.debug(f"Pickup reservation without date skipped: {order.order_id}")
            return None
        return CalendarEntry(
            entry_id=f"pickup_{order.order_id}",
            type=ENTRY_PICKUP,
            title=f"[픽업] {order.orderer_name}",
            description=f"상품: {', '.join(order.item_names)}",
            start=_at(f.date, f.time, DEFAULT_PICKUP_TIME),
            branch_name=order.branch_name,
            status=status,
            origin=DerivedFromOrder(order.order_id),
            color=COLOR_PICKUP,
        )

    if isinstance(f, ReservedDelivery):
        if f.date is None:
            logger.debug(f"Delivery reservation without date skipped: {order.order_id}")
            return None
        return CalendarEntry(
            entry_id=f"delivery_{order.order_id}",
            type=ENTRY_DELIVERY,
            title=f"[배송] {f.recipient_name}",
            description=f"주소: {f.address}",
            start=_at(f.date, f.time, DEFAULT_DELIVERY_TIME),
            branch_name=order.branch_name,
            status=status,
            origin=DerivedFromOrder(order.order_id),
            color=COLOR_DELIVERY,
        )

    return None


def derive_order_entries(orders: Iterable[OrderSnapshot]) -> List[CalendarEntry]:
    entries = []
    for order in orders:
        entry = derive_order_entry(order)
        if entry is not None:
            entries.append(entry)
    return entries


def derive_payment_entries(
    customers: Iterable[CustomerSnapshot],
    year: int,
    month: int,
) -> List[CalendarEntry]:
    """
    Payment-due reminders around the rendered month.

    Up to three per customer (previous, current, next month).
    """
    months = [shift_month(year, month, delta) for delta in (-1, 0, 1)]
    entries = []
    for customer in customers:
        day = customer.payment_day
        if not customer.is_company or day is None:
            continue
        label = customer.company_name or customer.name
        for y, m in months:
            due = day_in_month(y, m, day)
            if due is None:
                continue
            entries.append(CalendarEntry(
                entry_id=f"payment_{customer.customer_id}_{y:04d}{m:02d}",
                type=ENTRY_PAYMENT,
                title=f"[결제] {label}",
                description=f"월 결제일: 매월 {day}일",
                start=datetime.combine(due, time(0, 0), tzinfo=KST),
                branch_name=customer.branch_name,
                origin=DerivedFromPaymentSchedule(customer.customer_id),
                color=COLOR_PAYMENT,
                is_all_day=True,
            ))
    return entries


# ══════════════════════════════════════════════════════════════
# VISIBILITY
# ══════════════════════════════════════════════════════════════

def is_visible(entry: CalendarEntry, viewer: Viewer) -> bool:
    """
    Admins see everything. Everyone else sees their own branch, plus
    notices filed under headquarters scope.
    """
    if viewer.is_admin:
        return True
    if entry.type == ENTRY_NOTICE and entry.is_headquarters_scope:
        return True
    return bool(viewer.branch) and entry.branch_name == viewer.branch


def _passes_filters(
    entry: CalendarEntry,
    branch_filter: Optional[str],
    type_filter: Optional[str],
) -> bool:
    if type_filter and type_filter != SHOW_ALL and entry.type != type_filter:
        return False
    if entry.type == ENTRY_NOTICE:
        return True
    if branch_filter and branch_filter != SHOW_ALL and entry.branch_name != branch_filter:
        return False
    return True


def display_range(year: int, month: int) -> DateWindow:
    """Previous month start through next month end: the grid's reach."""
    py, pm = shift_month(year, month, -1)
    ny, nm = shift_month(year, month, 1)
    return DateWindow(month_window(py, pm).start, month_window(ny, nm).end)


def _in_range(entry: CalendarEntry, window: DateWindow) -> bool:
    last = entry.end if entry.end is not None else entry.start
    return window.overlaps(business_date(entry.start), business_date(last))


# ══════════════════════════════════════════════════════════════
# AGGREGATION
# ══════════════════════════════════════════════════════════════

def derive_calendar_entries(
    manual_entries: Iterable[CalendarEntry],
    orders: Iterable[OrderSnapshot],
    customers: Iterable[CustomerSnapshot],
    month: DateWindow,
    viewer: Viewer,
    branch_filter: Optional[str] = None,
    type_filter: Optional[str] = None,
) -> List[CalendarEntry]:
    """
    All entries the viewer sees for the month containing `month.start`,
    sorted by start.

    branch_filter is the admin branch selector; it never hides
    notices. type_filter keeps a single entry type. "전체" or None
    means no filter.
    """
    year, mon = month.start.year, month.start.month
    window = display_range(year, mon)

    merged = list(manual_entries)
    merged.extend(derive_order_entries(orders))
    merged.extend(derive_payment_entries(customers, year, mon))

    if not viewer.is_admin:
        branch_filter = None
    visible = [
        e for e in merged
        if _in_range(e, window)
        and is_visible(e, viewer)
        and _passes_filters(e, branch_filter, type_filter)
    ]
    visible.sort(key=lambda e: (e.start, e.entry_id))
    logger.debug(
        f"Calendar {year:04d}-{mon:02d} for role={viewer.role!r} "
        f"branch={viewer.branch!r}: {len(visible)} of {len(merged)} entries"
    )
    return visible


def entries_for_day(entries: Iterable[CalendarEntry], day: date) -> List[CalendarEntry]:
    return [e for e in entries if covers_day(e.start, e.end, day)]


def group_by_day(entries: Iterable[CalendarEntry], window: DateWindow) -> Dict[date, List[CalendarEntry]]:
    """Every day of the window mapped to the entries covering it."""
    entries = list(entries)
    grouped: Dict[date, List[CalendarEntry]] = defaultdict(list)
    for day in window.days():
        grouped[day] = entries_for_day(entries, day)
    return dict(grouped)


# ══════════════════════════════════════════════════════════════
# EDIT / DELETE GUARDS
# ══════════════════════════════════════════════════════════════

def ensure_editable(entry: CalendarEntry, viewer: Optional[Viewer] = None) -> None:
    """
    Raise ImmutableEntryError for a derived entry and, when a viewer
    is given, PermissionDeniedError if the role rules refuse.
    """
    if derived_entry_policy(entry) is not None:
        raise ImmutableEntryError(entry.entry_id, entry.origin.label, action="edit")
    if viewer is not None:
        rejection = entry_permission_policy(entry, viewer)
        if rejection is not None:
            raise PermissionDeniedError(rejection.code, rejection.message)


def ensure_deletable(entry: CalendarEntry, viewer: Viewer) -> None:
    if derived_entry_policy(entry) is not None:
        raise ImmutableEntryError(entry.entry_id, entry.origin.label, action="delete")
    rejection = entry_permission_policy(entry, viewer)
    if rejection is not None:
        raise PermissionDeniedError(rejection.code, rejection.message)


def ensure_creatable(viewer: Viewer) -> None:
    rejection = entry_permission_policy(None, viewer)
    if rejection is not None:
        raise PermissionDeniedError(rejection.code, rejection.message)
