"""
FOS Calendar Engine — Test Suite
==================================
Tests for: order-derived entries, payment-day reminders, visibility,
admin filters, read-only derived entries, role rules.
"""

from datetime import date, datetime, time, timezone

import pytest

GANGNAM = "강남점"
SEOCHO = "서초점"


def _viewer(role="가맹점 관리자", branch=GANGNAM, uid="u1"):
    from engines.calendar.models import Viewer

    return Viewer(role=role, branch=branch, uid=uid)


def _admin():
    return _viewer(role="본사 관리자", branch=None, uid="hq")


def _manual(entry_id="m1", type="material", branch=GANGNAM, day=date(2025, 5, 8), **kwargs):
    from core.time.clock import KST
    from engines.calendar.models import CalendarEntry

    return CalendarEntry(
        entry_id=entry_id,
        type=type,
        title=f"{type} {entry_id}",
        start=datetime.combine(day, time(10, 0), tzinfo=KST),
        branch_name=branch,
        **kwargs,
    )


def _order(order_id="o1", fulfillment=None, status="processing", branch=GANGNAM):
    from engines.calendar.models import OrderSnapshot
    from engines.fulfillment.models import ReservedPickup

    return OrderSnapshot(
        order_id=order_id,
        branch_name=branch,
        status=status,
        orderer_name="홍길동",
        fulfillment=fulfillment or ReservedPickup(date=date(2025, 5, 8)),
        item_names=("장미 꽃다발", "안개꽃"),
    )


def _company(day, customer_id="c1", branch=GANGNAM):
    from engines.calendar.models import CustomerSnapshot

    return CustomerSnapshot(
        customer_id=customer_id,
        name="김담당",
        branch_name=branch,
        customer_type="company",
        company_name="플라워주식회사",
        monthly_payment_day=day,
    )


# ══════════════════════════════════════════════════════════════
# ENTRY MODEL
# ══════════════════════════════════════════════════════════════

class TestCalendarEntry:
    def test_unknown_type_rejected(self):
        from core.errors import ValidationError

        with pytest.raises(ValidationError, match="type"):
            _manual(type="birthday")

    def test_end_before_start_rejected(self):
        from core.errors import ValidationError
        from core.time.clock import KST

        with pytest.raises(ValidationError, match="end"):
            _manual(end=datetime(2025, 5, 7, 10, 0, tzinfo=KST))

    def test_naive_start_rejected(self):
        from core.errors import ValidationError
        from engines.calendar.models import CalendarEntry

        with pytest.raises(ValidationError, match="start"):
            CalendarEntry(entry_id="m1", type="material", title="자재",
                          start=datetime(2025, 5, 8, 10, 0), branch_name=GANGNAM)

    def test_naive_end_rejected(self):
        from core.errors import ValidationError

        with pytest.raises(ValidationError, match="end"):
            _manual(end=datetime(2025, 5, 9, 10, 0))

    def test_origin_tags(self):
        from engines.calendar.models import DerivedFromOrder

        manual = _manual()
        derived = _manual(origin=DerivedFromOrder("o1"))
        assert not manual.is_derived and manual.related_id is None
        assert derived.is_derived and derived.related_id == "o1"

    @pytest.mark.parametrize("raw,expected", [
        (15, 15), ("15", 15), (" 7 ", 7), ("", None), ("말일", None), (None, None),
    ])
    def test_payment_day_parsing(self, raw, expected):
        assert _company(raw).payment_day == expected


# ══════════════════════════════════════════════════════════════
# ORDER-DERIVED ENTRIES
# ══════════════════════════════════════════════════════════════

class TestOrderEntries:
    def test_pickup_defaults_to_nine(self):
        from core.time.clock import KST
        from engines.calendar.services import derive_order_entry

        entry = derive_order_entry(_order())
        assert entry.entry_id == "pickup_o1"
        assert entry.type == "pickup"
        assert entry.title == "[픽업] 홍길동"
        assert entry.start == datetime(2025, 5, 8, 9, 0, tzinfo=KST)
        assert entry.related_id == "o1"

    def test_delivery_defaults_to_fourteen(self):
        from engines.calendar.services import derive_order_entry
        from engines.fulfillment.models import ReservedDelivery

        f = ReservedDelivery(date=date(2025, 5, 8), recipient_name="김수령", address="서울시 강남구")
        entry = derive_order_entry(_order(fulfillment=f))
        assert entry.entry_id == "delivery_o1"
        assert entry.title == "[배송] 김수령"
        assert entry.start.time() == time(14, 0)
        assert "서울시 강남구" in entry.description

    def test_explicit_time_kept(self):
        from engines.calendar.services import derive_order_entry
        from engines.fulfillment.models import ReservedPickup

        entry = derive_order_entry(_order(fulfillment=ReservedPickup(date=date(2025, 5, 8), time=time(16, 30))))
        assert entry.start.time() == time(16, 30)

    def test_completed_order_entry_is_completed(self):
        from engines.calendar.services import derive_order_entry

        assert derive_order_entry(_order(status="completed")).status == "completed"
        assert derive_order_entry(_order()).status == "pending"

    @pytest.mark.parametrize("status", ["canceled", "pending"])
    def test_other_statuses_skipped(self, status):
        from engines.calendar.services import derive_order_entry

        assert derive_order_entry(_order(status=status)) is None

    def test_store_pickup_and_undated_skipped(self):
        from engines.calendar.services import derive_order_entries
        from engines.fulfillment.models import ImmediatePickup, ReservedDelivery

        orders = [
            _order("o1", ImmediatePickup()),
            _order("o2", ReservedDelivery(recipient_name="김수령")),
            _order("o3"),
        ]
        assert [e.entry_id for e in derive_order_entries(orders)] == ["pickup_o3"]


# ══════════════════════════════════════════════════════════════
# PAYMENT-DAY ENTRIES
# ══════════════════════════════════════════════════════════════

class TestPaymentEntries:
    def test_day_31_skips_april(self):
        from core.time.temporal import month_window
        from engines.calendar.services import derive_payment_entries

        april = month_window(2025, 4)
        may = month_window(2025, 5)

        in_april = [e for e in derive_payment_entries([_company(31)], 2025, 4)
                    if april.contains(e.start.date())]
        in_may = [e for e in derive_payment_entries([_company(31)], 2025, 5)
                  if may.contains(e.start.date())]

        assert in_april == []
        assert len(in_may) == 1
        assert in_may[0].start.date() == date(2025, 5, 31)

    def test_three_months_covered(self):
        from engines.calendar.services import derive_payment_entries

        entries = derive_payment_entries([_company(15)], 2025, 1)
        assert [e.start.date() for e in entries] == [
            date(2024, 12, 15), date(2025, 1, 15), date(2025, 2, 15),
        ]
        assert entries[0].entry_id == "payment_c1_202412"

    def test_entry_shape(self):
        from engines.calendar.services import derive_payment_entries

        entry = derive_payment_entries([_company(10)], 2025, 5)[1]
        assert entry.type == "payment"
        assert entry.title == "[결제] 플라워주식회사"
        assert entry.is_all_day
        assert entry.is_derived and entry.related_id == "c1"

    def test_personal_and_blank_customers_skipped(self):
        from engines.calendar.models import CustomerSnapshot
        from engines.calendar.services import derive_payment_entries

        customers = [
            CustomerSnapshot("p1", "개인", GANGNAM, monthly_payment_day=10),
            _company("", customer_id="c2"),
            _company("abc", customer_id="c3"),
        ]
        assert derive_payment_entries(customers, 2025, 5) == []


# ══════════════════════════════════════════════════════════════
# AGGREGATION AND VISIBILITY
# ══════════════════════════════════════════════════════════════

class TestDeriveCalendarEntries:
    def _run(self, viewer, manual=(), orders=(), customers=(), **filters):
        from core.time.temporal import month_window
        from engines.calendar.services import derive_calendar_entries

        return derive_calendar_entries(
            manual, orders, customers, month_window(2025, 5), viewer, **filters,
        )

    def test_merges_and_sorts(self):
        manual = [_manual("m1", day=date(2025, 5, 20))]
        orders = [_order("o1")]
        customers = [_company(1)]
        ids = [e.entry_id for e in self._run(_viewer(), manual, orders, customers)]
        assert ids == ["payment_c1_202504", "payment_c1_202505", "pickup_o1", "m1", "payment_c1_202506"]

    def test_branch_viewer_sees_own_branch_only(self):
        manual = [_manual("m1"), _manual("m2", branch=SEOCHO)]
        orders = [_order("o1", branch=SEOCHO)]
        assert [e.entry_id for e in self._run(_viewer(), manual, orders)] == ["m1"]

    def test_headquarters_notice_visible_everywhere(self):
        manual = [_manual("n1", type="notice", branch="본사"), _manual("n2", type="notice", branch="전체")]
        assert len(self._run(_viewer(), manual)) == 2

    def test_headquarters_non_notice_hidden_from_branches(self):
        manual = [_manual("m1", branch="본사")]
        assert self._run(_viewer(), manual) == []

    def test_viewer_without_branch_sees_only_notices(self):
        manual = [_manual("m1"), _manual("n1", type="notice", branch="본사")]
        result = self._run(_viewer(role="직원", branch=None), manual)
        assert [e.entry_id for e in result] == ["n1"]

    def test_admin_sees_all_and_can_filter_branch(self):
        manual = [
            _manual("m1"), _manual("m2", branch=SEOCHO),
            _manual("n1", type="notice", branch="본사"),
        ]
        assert len(self._run(_admin(), manual)) == 3
        filtered = self._run(_admin(), manual, branch_filter=SEOCHO)
        assert [e.entry_id for e in filtered] == ["m2", "n1"]
        assert len(self._run(_admin(), manual, branch_filter="전체")) == 3

    def test_branch_filter_ignored_for_branch_viewer(self):
        manual = [_manual("m1")]
        assert len(self._run(_viewer(), manual, branch_filter=SEOCHO)) == 1

    def test_type_filter(self):
        manual = [_manual("m1"), _manual("e1", type="employee")]
        result = self._run(_viewer(), manual, [_order()], type_filter="employee")
        assert [e.entry_id for e in result] == ["e1"]

    def test_outside_display_range_dropped(self):
        manual = [
            _manual("early", day=date(2025, 3, 31)),
            _manual("prev", day=date(2025, 4, 1)),
            _manual("next", day=date(2025, 6, 30)),
            _manual("late", day=date(2025, 7, 1)),
        ]
        assert [e.entry_id for e in self._run(_viewer(), manual)] == ["prev", "next"]

    def test_multi_day_entry_overlapping_range_kept(self):
        from core.time.clock import KST

        entry = _manual("span", day=date(2025, 3, 30), end=datetime(2025, 4, 2, 18, 0, tzinfo=KST))
        assert [e.entry_id for e in self._run(_viewer(), [entry])] == ["span"]

    def test_utc_entry_sorts_with_derived_entries(self):
        from engines.calendar.models import CalendarEntry

        # 00:30 UTC is 09:30 KST, after the 09:00 pickup
        utc_entry = CalendarEntry(
            entry_id="m_utc", type="material", title="자재",
            start=datetime(2025, 5, 8, 0, 30, tzinfo=timezone.utc), branch_name=GANGNAM,
        )
        ids = [e.entry_id for e in self._run(_viewer(), [utc_entry], [_order("o1")])]
        assert ids == ["pickup_o1", "m_utc"]

    def test_display_range_uses_shop_date(self):
        from engines.calendar.models import CalendarEntry

        # 2025-06-30 20:00 UTC is already 2025-07-01 in KST
        late = CalendarEntry(
            entry_id="late", type="material", title="자재",
            start=datetime(2025, 6, 30, 20, 0, tzinfo=timezone.utc), branch_name=GANGNAM,
        )
        assert self._run(_viewer(), [late]) == []


class TestDayGrouping:
    def test_entries_for_day_covers_span(self):
        from core.time.clock import KST
        from engines.calendar.services import entries_for_day

        entry = _manual(end=datetime(2025, 5, 10, 18, 0, tzinfo=KST))
        assert entries_for_day([entry], date(2025, 5, 9)) == [entry]
        assert entries_for_day([entry], date(2025, 5, 11)) == []

    def test_entries_for_day_uses_shop_date(self):
        from engines.calendar.models import CalendarEntry
        from engines.calendar.services import entries_for_day

        # 2025-05-08 20:00 UTC is 2025-05-09 05:00 KST
        entry = CalendarEntry(
            entry_id="m1", type="material", title="자재",
            start=datetime(2025, 5, 8, 20, 0, tzinfo=timezone.utc), branch_name=GANGNAM,
        )
        assert entries_for_day([entry], date(2025, 5, 9)) == [entry]
        assert entries_for_day([entry], date(2025, 5, 8)) == []

    def test_group_by_day_has_every_day(self):
        from core.time.temporal import month_window
        from engines.calendar.services import group_by_day

        grouped = group_by_day([_manual()], month_window(2025, 5))
        assert len(grouped) == 31
        assert len(grouped[date(2025, 5, 8)]) == 1
        assert grouped[date(2025, 5, 9)] == []


# ══════════════════════════════════════════════════════════════
# EDIT / DELETE RULES
# ══════════════════════════════════════════════════════════════

class TestEditGuards:
    def test_derived_entries_are_read_only(self):
        from core.errors import ImmutableEntryError
        from engines.calendar.services import derive_order_entry, ensure_deletable, ensure_editable

        entry = derive_order_entry(_order())
        with pytest.raises(ImmutableEntryError, match="edit"):
            ensure_editable(entry)
        with pytest.raises(ImmutableEntryError, match="delete"):
            ensure_deletable(entry, _admin())

    def test_payment_entries_are_read_only(self):
        from core.errors import ImmutableEntryError
        from engines.calendar.services import derive_payment_entries, ensure_editable

        entry = derive_payment_entries([_company(10)], 2025, 5)[0]
        with pytest.raises(ImmutableEntryError, match="payment schedule"):
            ensure_editable(entry, _admin())

    def test_admin_changes_anything_manual(self):
        from engines.calendar.services import ensure_deletable, ensure_editable

        entry = _manual(branch=SEOCHO)
        ensure_editable(entry, _admin())
        ensure_deletable(entry, _admin())

    def test_branch_manager_own_branch(self):
        from engines.calendar.services import ensure_deletable

        ensure_deletable(_manual(), _viewer())

    def test_branch_manager_other_branch_denied(self):
        from core.errors import PermissionDeniedError
        from engines.calendar.services import ensure_editable

        with pytest.raises(PermissionDeniedError) as exc:
            ensure_editable(_manual(branch=SEOCHO), _viewer())
        assert exc.value.code == "NOT_BRANCH_MEMBER"

    def test_branch_manager_own_authored_entry_elsewhere(self):
        from engines.calendar.services import ensure_editable

        ensure_editable(_manual(branch=SEOCHO, created_by="u1"), _viewer())

    def test_headquarters_notice_read_only_for_branch(self):
        from core.errors import PermissionDeniedError
        from engines.calendar.services import ensure_deletable

        with pytest.raises(PermissionDeniedError) as exc:
            ensure_deletable(_manual(type="notice", branch="본사"), _viewer())
        assert exc.value.code == "HEADQUARTERS_NOTICE_READ_ONLY"

    def test_other_roles_read_only(self):
        from core.errors import PermissionDeniedError
        from engines.calendar.services import ensure_creatable

        with pytest.raises(PermissionDeniedError):
            ensure_creatable(_viewer(role="직원"))
        ensure_creatable(_viewer())
        ensure_creatable(_admin())

    def test_can_helpers(self):
        from engines.calendar.models import DerivedFromOrder
        from engines.calendar.policies import can_delete_entry, can_edit_entry

        assert can_edit_entry(None, _viewer())
        assert not can_delete_entry(None, _admin())
        assert not can_edit_entry(_manual(origin=DerivedFromOrder("o1")), _admin())
        assert can_delete_entry(_manual(), _viewer())
