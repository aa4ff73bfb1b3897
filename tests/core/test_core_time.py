"""
FOS Core Time — Test Suite
============================
Tests for: clocks, business dates, month arithmetic, day membership.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

NOW = datetime(2025, 5, 8, 12, 0, 0, tzinfo=timezone.utc)


class TestClock:
    def test_fixed_clock_returns_fixed_time(self):
        from core.time.clock import FixedClock

        clock = FixedClock(NOW)
        assert clock.now_utc() == NOW
        assert clock.now_utc() == NOW

    def test_fixed_clock_advance(self):
        from core.time.clock import FixedClock

        clock = FixedClock(NOW)
        clock.advance(3600)
        assert clock.now_utc() == NOW + timedelta(hours=1)

    def test_fixed_clock_rejects_naive(self):
        from core.time.clock import FixedClock

        with pytest.raises(ValueError, match="timezone-aware"):
            FixedClock(datetime(2025, 5, 8))

    def test_system_clock_is_aware(self):
        from core.time.clock import SystemClock

        assert SystemClock().now_utc().tzinfo is not None


class TestBusinessDate:
    def test_late_utc_evening_is_next_kst_day(self):
        from core.time.clock import business_date

        instant = datetime(2025, 5, 8, 16, 30, tzinfo=timezone.utc)
        assert business_date(instant) == date(2025, 5, 9)

    def test_naive_rejected(self):
        from core.time.clock import business_date

        with pytest.raises(ValueError):
            business_date(datetime(2025, 5, 8))


class TestMonthArithmetic:
    def test_days_in_month(self):
        from core.time.temporal import days_in_month

        assert days_in_month(2025, 4) == 30
        assert days_in_month(2025, 2) == 28
        assert days_in_month(2024, 2) == 29

    def test_shift_month_across_years(self):
        from core.time.temporal import shift_month

        assert shift_month(2025, 1, -1) == (2024, 12)
        assert shift_month(2025, 12, 1) == (2026, 1)
        assert shift_month(2025, 6, 0) == (2025, 6)

    def test_day_in_month_never_rolls_over(self):
        from core.time.temporal import day_in_month

        assert day_in_month(2025, 4, 31) is None
        assert day_in_month(2025, 5, 31) == date(2025, 5, 31)
        assert day_in_month(2025, 2, 29) is None
        assert day_in_month(2025, 5, 0) is None

    def test_month_window(self):
        from core.time.temporal import month_window

        window = month_window(2025, 4)
        assert window.start == date(2025, 4, 1)
        assert window.end == date(2025, 4, 30)
        assert len(list(window.days())) == 30


class TestDateWindow:
    def test_start_after_end_rejected(self):
        from core.time.temporal import DateWindow

        with pytest.raises(ValueError, match="must be <="):
            DateWindow(date(2025, 5, 2), date(2025, 5, 1))

    def test_contains_is_inclusive(self):
        from core.time.temporal import DateWindow

        window = DateWindow(date(2025, 5, 1), date(2025, 5, 31))
        assert window.contains(date(2025, 5, 1))
        assert window.contains(date(2025, 5, 31))
        assert not window.contains(date(2025, 6, 1))

    def test_overlaps(self):
        from core.time.temporal import DateWindow

        window = DateWindow(date(2025, 5, 1), date(2025, 5, 31))
        assert window.overlaps(date(2025, 4, 30), date(2025, 5, 1))
        assert not window.overlaps(date(2025, 6, 1), date(2025, 6, 2))


class TestCoversDay:
    def test_single_day_entry(self):
        from core.time.clock import KST
        from core.time.temporal import covers_day

        start = datetime(2025, 5, 8, 9, 0, tzinfo=KST)
        assert covers_day(start, None, date(2025, 5, 8))
        assert not covers_day(start, None, date(2025, 5, 9))

    def test_multi_day_entry(self):
        from core.time.clock import KST
        from core.time.temporal import covers_day

        start = datetime(2025, 5, 8, 9, 0, tzinfo=KST)
        end = datetime(2025, 5, 10, 18, 0, tzinfo=KST)
        assert covers_day(start, end, date(2025, 5, 9))
        assert covers_day(start, end, date(2025, 5, 10))
        assert not covers_day(start, end, date(2025, 5, 7))

    def test_utc_evening_counts_as_next_shop_day(self):
        from core.time.temporal import covers_day

        # 2025-05-08 20:00 UTC is 2025-05-09 05:00 KST
        start = datetime(2025, 5, 8, 20, 0, tzinfo=timezone.utc)
        assert covers_day(start, None, date(2025, 5, 9))
        assert not covers_day(start, None, date(2025, 5, 8))

    def test_naive_instant_rejected(self):
        from core.time.temporal import covers_day

        with pytest.raises(ValueError):
            covers_day(datetime(2025, 5, 8, 9, 0), None, date(2025, 5, 8))
