"""
FOS Core Time — Calendar Helpers
==================================
Pure functions for day and month arithmetic.
All functions take explicit arguments — no hidden clock access.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Tuple

from core.time.clock import business_date


# ══════════════════════════════════════════════════════════════
# DATE WINDOW — Closed interval [start, end] of calendar days
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DateWindow:
    """
    A closed interval of calendar days.

    Invariant: start <= end (enforced at construction).
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"DateWindow start ({self.start}) must be <= end ({self.end})."
            )

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def overlaps(self, start: date, end: date) -> bool:
        return start <= self.end and self.start <= end

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)


# ══════════════════════════════════════════════════════════════
# MONTH ARITHMETIC
# ══════════════════════════════════════════════════════════════

def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """(year, month) moved by delta months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_window(year: int, month: int) -> DateWindow:
    """The full calendar month as a DateWindow."""
    return DateWindow(
        start=date(year, month, 1),
        end=date(year, month, days_in_month(year, month)),
    )


def day_in_month(year: int, month: int, day: int) -> Optional[date]:
    """
    The given day-of-month, or None if the month is too short.
    Never rolls over into the following month.
    """
    if day < 1 or day > days_in_month(year, month):
        return None
    return date(year, month, day)


def covers_day(start: datetime, end: Optional[datetime], day: date) -> bool:
    """
    Whether the span [start, end or start] touches the given shop-local
    (KST) day. Both instants must be timezone-aware.
    """
    last = end if end is not None else start
    return business_date(start) <= day <= business_date(last)
