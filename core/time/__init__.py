"""
FOS Core Time — Public API
============================
Explicit clock protocol and calendar helpers.
Doctrine: NO datetime.now() in engine logic.
"""

from core.time.clock import (
    KST,
    Clock,
    FixedClock,
    SystemClock,
    business_date,
)
from core.time.temporal import (
    DateWindow,
    covers_day,
    day_in_month,
    days_in_month,
    month_window,
    shift_month,
)

__all__ = [
    "KST",
    "Clock",
    "FixedClock",
    "SystemClock",
    "business_date",
    "DateWindow",
    "covers_day",
    "day_in_month",
    "days_in_month",
    "month_window",
    "shift_month",
]
