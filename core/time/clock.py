"""
FOS Core Time — Explicit Clock Protocol
=========================================
Doctrine: NO datetime.now() inside engine logic.
Services that stamp records (payment completion, cost entry,
outsource transitions) receive a Clock.

Business dates are Korea Standard Time. Revenue lands on the
KST calendar date of the instant, not the UTC date.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol

KST = timezone(timedelta(hours=9), name="KST")


# ══════════════════════════════════════════════════════════════
# CLOCK PROTOCOL
# ══════════════════════════════════════════════════════════════

class Clock(Protocol):
    """Injectable time source."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IMPLEMENTATIONS
# ══════════════════════════════════════════════════════════════

class SystemClock:
    """Production clock — real system time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Test clock — returns a fixed timestamp.

    Usage:
        clock = FixedClock(datetime(2025, 5, 8, tzinfo=timezone.utc))
        assert clock.now_utc().month == 5
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def advance(self, seconds: float) -> None:
        self._fixed_dt = self._fixed_dt + timedelta(seconds=seconds)


# ══════════════════════════════════════════════════════════════
# BUSINESS DATE
# ══════════════════════════════════════════════════════════════

def business_date(instant: datetime) -> date:
    """Calendar date of an instant in shop-local time (KST)."""
    if instant.tzinfo is None:
        raise ValueError("business_date requires timezone-aware datetime.")
    return instant.astimezone(KST).date()
