"""
FOS Loyalty Engine — Commands
=============================
Customer point account and redemption request as received from
order entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.errors import ValidationError


@dataclass(frozen=True)
class LoyaltyAccount:
    """A customer's point balance (never negative)."""
    customer_id: str
    balance: int = 0

    def __post_init__(self):
        if not self.customer_id:
            raise ValidationError("customer_id", "must be non-empty.")
        if isinstance(self.balance, bool) or not isinstance(self.balance, int):
            raise ValidationError("balance", "must be int.")
        if self.balance < 0:
            raise ValidationError("balance", f"must be >= 0, got {self.balance}.")


@dataclass(frozen=True)
class PointInputs:
    """
    Points part of an order entry.

    account is None for anonymous orders or when no customer was
    picked; requested is whatever was typed (clamped later).
    """
    account: Optional[LoyaltyAccount] = None
    requested: int = 0

    @property
    def customer_selected(self) -> bool:
        return self.account is not None

    @property
    def balance(self) -> int:
        return self.account.balance if self.account is not None else 0
