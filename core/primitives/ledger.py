"""
FOS Ledger Primitive — Expense Ledger Entries
===============================================
The expense ledger is append-only and owned by the surrounding
system. Engines describe what to post; an injected ExpenseLedger
performs the write.

RULES (NON-NEGOTIABLE):
- Expense amounts are integer currency units, >= 0
- Entries are immutable once created
- Every entry carries a source_ref so a wiring can detect re-posts

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Protocol

from core.primitives.money import require_money


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class ExpenseCategory(Enum):
    """Expense classifications used by the branch expense book."""
    MATERIAL = "material"
    TRANSPORT = "transport"
    OFFICE = "office"
    MAINTENANCE = "maintenance"
    INSURANCE = "insurance"
    UTILITIES = "utilities"
    MEAL = "meal"
    MARKETING = "marketing"
    OTHER = "other"


# ══════════════════════════════════════════════════════════════
# EXPENSE ENTRY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ExpenseEntry:
    """
    A single expense posting.

    Fields:
        category:    ExpenseCategory
        supplier:    Who was paid (carrier, partner, vendor)
        amount:      Integer currency units
        branch_name: Branch whose books carry the expense
        description: Free text shown in the expense list
        source_ref:  Stable reference to the originating record
                     (e.g. "delivery-cost:<order_id>")
        recorded_at: When the expense was recorded
        sub_category: Optional finer classification
    """
    category: ExpenseCategory
    supplier: str
    amount: int
    branch_name: str
    description: str
    source_ref: str
    recorded_at: datetime
    sub_category: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.category, ExpenseCategory):
            raise ValueError("category must be ExpenseCategory enum.")
        if not self.supplier or not isinstance(self.supplier, str):
            raise ValueError("supplier must be a non-empty string.")
        require_money(self.amount, "amount")
        if not self.source_ref:
            raise ValueError("source_ref must be non-empty.")

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "sub_category": self.sub_category,
            "supplier": self.supplier,
            "amount": self.amount,
            "branch_name": self.branch_name,
            "description": self.description,
            "source_ref": self.source_ref,
            "recorded_at": self.recorded_at.isoformat(),
        }


# ══════════════════════════════════════════════════════════════
# LEDGER PROTOCOL
# ══════════════════════════════════════════════════════════════

class ExpenseLedger(Protocol):
    """Append-only expense sink provided by the surrounding system."""

    def append(self, entry: ExpenseEntry) -> None:
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IN-MEMORY LEDGER (for testing / bootstrap)
# ══════════════════════════════════════════════════════════════

class InMemoryExpenseLedger:
    """
    In-memory expense book.

    append() never dedupes. replace_for_source() drops earlier
    postings with the same source_ref before appending, which is
    how a wiring makes re-entered costs overwrite instead of
    double-posting.
    """

    def __init__(self) -> None:
        self._entries: List[ExpenseEntry] = []

    def append(self, entry: ExpenseEntry) -> None:
        self._entries.append(entry)

    def replace_for_source(self, entry: ExpenseEntry) -> None:
        self._entries = [
            e for e in self._entries if e.source_ref != entry.source_ref
        ]
        self._entries.append(entry)

    def entries_for(self, source_ref: str) -> List[ExpenseEntry]:
        return [e for e in self._entries if e.source_ref == source_ref]

    def total_by_category(self) -> Dict[ExpenseCategory, int]:
        totals: Dict[ExpenseCategory, int] = {}
        for e in self._entries:
            totals[e.category] = totals.get(e.category, 0) + e.amount
        return totals

    @property
    def entries(self) -> List[ExpenseEntry]:
        return list(self._entries)
