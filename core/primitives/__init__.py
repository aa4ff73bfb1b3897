"""
FOS Core Primitives — Reusable Business Building Blocks
========================================================
Shared, engine-agnostic building blocks consumed by all FOS engines.

- Pure Python
- Immutable (frozen dataclasses)
- Deterministic (same input → same output)

Primitives:
    money     — Integer currency arithmetic (floor percentages, clamping)
    ledger    — Expense ledger entries and the ExpenseLedger protocol
    workflow  — Generic state machine with terminal states
"""

from core.primitives.ledger import (
    ExpenseCategory,
    ExpenseEntry,
    ExpenseLedger,
    InMemoryExpenseLedger,
)
from core.primitives.money import clamp, floor_percent, require_money
from core.primitives.workflow import (
    ORDER_STATUS_WORKFLOW,
    OUTSOURCE_ORDER_WORKFLOW,
    StateTransition,
    WorkflowDefinition,
)

__all__ = [
    "ExpenseCategory",
    "ExpenseEntry",
    "ExpenseLedger",
    "InMemoryExpenseLedger",
    "clamp",
    "floor_percent",
    "require_money",
    "ORDER_STATUS_WORKFLOW",
    "OUTSOURCE_ORDER_WORKFLOW",
    "StateTransition",
    "WorkflowDefinition",
]
