"""
FOS Discount Engine — Commands
==============================
The discount choice arriving from order entry.

The entry screens offer tier buttons and a free-form rate box that
clear each other. The engine still receives both numbers, so the
call boundary turns them into exactly one DiscountSelection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from core.errors import ValidationError
from core.primitives.money import Rate, require_money
from engines.discount.policies import custom_rate_range_policy

MAX_CUSTOM_RATE = 50


@dataclass(frozen=True)
class TierSelection:
    """A configured tier button was pressed."""
    rate: int

    def __post_init__(self):
        if not 0 <= self.rate <= 100:
            raise ValidationError("rate", f"tier rate must be 0-100, got {self.rate}.")


@dataclass(frozen=True)
class CustomSelection:
    """A rate was typed by hand. Clamped to [0, 50] on resolution."""
    rate: Rate


@dataclass(frozen=True)
class NoSelection:
    """No discount chosen."""


DiscountSelection = Union[TierSelection, CustomSelection, NoSelection]

NO_SELECTION = NoSelection()


def selection_from_inputs(selected_rate: Rate = 0, custom_rate: Rate = 0) -> DiscountSelection:
    """Tier wins if nonzero, else custom if nonzero, else none."""
    if selected_rate and selected_rate > 0:
        return TierSelection(rate=int(selected_rate))
    if custom_rate:
        return CustomSelection(rate=custom_rate)
    return NO_SELECTION


@dataclass(frozen=True)
class ResolveDiscountRequest:
    """
    Strict discount request for callers that validate before resolving.
    A hand-typed rate outside [0, 50] is rejected instead of clamped.
    """
    branch_id: str
    subtotal: int
    selection: DiscountSelection = NO_SELECTION

    def __post_init__(self):
        if not self.branch_id:
            raise ValidationError("branch_id", "must be non-empty.")
        require_money(self.subtotal, "subtotal")
        if isinstance(self.selection, CustomSelection):
            rejection = custom_rate_range_policy(self.selection.rate, MAX_CUSTOM_RATE)
            if rejection is not None:
                raise ValidationError(
                    "rate",
                    f"custom rate must be 0-{MAX_CUSTOM_RATE}, "
                    f"got {self.selection.rate}.",
                )
