"""
FOS Workflow Primitive — Generic State Machine
==============================================
Deterministic state machine used by engines that track lifecycle state.

Used by:
    Outsource Engine — Partner orders (pending → accepted → completed | canceled)
    Orders Engine    — Order status (processing → completed | canceled)

RULES (NON-NEGOTIABLE):
- State transitions are deterministic (same input → same output)
- Invalid transitions REJECTED — no silent state skips
- Terminal states accept no further transitions
- State machine definition is immutable (frozen)

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, FrozenSet, Optional

from core.errors import InvalidStateTransitionError


# ══════════════════════════════════════════════════════════════
# TRANSITION RECORD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StateTransition:
    """An immutable record of a single state transition."""
    from_state: str
    to_state: str
    transitioned_at: datetime
    actor_id: Optional[str] = None
    reason: str = ""

    def __post_init__(self):
        if not self.from_state or not isinstance(self.from_state, str):
            raise ValueError("from_state must be non-empty string.")
        if not self.to_state or not isinstance(self.to_state, str):
            raise ValueError("to_state must be non-empty string.")

    def to_dict(self) -> dict:
        return {
            "from_state": self.from_state,
            "to_state": self.to_state,
            "transitioned_at": self.transitioned_at.isoformat(),
            "actor_id": self.actor_id,
            "reason": self.reason,
        }


# ══════════════════════════════════════════════════════════════
# WORKFLOW DEFINITION (state machine schema)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class WorkflowDefinition:
    """
    Defines the valid states and transitions for a workflow type.

    Fields:
        name:            Identifier for this workflow type (e.g. "OutsourceOrder")
        initial_state:   Starting state for all new instances
        terminal_states: States from which no further transitions are allowed
        transitions:     Dict of {from_state → frozenset(allowed_to_states)}
    """
    name: str
    initial_state: str
    terminal_states: FrozenSet[str]
    transitions: Dict[str, FrozenSet[str]]

    def __post_init__(self):
        if not self.name:
            raise ValueError("Workflow name must be non-empty.")
        if not self.initial_state:
            raise ValueError("initial_state must be non-empty.")
        if self.initial_state not in self.transitions:
            raise ValueError(
                f"initial_state '{self.initial_state}' not in transitions."
            )

    @property
    def states(self) -> FrozenSet[str]:
        return frozenset(self.transitions)

    def is_valid_transition(self, from_state: str, to_state: str) -> bool:
        allowed = self.transitions.get(from_state, frozenset())
        return to_state in allowed

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal_states

    def allowed_next_states(self, from_state: str) -> FrozenSet[str]:
        return self.transitions.get(from_state, frozenset())

    def transition(
        self,
        from_state: str,
        to_state: str,
        at: datetime,
        actor_id: Optional[str] = None,
        reason: str = "",
    ) -> StateTransition:
        """
        Validate a transition and return its record.
        Raises InvalidStateTransitionError for terminal or undeclared moves.
        """
        if self.is_terminal(from_state) or not self.is_valid_transition(
            from_state, to_state
        ):
            raise InvalidStateTransitionError(
                self.name, from_state, to_state,
                self.allowed_next_states(from_state),
            )
        return StateTransition(
            from_state=from_state,
            to_state=to_state,
            transitioned_at=at,
            actor_id=actor_id,
            reason=reason,
        )


# ══════════════════════════════════════════════════════════════
# FOS WORKFLOW DEFINITIONS
# ══════════════════════════════════════════════════════════════

OUTSOURCE_ORDER_WORKFLOW = WorkflowDefinition(
    name="OutsourceOrder",
    initial_state="pending",
    terminal_states=frozenset({"completed", "canceled"}),
    transitions={
        "pending": frozenset({"accepted", "canceled"}),
        "accepted": frozenset({"completed", "canceled"}),
        "completed": frozenset(),
        "canceled": frozenset(),
    },
)

ORDER_STATUS_WORKFLOW = WorkflowDefinition(
    name="Order",
    initial_state="processing",
    terminal_states=frozenset({"completed", "canceled"}),
    transitions={
        "processing": frozenset({"completed", "canceled"}),
        "completed": frozenset(),
        "canceled": frozenset(),
    },
)
