"""
Front Office Workflow Primitive — Declarative State Machine
===========================================================
Engine: Core Primitives

The transition table an aggregate's lifecycle is checked against.
WorkOrder declares its table with this primitive; the aggregate
owns the current state and the history, the definition only says
what is allowed.

RULES (NON-NEGOTIABLE):
- State transitions are deterministic (same input → same output)
- Invalid transitions are REJECTED by the caller, no silent skips
- Every applied transition is recorded with a timestamp
- State machine definition is immutable (frozen)
- States may be any hashable value (enum members in practice)

This file contains NO persistence logic.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, Hashable


def _state_name(state: Hashable) -> str:
    return str(getattr(state, "value", state))


# ══════════════════════════════════════════════════════════════
# TRANSITION RECORD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StateTransition:
    """
    An immutable record of a single state transition.
    """
    from_state: Hashable
    to_state: Hashable
    transitioned_at: datetime
    reason: str = ""
    transition_id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        if self.from_state is None:
            raise ValueError("from_state must be set.")
        if self.to_state is None:
            raise ValueError("to_state must be set.")
        if not isinstance(self.transitioned_at, datetime):
            raise TypeError("transitioned_at must be datetime.")

    def to_dict(self) -> dict:
        return {
            "transition_id": str(self.transition_id),
            "from_state": _state_name(self.from_state),
            "to_state": _state_name(self.to_state),
            "transitioned_at": self.transitioned_at.isoformat(),
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
        name:            Identifier for this workflow type (e.g. "WorkOrder")
        initial_state:   Starting state for all new instances
        terminal_states: States considered final for reporting; a
                         terminal state may still list outgoing edges
        transitions:     Dict of {from_state → frozenset(allowed_to_states)}
    """
    name: str
    initial_state: Hashable
    terminal_states: FrozenSet[Hashable]
    transitions: Dict[Hashable, FrozenSet[Hashable]]

    def __post_init__(self):
        if not self.name:
            raise ValueError("Workflow name must be non-empty.")
        if self.initial_state is None:
            raise ValueError("initial_state must be set.")
        if self.initial_state not in self.transitions:
            raise ValueError(
                f"initial_state '{_state_name(self.initial_state)}' "
                f"not in transitions."
            )
        for source, targets in self.transitions.items():
            unknown = [t for t in targets if t not in self.transitions]
            if unknown:
                raise ValueError(
                    f"Transition from '{_state_name(source)}' targets "
                    f"undeclared states: {sorted(map(_state_name, unknown))}."
                )
        for state in self.terminal_states:
            if state not in self.transitions:
                raise ValueError(
                    f"terminal state '{_state_name(state)}' not in transitions."
                )

    @property
    def states(self) -> FrozenSet[Hashable]:
        return frozenset(self.transitions)

    def is_valid_transition(self, from_state: Hashable, to_state: Hashable) -> bool:
        """Check if a transition is allowed by this definition."""
        allowed = self.transitions.get(from_state, frozenset())
        return to_state in allowed

    def is_terminal(self, state: Hashable) -> bool:
        return state in self.terminal_states

    def allowed_next_states(self, from_state: Hashable) -> FrozenSet[Hashable]:
        return self.transitions.get(from_state, frozenset())

    def sources_of(self, to_state: Hashable) -> FrozenSet[Hashable]:
        """All states from which to_state is reachable in one step."""
        return frozenset(
            source
            for source, targets in self.transitions.items()
            if to_state in targets
        )
