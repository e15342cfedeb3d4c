"""
Canonical workflow types (``payroll_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects describing lifecycle state machines.  The payroll record
lifecycle is declared once with these types and the state machine service
enforces it.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* Terminal states have no outgoing transitions.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the condition -- the state machine does.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a document lifecycle.

    Contract: frozen; validated at construction.
    Guarantees: ``source_states(action)`` lists every state from which
    ``action`` is legal, ``target_state(action)`` the state it leads to.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow {self.name}: initial state {self.initial_state} not in states"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow {self.name}: transition {t.action} references unknown state"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"Workflow {self.name}: terminal state {t.from_state} has outgoing "
                    f"transition {t.action}"
                )
        actions: dict[str, set[str]] = {}
        for t in self.transitions:
            actions.setdefault(t.action, set()).add(t.to_state)
        for action, to_states in actions.items():
            if len(to_states) != 1:
                raise ValueError(
                    f"Workflow {self.name}: action {action} leads to several states"
                )

    def source_states(self, action: str) -> tuple[str, ...]:
        return tuple(t.from_state for t in self.transitions if t.action == action)

    def target_state(self, action: str) -> str:
        for t in self.transitions:
            if t.action == action:
                return t.to_state
        raise KeyError(f"Workflow {self.name} has no action {action}")

    def transition(self, action: str, from_state: str) -> Transition | None:
        for t in self.transitions:
            if t.action == action and t.from_state == from_state:
                return t
        return None
