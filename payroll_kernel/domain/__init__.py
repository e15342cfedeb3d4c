"""
Pure domain layer.

Value objects with NO dependencies on the ORM, the database or I/O, except
SystemClock, which is the one sanctioned source of wall-clock time.
"""

from payroll_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from payroll_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "Guard",
    "Transition",
    "Workflow",
]
