"""
payroll_services -- Package init and public API.

Responsibility:
    Stateful orchestration services that compose the pure payroll engines
    and module calculators with database sessions: run creation, record
    lifecycle enforcement and employer authority checks.

Architecture position:
    Services -- stateful orchestration over engines + modules + kernel.

    Dependency direction:
        payroll_services/ -> payroll_engines/  (allowed)
        payroll_services/ -> payroll_kernel/   (allowed)
        payroll_engines/  -> payroll_services/ (FORBIDDEN)
        payroll_kernel/   -> payroll_services/ (FORBIDDEN)

Invariants enforced:
    - Flush-only: no service in this package commits.

Failure modes:
    - ImportError at startup if a service's dependency graph is broken.
"""

from payroll_kernel.logging_config import get_logger

logger = get_logger("services")

from payroll_services.employer_authority import is_authorized, require_authorized
from payroll_services.payroll_run_orchestrator import PayrollRunOrchestrator
from payroll_services.payroll_state_machine import (
    PayrollRunStateMachine,
    derive_run_status,
)

__all__ = [
    "PayrollRunOrchestrator",
    "PayrollRunStateMachine",
    "derive_run_status",
    "is_authorized",
    "require_authorized",
]
