"""Payroll Workflows.

State machine definition for the payroll record lifecycle.  Enforcement
lives in ``payroll_services.payroll_state_machine``.

    DRAFT --approve--> APPROVED --finalize--> PAID
      |                   |
      +-------void--------+--------> VOID
"""

from payroll_kernel.domain.workflow import Guard, Transition, Workflow
from payroll_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

EMPLOYER_ADMIN = Guard(
    name="employer_admin",
    description="Actor is an owner or admin of the record's employer",
)

VOID_REASON_GIVEN = Guard(
    name="void_reason_given",
    description="A non-empty reason accompanies the void",
)


# -----------------------------------------------------------------------------
# Payroll Record Workflow
# -----------------------------------------------------------------------------

APPROVE = "approve"
FINALIZE = "finalize"
VOID = "void"

PAYROLL_RECORD_WORKFLOW = Workflow(
    name="payroll_record",
    description="Payroll record lifecycle: draft, approved, paid; void while open",
    initial_state="draft",
    states=("draft", "approved", "paid", "void"),
    transitions=(
        Transition("draft", "approved", action=APPROVE, guard=EMPLOYER_ADMIN),
        Transition("approved", "paid", action=FINALIZE, guard=EMPLOYER_ADMIN),
        Transition("draft", "void", action=VOID, guard=VOID_REASON_GIVEN),
        Transition("approved", "void", action=VOID, guard=VOID_REASON_GIVEN),
    ),
    terminal_states=("paid", "void"),
)

logger.info(
    "payroll_workflow_registered",
    extra={
        "workflow": PAYROLL_RECORD_WORKFLOW.name,
        "states": list(PAYROLL_RECORD_WORKFLOW.states),
        "actions": sorted({t.action for t in PAYROLL_RECORD_WORKFLOW.transitions}),
    },
)
