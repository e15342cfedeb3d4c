"""
Payroll Module (``payroll_modules.payroll``).

Responsibility
--------------
Employees, pay periods, gross-to-net calculation, payroll records and runs,
and the record lifecycle workflow.

Architecture position
---------------------
**Modules layer** -- DTO models, ORM models, workflow definition, config
schema, selectors, the pure ``EmployeePayCalculator`` and the
``PayrollService`` facade (import it from ``payroll_modules.payroll.service``).

Invariants enforced
-------------------
* Money is ``Decimal`` rounded half-up to cents.
* ``net_pay == total_gross - sum(deductions)``.
* Records move only along ``PAYROLL_RECORD_WORKFLOW``.

Audit relevance
---------------
Payroll records are tax-critical.  Each one stores the tax table version
used to compute it; transitions are kept in an append-only audit table.
"""

from payroll_modules.payroll.calculator import EmployeePayCalculator
from payroll_modules.payroll.config import PayrollConfig
from payroll_modules.payroll.models import (
    DeductionItem,
    DeductionType,
    Employee,
    EmployeePayrollHistory,
    EmployeeStatus,
    FilingStatus,
    MemberRole,
    PayBreakdown,
    PayInputs,
    PayPeriod,
    PayrollRecord,
    PayrollRun,
    PayrollRunResult,
    PayrollRunStatus,
    PayrollStatus,
    PayrollSummary,
    PayrollSummaryLine,
    RunFailure,
    WithholdingProfile,
    YTDTotals,
)
from payroll_modules.payroll.workflows import PAYROLL_RECORD_WORKFLOW

__all__ = [
    "DeductionItem",
    "DeductionType",
    "Employee",
    "EmployeePayCalculator",
    "EmployeePayrollHistory",
    "EmployeeStatus",
    "FilingStatus",
    "MemberRole",
    "PAYROLL_RECORD_WORKFLOW",
    "PayBreakdown",
    "PayInputs",
    "PayPeriod",
    "PayrollConfig",
    "PayrollRecord",
    "PayrollRun",
    "PayrollRunResult",
    "PayrollRunStatus",
    "PayrollStatus",
    "PayrollSummary",
    "PayrollSummaryLine",
    "RunFailure",
    "WithholdingProfile",
    "YTDTotals",
]
