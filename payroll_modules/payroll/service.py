"""
Payroll Service (``payroll_modules.payroll.service``).

Responsibility
--------------
The public surface of the payroll engine: calculate one employee's pay,
create payroll runs, move records through approve / finalize / void, and
read employer summaries, employee history and runs.

Architecture position
---------------------
**Modules layer** -- service facade.  Delegates run creation to
``PayrollRunOrchestrator``, lifecycle transitions to
``PayrollRunStateMachine`` and reads to ``PayrollSelector``.

Invariants enforced
-------------------
* Transaction boundary owned by ``PayrollService``: writes commit on
  success and roll back on any exception.  The employer lock taken by run
  creation is therefore held until this commit.
* Read methods never write.

Failure modes
-------------
All failures surface as typed ``PayrollKernelError`` subclasses (see
``payroll_kernel.exceptions``); nothing is silently corrected.

Audit relevance
---------------
Every persisted record carries the tax table version it was calculated
with, and every lifecycle transition leaves an audit row.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from payroll_config import get_tax_tables
from payroll_engines.gross_pay import HoursWorked
from payroll_engines.periods import PayFrequency
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_modules.payroll.calculator import EmployeePayCalculator
from payroll_modules.payroll.config import PayrollConfig
from payroll_modules.payroll.models import (
    EmployeePayrollHistory,
    PayBreakdown,
    PayInputs,
    PayPeriod,
    PayrollRecord,
    PayrollRun,
    PayrollRunResult,
    PayrollSummary,
)
from payroll_modules.payroll.selectors import PayrollSelector
from payroll_services.payroll_run_orchestrator import PayrollRunOrchestrator
from payroll_services.payroll_state_machine import PayrollRunStateMachine

logger = get_logger("modules.payroll.service")


class PayrollService:
    """
    Orchestrates payroll operations through engines, selectors and services.

    Contract
    --------
    * ``calculate_employee_pay`` is a dry run: nothing is persisted.
    * ``create_payroll_run`` returns a ``PayrollRunResult`` that reports
      partial success (created and failed employees) rather than hiding it.
    * Lifecycle methods return the ``PayrollRecord`` after the transition.

    Guarantees
    ----------
    * Session is committed only when the operation succeeds; otherwise it
      is rolled back and the error re-raised.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT authenticate users; ``actor_id`` is trusted as given.
    * Does NOT move money (no ACH).
    """

    def __init__(
        self,
        session: Session,
        config: PayrollConfig | None = None,
        clock: Clock | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or PayrollConfig.with_defaults()

        self._selector = PayrollSelector(session)
        self._calculator = EmployeePayCalculator(self._config)
        self._orchestrator = PayrollRunOrchestrator(
            session, config=self._config, clock=self._clock,
        )
        self._state_machine = PayrollRunStateMachine(session, clock=self._clock)

    # =========================================================================
    # Calculation
    # =========================================================================

    def calculate_employee_pay(
        self,
        employee_id: UUID,
        period_start: date,
        period_end: date,
        hours: HoursWorked | None = None,
        bonuses: Decimal = Decimal("0"),
        commissions: Decimal = Decimal("0"),
        payment_date: date | None = None,
        pay_frequency: PayFrequency | None = None,
    ) -> PayBreakdown:
        """
        Gross-to-net for one employee, using year-to-date totals from PAID
        records of the same tax year that start before ``period_start``.
        """
        period = PayPeriod(start=period_start, end=period_end, payment_date=payment_date)
        inputs = PayInputs(hours=hours, bonuses=bonuses, commissions=commissions)

        with LogContext.bind(employee_id=employee_id):
            employee = self._selector.get_employee(employee_id)
            ytd = self._selector.ytd_totals(employee.id, period.tax_year, period.start)
            tables = get_tax_tables(
                period.tax_year,
                jurisdiction=self._config.tax_jurisdiction,
                config_dir=self._config.tax_config_dir,
                as_of=period.effective_payment_date,
            )
            return self._calculator.calculate(
                employee, period, inputs, ytd, tables, pay_frequency=pay_frequency,
            )

    # =========================================================================
    # Payroll runs
    # =========================================================================

    def create_payroll_run(
        self,
        employer_id: UUID,
        period_start: date,
        period_end: date,
        payment_date: date | None,
        actor_id: UUID,
        employee_ids: list[UUID] | None = None,
        inputs: Mapping[UUID, PayInputs] | None = None,
        pay_frequency: PayFrequency | None = None,
    ) -> PayrollRunResult:
        """
        Create DRAFT records for every eligible employee of the employer.

        ``inputs`` maps employee id to hours, bonuses and commissions; hourly
        employees without an entry fail individually with MISSING_HOURS.
        """
        try:
            result = self._orchestrator.create_run(
                employer_id=employer_id,
                period_start=period_start,
                period_end=period_end,
                actor_id=actor_id,
                payment_date=payment_date,
                employee_ids=employee_ids,
                inputs=inputs,
                pay_frequency=pay_frequency,
            )
            self._session.commit()
            return result
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def approve_payroll(self, record_id: UUID, actor_id: UUID) -> PayrollRecord:
        try:
            record = self._state_machine.approve(record_id, actor_id)
            self._session.commit()
            return record
        except Exception:
            self._session.rollback()
            raise

    def finalize_payroll(self, record_id: UUID, actor_id: UUID) -> PayrollRecord:
        try:
            record = self._state_machine.finalize(record_id, actor_id)
            self._session.commit()
            return record
        except Exception:
            self._session.rollback()
            raise

    def void_payroll(self, record_id: UUID, actor_id: UUID, reason: str) -> PayrollRecord:
        try:
            record = self._state_machine.void(record_id, actor_id, reason)
            self._session.commit()
            return record
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Queries
    # =========================================================================

    def get_payroll_summary(
        self,
        employer_id: UUID,
        period_start: date,
        period_end: date,
    ) -> PayrollSummary:
        return self._selector.payroll_summary(employer_id, period_start, period_end)

    def get_employee_payroll_history(
        self,
        employee_id: UUID,
        year: int | None = None,
    ) -> EmployeePayrollHistory:
        self._selector.get_employee(employee_id)
        return self._selector.employee_history(employee_id, year)

    def get_run(self, run_id: UUID) -> PayrollRun:
        return self._selector.get_run(run_id)

    def get_record(self, record_id: UUID) -> PayrollRecord:
        return self._selector.get_record(record_id)
