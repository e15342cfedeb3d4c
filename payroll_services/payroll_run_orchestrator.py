"""
payroll_services.payroll_run_orchestrator -- Batch creation of payroll runs.

Responsibility:
    Creates one payroll run for an employer and a period: one DRAFT record
    (with deduction items) per eligible employee.  Employees that cannot be
    calculated are recorded as run failures and skipped; the rest of the run
    proceeds.

Architecture position:
    Services -- stateful orchestration over engines + modules.
    Composes ``PayrollSelector`` (reads), ``EmployeePayCalculator`` (pure
    gross-to-net) and ``get_tax_tables`` (configuration).  Called by
    ``PayrollService.create_payroll_run``.

Invariants enforced:
    - No overlap: a new run is refused when any DRAFT or APPROVED record of
      the same employer intersects the requested period.
    - Serialization: the employer row is locked (``SELECT ... FOR UPDATE``)
      before the overlap check and stays locked until the caller commits,
      so two concurrent runs for one employer cannot both pass the check.
    - Per-employee atomicity: each record and its deduction items are
      written inside a SAVEPOINT.  A failure rolls back that employee only.
    - Flush-only: the caller owns commit and rollback.

Failure modes:
    - InvalidPayPeriodError: period ends before it starts.
    - EmployerNotFoundError: no such employer.
    - NoEligibleEmployeesError: no ACTIVE employee matches the request.
    - OverlappingRunError: an open record already covers part of the period.
    - TaxTableNotFoundError: no tax tables for the payment year.

Audit relevance:
    Every run persists its failures (employee, error code, message) next to
    the created records, so a partial run is visible after the fact.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from payroll_config import get_tax_tables
from payroll_engines.periods import PayFrequency
from payroll_kernel.domain.clock import Clock
from payroll_kernel.exceptions import (
    EmployerNotFoundError,
    NoEligibleEmployeesError,
    OverlappingRunError,
    PayrollKernelError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_kernel.services.base import BaseService
from payroll_modules.payroll.calculator import EmployeePayCalculator
from payroll_modules.payroll.config import PayrollConfig
from payroll_modules.payroll.models import (
    PayInputs,
    PayPeriod,
    PayrollRunResult,
    PayrollRunStatus,
    RunFailure,
)
from payroll_modules.payroll.orm import (
    EmployerModel,
    PayrollRecordModel,
    PayrollRunFailureModel,
    PayrollRunModel,
)
from payroll_modules.payroll.selectors import PayrollSelector

logger = get_logger("services.payroll_run_orchestrator")

_NO_INPUTS = PayInputs()


class PayrollRunOrchestrator(BaseService):
    """
    Creates payroll runs.

    Contract:
        ``create_run`` either raises before anything is written, or returns a
        ``PayrollRunResult`` describing a persisted run (possibly with
        failures).

    Guarantees:
        - ``result.created + result.failed`` equals the number of eligible
          employees.
        - The run row and all created records share one transaction.

    Non-goals:
        - Does NOT commit.
        - Does NOT retry failed employees.
    """

    def __init__(
        self,
        session: Session,
        config: PayrollConfig | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self.config = config or PayrollConfig.with_defaults()
        self._calculator = EmployeePayCalculator(self.config)
        self._selector = PayrollSelector(session)

    def create_run(
        self,
        employer_id: UUID,
        period_start: date,
        period_end: date,
        actor_id: UUID,
        payment_date: date | None = None,
        employee_ids: list[UUID] | None = None,
        inputs: Mapping[UUID, PayInputs] | None = None,
        pay_frequency: PayFrequency | None = None,
    ) -> PayrollRunResult:
        period = PayPeriod(start=period_start, end=period_end, payment_date=payment_date)
        inputs = inputs or {}

        with LogContext.bind(employer_id=employer_id, actor_id=actor_id):
            self._lock_employer(employer_id)

            employees = self._selector.list_active_employees(employer_id, employee_ids)
            if not employees:
                logger.warning(
                    "payroll_run_no_eligible_employees",
                    extra={
                        "requested": len(employee_ids) if employee_ids else None,
                    },
                )
                raise NoEligibleEmployeesError(employer_id=str(employer_id))

            existing = self._selector.find_overlapping_open_record(
                employer_id, period.start, period.end,
            )
            if existing is not None:
                logger.warning(
                    "payroll_run_overlap_rejected",
                    extra={
                        "period_start": period.start.isoformat(),
                        "period_end": period.end.isoformat(),
                        "existing_record_id": str(existing.id),
                        "existing_status": existing.status.value,
                    },
                )
                raise OverlappingRunError(
                    employer_id=str(employer_id),
                    period_start=period.start.isoformat(),
                    period_end=period.end.isoformat(),
                    existing_record_id=str(existing.id),
                    existing_start=existing.period_start.isoformat(),
                    existing_end=existing.period_end.isoformat(),
                )

            tables = get_tax_tables(
                period.tax_year,
                jurisdiction=self.config.tax_jurisdiction,
                config_dir=self.config.tax_config_dir,
                as_of=period.effective_payment_date,
            )

            run = PayrollRunModel(
                employer_id=employer_id,
                period_start=period.start,
                period_end=period.end,
                payment_date=period.effective_payment_date,
                pay_frequency=pay_frequency.value if pay_frequency else None,
                status=PayrollRunStatus.DRAFT.value,
                record_count=0,
                failed_count=0,
                created_by_id=actor_id,
            )
            self.session.add(run)
            self.session.flush()

            with LogContext.bind(run_id=run.id):
                logger.info(
                    "payroll_run_started",
                    extra={
                        "period_start": period.start.isoformat(),
                        "period_end": period.end.isoformat(),
                        "payment_date": period.effective_payment_date.isoformat(),
                        "eligible_employees": len(employees),
                        "tax_table": tables.version_label,
                    },
                )

                record_ids: list[UUID] = []
                failures: list[RunFailure] = []
                for employee in employees:
                    try:
                        with self.session.begin_nested():
                            ytd = self._selector.ytd_totals(
                                employee.id, period.tax_year, period.start,
                            )
                            breakdown = self._calculator.calculate(
                                employee,
                                period,
                                inputs.get(employee.id, _NO_INPUTS),
                                ytd,
                                tables,
                                pay_frequency=pay_frequency,
                            )
                            record = PayrollRecordModel.from_breakdown(
                                breakdown,
                                run_id=run.id,
                                employer_id=employer_id,
                                created_by_id=actor_id,
                            )
                            self.session.add(record)
                            self.session.flush()
                    except PayrollKernelError as exc:
                        failure = RunFailure(
                            employee_id=employee.id,
                            error_code=exc.code,
                            message=str(exc),
                        )
                        failures.append(failure)
                        logger.warning(
                            "payroll_run_employee_failed",
                            extra={
                                "employee_id": str(employee.id),
                                "error_code": exc.code,
                                "error": str(exc),
                            },
                        )
                        continue
                    record_ids.append(record.id)

                for failure in failures:
                    self.session.add(
                        PayrollRunFailureModel(
                            run_id=run.id,
                            employee_id=failure.employee_id,
                            error_code=failure.error_code,
                            message=failure.message,
                            created_by_id=actor_id,
                        )
                    )
                run.record_count = len(record_ids)
                run.failed_count = len(failures)
                run.updated_by_id = actor_id
                self.session.flush()

                logger.info(
                    "payroll_run_created",
                    extra={
                        "records_created": len(record_ids),
                        "records_failed": len(failures),
                    },
                )

        return PayrollRunResult(
            run_id=run.id,
            created=len(record_ids),
            failed=len(failures),
            record_ids=tuple(record_ids),
            failures=tuple(failures),
        )

    def _lock_employer(self, employer_id: UUID) -> EmployerModel:
        employer = self.session.scalars(
            select(EmployerModel)
            .where(EmployerModel.id == employer_id)
            .with_for_update()
        ).first()
        if employer is None:
            raise EmployerNotFoundError(str(employer_id))
        return employer
