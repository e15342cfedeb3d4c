"""
Payroll Selectors (``payroll_modules.payroll.selectors``).

Responsibility
--------------
Read-side queries for payroll: employees, records, runs, year-to-date
aggregates, the open-record overlap lookup, employer summaries and employee
history.  Every method returns DTOs.

Architecture position
---------------------
**Modules layer** -- read path.  Extends ``payroll_kernel.selectors.BaseSelector``.
Never adds, flushes or commits.

Invariants enforced
-------------------
* Year-to-date totals are derived from PAID records only, in the same tax
  year, whose period starts before the period being calculated.  Nothing is
  cached, so totals can only grow as records are finalized.
* VOID records never contribute to totals.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select

from payroll_engines.money import to_cents
from payroll_kernel.exceptions import (
    EmployeeNotFoundError,
    PayrollRecordNotFoundError,
    PayrollRunNotFoundError,
)
from payroll_kernel.selectors.base import BaseSelector
from payroll_modules.payroll.models import (
    DeductionType,
    Employee,
    EmployeePayrollHistory,
    EmployeeStatus,
    PayrollRecord,
    PayrollRun,
    PayrollStatus,
    PayrollSummary,
    PayrollSummaryLine,
    YTDTotals,
)
from payroll_modules.payroll.orm import (
    DeductionItemModel,
    EmployeeModel,
    PayrollRecordModel,
    PayrollRunModel,
)

OPEN_STATUSES = (PayrollStatus.DRAFT.value, PayrollStatus.APPROVED.value)

ZERO = Decimal("0")


def _cents(value) -> Decimal:
    return to_cents(Decimal(value if value is not None else 0))


class PayrollSelector(BaseSelector):
    """Read-only payroll queries."""

    # -- employees ---------------------------------------------------------

    def get_employee(self, employee_id: UUID) -> Employee:
        model = self.session.get(EmployeeModel, employee_id)
        if model is None:
            raise EmployeeNotFoundError(str(employee_id))
        return model.to_dto()

    def list_active_employees(
        self,
        employer_id: UUID,
        employee_ids: list[UUID] | None = None,
    ) -> list[Employee]:
        """
        ACTIVE employees of an employer, optionally restricted to ``employee_ids``.

        ``None`` and an empty list both mean "every active employee".
        """
        stmt = select(EmployeeModel).where(
            EmployeeModel.employer_id == employer_id,
            EmployeeModel.status == EmployeeStatus.ACTIVE.value,
        )
        if employee_ids:
            stmt = stmt.where(EmployeeModel.id.in_(employee_ids))
        stmt = stmt.order_by(EmployeeModel.employee_number)
        return [m.to_dto() for m in self.session.scalars(stmt)]

    # -- year to date ------------------------------------------------------

    def ytd_totals(self, employee_id: UUID, tax_year: int, before: date) -> YTDTotals:
        """
        Sum PAID records of ``tax_year`` whose period starts before ``before``.
        """
        paid_filter = (
            PayrollRecordModel.employee_id == employee_id,
            PayrollRecordModel.tax_year == tax_year,
            PayrollRecordModel.status == PayrollStatus.PAID.value,
            PayrollRecordModel.period_start < before,
        )

        gross = self.session.scalar(
            select(func.coalesce(func.sum(PayrollRecordModel.gross_pay), 0)).where(*paid_filter)
        )

        by_type: dict[str, Decimal] = {}
        rows = self.session.execute(
            select(
                DeductionItemModel.deduction_type,
                func.coalesce(func.sum(DeductionItemModel.amount), 0),
            )
            .join(PayrollRecordModel, DeductionItemModel.record_id == PayrollRecordModel.id)
            .where(*paid_filter)
            .group_by(DeductionItemModel.deduction_type)
        )
        for deduction_type, amount in rows:
            by_type[deduction_type] = _cents(amount)

        return YTDTotals(
            gross=_cents(gross),
            federal_tax=by_type.get(DeductionType.FEDERAL_TAX.value, ZERO),
            social_security=by_type.get(DeductionType.SOCIAL_SECURITY.value, ZERO),
            medicare=by_type.get(DeductionType.MEDICARE.value, ZERO),
        )

    # -- records and runs --------------------------------------------------

    def get_record(self, record_id: UUID) -> PayrollRecord:
        model = self.session.get(PayrollRecordModel, record_id)
        if model is None:
            raise PayrollRecordNotFoundError(str(record_id))
        return model.to_dto()

    def get_run(self, run_id: UUID) -> PayrollRun:
        model = self.session.get(PayrollRunModel, run_id)
        if model is None:
            raise PayrollRunNotFoundError(str(run_id))
        return model.to_dto()

    def find_overlapping_open_record(
        self,
        employer_id: UUID,
        period_start: date,
        period_end: date,
    ) -> PayrollRecord | None:
        """
        First DRAFT or APPROVED record of the employer whose period
        intersects ``[period_start, period_end]`` (inclusive on both ends).
        """
        stmt = (
            select(PayrollRecordModel)
            .where(
                PayrollRecordModel.employer_id == employer_id,
                PayrollRecordModel.status.in_(OPEN_STATUSES),
                PayrollRecordModel.period_start <= period_end,
                PayrollRecordModel.period_end >= period_start,
            )
            .order_by(PayrollRecordModel.period_start)
            .limit(1)
        )
        model = self.session.scalars(stmt).first()
        return model.to_dto() if model is not None else None

    def records_for_run(self, run_id: UUID) -> list[PayrollRecord]:
        stmt = (
            select(PayrollRecordModel)
            .where(PayrollRecordModel.run_id == run_id)
            .order_by(PayrollRecordModel.created_at)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    # -- read models -------------------------------------------------------

    def payroll_summary(
        self,
        employer_id: UUID,
        period_start: date,
        period_end: date,
    ) -> PayrollSummary:
        """
        Totals over non-void records whose whole period lies inside the window.
        """
        stmt = (
            select(PayrollRecordModel, EmployeeModel)
            .join(EmployeeModel, PayrollRecordModel.employee_id == EmployeeModel.id)
            .where(
                PayrollRecordModel.employer_id == employer_id,
                PayrollRecordModel.period_start >= period_start,
                PayrollRecordModel.period_end <= period_end,
                PayrollRecordModel.status != PayrollStatus.VOID.value,
            )
            .order_by(PayrollRecordModel.period_start, EmployeeModel.employee_number)
        )

        lines: list[PayrollSummaryLine] = []
        total_employer_taxes = ZERO
        for record_model, employee_model in self.session.execute(stmt):
            record = record_model.to_dto()
            total_employer_taxes += record.employer_tax_total
            lines.append(
                PayrollSummaryLine(
                    record_id=record.id,
                    employee_id=record.employee_id,
                    employee_name=f"{employee_model.first_name} {employee_model.last_name}",
                    period_start=record.period_start,
                    period_end=record.period_end,
                    status=record.status,
                    gross_pay=record.gross_pay,
                    total_deductions=record.total_deductions,
                    net_pay=record.net_pay,
                )
            )

        return PayrollSummary(
            employer_id=employer_id,
            period_start=period_start,
            period_end=period_end,
            employee_count=len({line.employee_id for line in lines}),
            total_gross=sum((line.gross_pay for line in lines), ZERO),
            total_deductions=sum((line.total_deductions for line in lines), ZERO),
            total_net=sum((line.net_pay for line in lines), ZERO),
            total_employer_taxes=total_employer_taxes,
            lines=tuple(lines),
        )

    def employee_history(
        self,
        employee_id: UUID,
        year: int | None = None,
    ) -> EmployeePayrollHistory:
        """Records newest first; ``year`` filters on the period start year."""
        stmt = select(PayrollRecordModel).where(PayrollRecordModel.employee_id == employee_id)
        if year is not None:
            stmt = stmt.where(
                PayrollRecordModel.period_start >= date(year, 1, 1),
                PayrollRecordModel.period_start < date(year + 1, 1, 1),
            )
        stmt = stmt.order_by(PayrollRecordModel.period_start.desc())
        records = tuple(m.to_dto() for m in self.session.scalars(stmt))

        counted = [r for r in records if r.status != PayrollStatus.VOID]
        return EmployeePayrollHistory(
            employee_id=employee_id,
            year=year,
            records=records,
            ytd_gross=sum((r.gross_pay for r in counted), ZERO),
            ytd_net=sum((r.net_pay for r in counted), ZERO),
            ytd_taxes=sum((r.total_deductions for r in counted), ZERO),
        )
