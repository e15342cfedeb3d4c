"""
Employee Pay Calculator (``payroll_modules.payroll.calculator``).

Responsibility
--------------
Composes the pure engines into one employee's pay for one period:
frequency resolution, gross pay, federal withholding, FICA, deduction
items, net pay and employer tax liability.

Architecture position
---------------------
**Modules layer** -- pure orchestration over ``payroll_engines``.  No
database access: the caller supplies the employee, year-to-date totals and
tax tables.  ``PayrollService`` and ``PayrollRunOrchestrator`` are the
callers.

Invariants enforced
-------------------
* Only ACTIVE employees are calculated.
* ``net_pay == total_gross - sum(deductions)`` exactly; each tax component
  is rounded to cents before it is summed.
* Withholding uses the employee's own filing status, allowances, extra
  withholding and exemptions.

Failure modes
-------------
* ``EmployeeInactiveError`` -- employee not ACTIVE.
* ``MissingHoursError`` -- hourly employee without hours.
* ``InvalidPayInputError`` -- no frequency can be resolved, or an engine
  rejected an input.
"""

from decimal import Decimal

from payroll_config.bridges import TaxTables
from payroll_engines.gross_pay import CompensationType, GrossPayCalculator
from payroll_engines.money import ZERO, to_cents
from payroll_engines.periods import PayFrequency, PayPeriodConverter
from payroll_kernel.exceptions import (
    EmployeeInactiveError,
    InvalidPayInputError,
    MissingHoursError,
)
from payroll_kernel.logging_config import get_logger
from payroll_modules.payroll.config import PayrollConfig
from payroll_modules.payroll.models import (
    DeductionItem,
    DeductionType,
    Employee,
    PayBreakdown,
    PayInputs,
    PayPeriod,
    YTDTotals,
)

logger = get_logger("modules.payroll.calculator")


class EmployeePayCalculator:
    """
    Gross-to-net for one employee and one period.

    Contract:
        Pure: identical inputs give identical breakdowns.
    Guarantees:
        Returns a ``PayBreakdown`` whose own validation has passed.
    Non-goals:
        Does not load employees, year-to-date totals or tax tables.
    """

    def __init__(self, config: PayrollConfig | None = None):
        self.config = config or PayrollConfig.with_defaults()
        self._gross = GrossPayCalculator(
            overtime_multiplier=self.config.overtime_multiplier,
            double_time_multiplier=self.config.double_time_multiplier,
        )

    def resolve_frequency(
        self,
        employee: Employee,
        period: PayPeriod,
        override: PayFrequency | None = None,
    ) -> tuple[PayFrequency, bool]:
        """
        Pick the pay frequency: run override, then the employee's stored
        frequency, then the one implied by a fixed periodic compensation
        type, then the period length.

        Returns the frequency and whether it was inferred from the period.
        """
        if override is not None:
            return override, False
        if employee.pay_frequency is not None:
            return employee.pay_frequency, False
        natural = employee.compensation_type.natural_frequency
        if natural is not None:
            return natural, False

        if not self.config.infer_frequency_from_period:
            raise InvalidPayInputError(
                field="pay_frequency",
                value="None",
                reason=f"employee {employee.id} has no pay frequency and inference is disabled",
            )
        inferred = PayPeriodConverter.classify_by_day_span(period.start, period.end)
        logger.warning(
            "pay_frequency_inferred",
            extra={
                "employee_id": str(employee.id),
                "period_start": period.start.isoformat(),
                "period_end": period.end.isoformat(),
                "day_span": PayPeriodConverter.day_span(period.start, period.end),
                "pay_frequency": inferred.value,
            },
        )
        return inferred, True

    def calculate(
        self,
        employee: Employee,
        period: PayPeriod,
        inputs: PayInputs,
        ytd: YTDTotals,
        tables: TaxTables,
        pay_frequency: PayFrequency | None = None,
    ) -> PayBreakdown:
        if not employee.is_active:
            raise EmployeeInactiveError(
                employee_id=str(employee.id), status=employee.status.value,
            )
        if employee.compensation_type == CompensationType.HOURLY and inputs.hours is None:
            raise MissingHoursError(employee_id=str(employee.id))

        frequency, inferred = self.resolve_frequency(employee, period, pay_frequency)

        try:
            gross = self._gross.calculate(
                compensation_type=employee.compensation_type,
                pay_rate=employee.pay_rate,
                hours=inputs.hours,
                frequency=frequency,
                bonuses=inputs.bonuses,
                commissions=inputs.commissions,
            )
        except ValueError as exc:
            raise InvalidPayInputError(
                field="gross_pay", value=str(employee.pay_rate), reason=str(exc),
            ) from exc
        total_gross = gross.total_gross

        withholding = employee.withholding
        federal_tax = ZERO
        if not withholding.exempt_federal:
            annual_gross = PayPeriodConverter.annualize(total_gross, frequency)
            result = tables.bracket_engine.compute_withholding(
                annual_gross=annual_gross,
                table=tables.table_for(withholding.filing_status.value),
                allowances=withholding.allowances,
            )
            federal_tax = to_cents(
                PayPeriodConverter.periodize(result.annual_tax, frequency)
                + withholding.additional_withholding
            )

        social_security = medicare = additional_medicare = ZERO
        if not withholding.exempt_fica:
            fica = tables.fica_calculator().calculate(
                pay=total_gross,
                ytd_gross=ytd.gross,
                ytd_social_security=ytd.social_security,
            )
            social_security = fica.social_security
            medicare = fica.medicare
            additional_medicare = fica.additional_medicare

        deductions = (
            DeductionItem(DeductionType.FEDERAL_TAX, "Federal Income Tax", federal_tax),
            DeductionItem(DeductionType.SOCIAL_SECURITY, "Social Security", social_security),
            DeductionItem(
                DeductionType.MEDICARE, "Medicare", medicare + additional_medicare,
            ),
        )
        total_deductions = sum((d.amount for d in deductions), Decimal("0"))

        employer_taxes = tables.employer_tax_calculator().calculate(
            total_gross=total_gross, ytd_gross=ytd.gross,
        )

        breakdown = PayBreakdown(
            employee_id=employee.id,
            period=period,
            pay_frequency=frequency,
            frequency_inferred=inferred,
            gross=gross,
            federal_tax=federal_tax,
            social_security=social_security,
            medicare=medicare,
            additional_medicare=additional_medicare,
            deductions=deductions,
            total_deductions=total_deductions,
            net_pay=total_gross - total_deductions,
            employer_taxes=employer_taxes,
            ytd=ytd,
            tax_table_version=tables.version_label,
            tax_table_checksum=tables.checksum,
        )

        logger.info(
            "employee_pay_calculated",
            extra={
                "employee_id": str(employee.id),
                "pay_frequency": frequency.value,
                "frequency_inferred": inferred,
                "total_gross": str(total_gross),
                "total_deductions": str(total_deductions),
                "net_pay": str(breakdown.net_pay),
                "tax_table": tables.version_label,
            },
        )
        return breakdown
