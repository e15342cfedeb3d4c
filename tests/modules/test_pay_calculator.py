"""
Tests for EmployeePayCalculator (gross-to-net for one employee).

Covers:
- Hourly and salaried breakdowns against 2024 tables
- Net pay identity and deduction items
- Withholding profile: filing status, allowances, extra withholding, exemptions
- Pay frequency resolution and day-span fallback
- Inactive employees and missing hours
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_engines.gross_pay import CompensationType, HoursWorked
from payroll_engines.periods import PayFrequency
from payroll_kernel.exceptions import (
    EmployeeInactiveError,
    InvalidPayInputError,
    MissingHoursError,
)
from payroll_modules.payroll.calculator import EmployeePayCalculator
from payroll_modules.payroll.config import PayrollConfig
from payroll_modules.payroll.models import (
    DeductionType,
    Employee,
    EmployeeStatus,
    FilingStatus,
    PayInputs,
    PayPeriod,
    WithholdingProfile,
    YTDTotals,
)

BIWEEKLY_PERIOD = PayPeriod(date(2024, 1, 1), date(2024, 1, 14), date(2024, 1, 19))
MONTHLY_PERIOD = PayPeriod(date(2024, 1, 1), date(2024, 1, 31))


def _employee(
    compensation_type=CompensationType.BIWEEKLY,
    pay_rate="3000",
    pay_frequency=None,
    status=EmployeeStatus.ACTIVE,
    **withholding,
) -> Employee:
    return Employee(
        id=uuid4(),
        employer_id=uuid4(),
        employee_number="E0001",
        first_name="Dana",
        last_name="Reyes",
        compensation_type=compensation_type,
        pay_rate=Decimal(pay_rate),
        status=status,
        pay_frequency=pay_frequency,
        withholding=WithholdingProfile(**withholding),
    )


class TestBreakdown:

    def setup_method(self):
        self.calculator = EmployeePayCalculator()

    def test_biweekly_salary(self, tax_tables_2024):
        breakdown = self.calculator.calculate(
            _employee(), BIWEEKLY_PERIOD, PayInputs(), YTDTotals(), tax_tables_2024,
        )
        assert breakdown.pay_frequency == PayFrequency.BI_WEEKLY
        assert breakdown.frequency_inferred is False
        assert breakdown.total_gross == Decimal("3000.00")
        assert breakdown.federal_tax == Decimal("346.19")
        assert breakdown.social_security == Decimal("186.00")
        assert breakdown.medicare == Decimal("43.50")
        assert breakdown.total_deductions == Decimal("575.69")
        assert breakdown.net_pay == Decimal("2424.31")

    def test_deduction_items(self, tax_tables_2024):
        breakdown = self.calculator.calculate(
            _employee(), BIWEEKLY_PERIOD, PayInputs(), YTDTotals(), tax_tables_2024,
        )
        assert [d.type for d in breakdown.deductions] == [
            DeductionType.FEDERAL_TAX,
            DeductionType.SOCIAL_SECURITY,
            DeductionType.MEDICARE,
        ]
        assert [d.description for d in breakdown.deductions] == [
            "Federal Income Tax",
            "Social Security",
            "Medicare",
        ]
        assert breakdown.net_pay == breakdown.total_gross - sum(
            d.amount for d in breakdown.deductions
        )

    def test_hourly_with_overtime(self, tax_tables_2024):
        employee = _employee(
            CompensationType.HOURLY, "25", pay_frequency=PayFrequency.BI_WEEKLY,
        )
        inputs = PayInputs(hours=HoursWorked(regular=Decimal("80"), overtime=Decimal("10")))
        breakdown = self.calculator.calculate(
            employee, BIWEEKLY_PERIOD, inputs, YTDTotals(), tax_tables_2024,
        )
        assert breakdown.gross.regular_pay == Decimal("2000.00")
        assert breakdown.gross.overtime_pay == Decimal("375.00")
        assert breakdown.total_gross == Decimal("2375.00")
        assert breakdown.federal_tax == Decimal("208.69")
        assert breakdown.social_security == Decimal("147.25")
        assert breakdown.medicare == Decimal("34.44")
        assert breakdown.net_pay == Decimal("1984.62")

    def test_monthly_salary(self, tax_tables_2024):
        employee = _employee(CompensationType.MONTHLY, "6000")
        breakdown = self.calculator.calculate(
            employee, MONTHLY_PERIOD, PayInputs(), YTDTotals(), tax_tables_2024,
        )
        assert breakdown.pay_frequency == PayFrequency.MONTHLY
        assert breakdown.federal_tax == Decimal("640.08")
        assert breakdown.net_pay == Decimal("4900.92")

    def test_bonus_is_part_of_gross(self, tax_tables_2024):
        breakdown = self.calculator.calculate(
            _employee(),
            BIWEEKLY_PERIOD,
            PayInputs(bonuses=Decimal("500"), commissions=Decimal("100")),
            YTDTotals(),
            tax_tables_2024,
        )
        assert breakdown.total_gross == Decimal("3600.00")
        assert breakdown.social_security == Decimal("223.20")

    def test_ytd_crossing_additional_medicare(self, tax_tables_2024):
        employee = _employee(CompensationType.BIWEEKLY, "5000")
        breakdown = self.calculator.calculate(
            employee,
            BIWEEKLY_PERIOD,
            PayInputs(),
            YTDTotals(gross=Decimal("199000")),
            tax_tables_2024,
        )
        assert breakdown.additional_medicare == Decimal("36.00")
        medicare_item = next(
            d for d in breakdown.deductions if d.type == DeductionType.MEDICARE
        )
        assert medicare_item.amount == Decimal("72.50") + Decimal("36.00")
        # Above the wage base: no social security at all.
        assert breakdown.social_security == Decimal("0.00")

    def test_employer_taxes(self, tax_tables_2024):
        breakdown = self.calculator.calculate(
            _employee(), BIWEEKLY_PERIOD, PayInputs(), YTDTotals(), tax_tables_2024,
        )
        assert breakdown.employer_taxes.social_security == Decimal("186.00")
        assert breakdown.employer_taxes.medicare == Decimal("43.50")
        assert breakdown.employer_taxes.futa == Decimal("18.00")
        assert breakdown.employer_taxes.suta == Decimal("81.00")

    def test_records_tax_table_version(self, tax_tables_2024):
        breakdown = self.calculator.calculate(
            _employee(), BIWEEKLY_PERIOD, PayInputs(), YTDTotals(), tax_tables_2024,
        )
        assert breakdown.tax_table_version == "us-federal-2024@v1"
        assert breakdown.tax_table_checksum == tax_tables_2024.checksum


class TestWithholdingProfile:

    def setup_method(self):
        self.calculator = EmployeePayCalculator()

    def test_married_filing_jointly(self, tax_tables_2024):
        employee = _employee(filing_status=FilingStatus.MARRIED_FILING_JOINTLY)
        breakdown = self.calculator.calculate(
            employee, BIWEEKLY_PERIOD, PayInputs(), YTDTotals(), tax_tables_2024,
        )
        assert breakdown.federal_tax == Decimal("207.38")

    def test_allowances_and_additional_withholding(self, tax_tables_2024):
        employee = _employee(allowances=2, additional_withholding=Decimal("25"))
        breakdown = self.calculator.calculate(
            employee, BIWEEKLY_PERIOD, PayInputs(), YTDTotals(), tax_tables_2024,
        )
        assert breakdown.federal_tax == Decimal("296.73")

    def test_exempt_federal(self, tax_tables_2024):
        employee = _employee(exempt_federal=True)
        breakdown = self.calculator.calculate(
            employee, BIWEEKLY_PERIOD, PayInputs(), YTDTotals(), tax_tables_2024,
        )
        assert breakdown.federal_tax == Decimal("0")
        assert breakdown.social_security == Decimal("186.00")

    def test_exempt_fica_still_owes_employer_taxes(self, tax_tables_2024):
        employee = _employee(exempt_fica=True)
        breakdown = self.calculator.calculate(
            employee, BIWEEKLY_PERIOD, PayInputs(), YTDTotals(), tax_tables_2024,
        )
        assert breakdown.social_security == Decimal("0")
        assert breakdown.medicare == Decimal("0")
        assert breakdown.employer_taxes.social_security == Decimal("186.00")


class TestFrequencyResolution:

    def setup_method(self):
        self.calculator = EmployeePayCalculator()

    def test_override_wins(self):
        employee = _employee(pay_frequency=PayFrequency.WEEKLY)
        frequency, inferred = self.calculator.resolve_frequency(
            employee, BIWEEKLY_PERIOD, PayFrequency.MONTHLY,
        )
        assert frequency == PayFrequency.MONTHLY
        assert inferred is False

    def test_employee_frequency_beats_compensation_type(self):
        employee = _employee(CompensationType.MONTHLY, pay_frequency=PayFrequency.SEMI_MONTHLY)
        assert self.calculator.resolve_frequency(employee, MONTHLY_PERIOD) == (
            PayFrequency.SEMI_MONTHLY, False,
        )

    def test_yearly_salary_inferred_from_day_span(self, tax_tables_2024, captured_logs):
        employee = _employee(CompensationType.YEARLY, "78000")
        breakdown = self.calculator.calculate(
            employee, MONTHLY_PERIOD, PayInputs(), YTDTotals(), tax_tables_2024,
        )
        assert breakdown.pay_frequency == PayFrequency.MONTHLY
        assert breakdown.frequency_inferred is True
        assert breakdown.total_gross == Decimal("6500.00")
        assert any(r["message"] == "pay_frequency_inferred" for r in captured_logs())

    def test_inference_disabled(self, tax_tables_2024):
        calculator = EmployeePayCalculator(PayrollConfig(infer_frequency_from_period=False))
        employee = _employee(CompensationType.YEARLY, "78000")
        with pytest.raises(InvalidPayInputError) as exc_info:
            calculator.calculate(
                employee, MONTHLY_PERIOD, PayInputs(), YTDTotals(), tax_tables_2024,
            )
        assert exc_info.value.field == "pay_frequency"


class TestRejections:

    def setup_method(self):
        self.calculator = EmployeePayCalculator()

    def test_inactive_employee(self, tax_tables_2024):
        employee = _employee(status=EmployeeStatus.INACTIVE)
        with pytest.raises(EmployeeInactiveError) as exc_info:
            self.calculator.calculate(
                employee, BIWEEKLY_PERIOD, PayInputs(), YTDTotals(), tax_tables_2024,
            )
        assert exc_info.value.code == "EMPLOYEE_INACTIVE"

    def test_hourly_without_hours(self, tax_tables_2024):
        employee = _employee(CompensationType.HOURLY, "25")
        with pytest.raises(MissingHoursError):
            self.calculator.calculate(
                employee, BIWEEKLY_PERIOD, PayInputs(), YTDTotals(), tax_tables_2024,
            )

    def test_negative_bonus(self):
        with pytest.raises(InvalidPayInputError):
            PayInputs(bonuses=Decimal("-5"))
