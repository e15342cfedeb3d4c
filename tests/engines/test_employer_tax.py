"""
Tests for unemployment taxes and employer tax liability.
"""

from decimal import Decimal

import pytest

from payroll_engines.employer_tax import EmployerTaxLiabilityCalculator
from payroll_engines.fica import FicaRates
from payroll_engines.unemployment import UnemploymentRate, UnemploymentTaxCalculator

FUTA = UnemploymentRate(name="futa", rate=Decimal("0.006"), wage_base=Decimal("7000"))
SUTA = UnemploymentRate(name="suta", rate=Decimal("0.027"), wage_base=Decimal("7000"))


class TestUnemploymentTax:

    def setup_method(self):
        self.futa = UnemploymentTaxCalculator(FUTA)

    def test_under_wage_base(self):
        assert self.futa.calculate(Decimal("3000"), Decimal("0")) == Decimal("18.00")

    def test_crossing_wage_base(self):
        assert self.futa.taxable_wages(Decimal("3000"), Decimal("6000")) == Decimal("1000")
        assert self.futa.calculate(Decimal("3000"), Decimal("6000")) == Decimal("6.00")

    def test_after_wage_base(self):
        assert self.futa.calculate(Decimal("3000"), Decimal("7000")) == Decimal("0.00")

    def test_negative_pay_rejected(self):
        with pytest.raises(ValueError):
            self.futa.calculate(Decimal("-1"), Decimal("0"))

    def test_invalid_rate_rejected(self):
        with pytest.raises(ValueError, match="suta rate"):
            UnemploymentRate(name="suta", rate=Decimal("2"), wage_base=Decimal("7000"))


class TestEmployerTaxLiability:

    def setup_method(self):
        self.calculator = EmployerTaxLiabilityCalculator(FicaRates.for_2024(), FUTA, SUTA)

    def test_first_paycheck(self):
        liability = self.calculator.calculate(total_gross=Decimal("3000"), ytd_gross=Decimal("0"))
        assert liability.social_security == Decimal("186.00")
        assert liability.medicare == Decimal("43.50")
        assert liability.futa == Decimal("18.00")
        assert liability.suta == Decimal("81.00")
        assert liability.total == Decimal("328.50")

    def test_employer_pays_no_additional_medicare(self):
        liability = self.calculator.calculate(
            total_gross=Decimal("5000"), ytd_gross=Decimal("250000"),
        )
        assert liability.medicare == Decimal("72.50")
        assert liability.social_security == Decimal("0.00")
        assert liability.futa == Decimal("0.00")
        assert liability.suta == Decimal("0.00")
