"""
Employer Tax Liability Calculator - what a paycheck costs the employer on top
of gross pay.

    social security match   same math as the employee share
    medicare match          flat rate, no additional medicare (employee-only)
    FUTA                    federal unemployment, small wage base
    SUTA                    state unemployment, small wage base

A pure function of ``(total_gross, ytd_gross)`` and the configured rates.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.fica import FICACalculator, FicaRates
from payroll_engines.money import ZERO, to_cents
from payroll_engines.tracer import traced_engine
from payroll_engines.unemployment import UnemploymentRate, UnemploymentTaxCalculator


@dataclass(frozen=True)
class EmployerTaxLiability:
    social_security: Decimal
    medicare: Decimal
    futa: Decimal
    suta: Decimal

    @property
    def total(self) -> Decimal:
        return self.social_security + self.medicare + self.futa + self.suta


class EmployerTaxLiabilityCalculator:
    """Employer-side payroll taxes for one payment."""

    def __init__(
        self,
        fica_rates: FicaRates,
        futa: UnemploymentRate,
        suta: UnemploymentRate,
    ):
        self._fica = FICACalculator(fica_rates)
        self._futa = UnemploymentTaxCalculator(futa)
        self._suta = UnemploymentTaxCalculator(suta)

    @traced_engine("employer_tax", "1.0", fingerprint_fields=("total_gross", "ytd_gross"))
    def calculate(self, *, total_gross: Decimal, ytd_gross: Decimal) -> EmployerTaxLiability:
        if total_gross < ZERO or ytd_gross < ZERO:
            raise ValueError("Gross and YTD gross must be non-negative")
        return EmployerTaxLiability(
            social_security=to_cents(self._fica.social_security(total_gross, ytd_gross)),
            medicare=to_cents(self._fica.medicare(total_gross)),
            futa=self._futa.calculate(total_gross, ytd_gross),
            suta=self._suta.calculate(total_gross, ytd_gross),
        )
