"""
Unemployment Tax Calculator - FUTA and state unemployment (SUTA/SUI).

Employer-side cost only; never withheld from the employee.  Both taxes apply
to the first few thousand dollars of an employee's annual wages:

    tax = rate * min(pay, wage_base - ytd_gross)     (0 once ytd >= base)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.money import ZERO, prorated_base, to_cents


@dataclass(frozen=True)
class UnemploymentRate:
    """A capped unemployment tax: ``rate`` on wages up to ``wage_base``."""

    name: str
    rate: Decimal
    wage_base: Decimal

    def __post_init__(self) -> None:
        if not (ZERO <= self.rate <= Decimal("1")):
            raise ValueError(f"{self.name} rate must be within [0, 1]: {self.rate}")
        if self.wage_base <= ZERO:
            raise ValueError(f"{self.name} wage base must be positive")


class UnemploymentTaxCalculator:
    """
    Capped unemployment tax for one payment.

    Contract:
        Same proration rule as social security against a much smaller base.
    """

    def __init__(self, rate: UnemploymentRate):
        self.rate = rate

    def taxable_wages(self, pay: Decimal, ytd_gross: Decimal) -> Decimal:
        return prorated_base(pay, ytd_gross, self.rate.wage_base)

    def calculate(self, pay: Decimal, ytd_gross: Decimal) -> Decimal:
        if pay < ZERO or ytd_gross < ZERO:
            raise ValueError("Pay and YTD gross must be non-negative")
        return to_cents(self.taxable_wages(pay, ytd_gross) * self.rate.rate)
