"""
Gross Pay Calculator - earnings before any deduction.

Polymorphic over compensation type:

    HOURLY      rate * regular + rate * 1.5 * overtime + rate * 2.0 * double time
    WEEKLY      fixed periodic amount, used as-is
    BIWEEKLY    fixed periodic amount, used as-is
    MONTHLY     fixed periodic amount, used as-is
    YEARLY      annual salary / periods per year of the pay frequency

Bonuses and commissions are added on top:
``total_gross = base + bonuses + commissions``.

Usage:
    from decimal import Decimal
    from payroll_engines.gross_pay import (
        CompensationType, GrossPayCalculator, HoursWorked,
    )

    calc = GrossPayCalculator()
    result = calc.calculate(
        compensation_type=CompensationType.HOURLY,
        pay_rate=Decimal("25"),
        hours=HoursWorked(regular=Decimal("80"), overtime=Decimal("10")),
    )
    print(result.total_gross)  # 2375.00
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from payroll_engines.money import ZERO, to_cents
from payroll_engines.periods import PayFrequency, PayPeriodConverter
from payroll_engines.tracer import traced_engine


class CompensationType(str, Enum):
    """How an employee's pay rate is expressed."""

    HOURLY = "hourly"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def is_fixed_periodic(self) -> bool:
        return self in (
            CompensationType.WEEKLY,
            CompensationType.BIWEEKLY,
            CompensationType.MONTHLY,
        )

    @property
    def natural_frequency(self) -> PayFrequency | None:
        """Frequency implied by a fixed periodic amount, if any."""
        return {
            CompensationType.WEEKLY: PayFrequency.WEEKLY,
            CompensationType.BIWEEKLY: PayFrequency.BI_WEEKLY,
            CompensationType.MONTHLY: PayFrequency.MONTHLY,
        }.get(self)


@dataclass(frozen=True)
class HoursWorked:
    """Hours for one pay period."""

    regular: Decimal = ZERO
    overtime: Decimal = ZERO
    double_time: Decimal = ZERO

    def __post_init__(self) -> None:
        for name in ("regular", "overtime", "double_time"):
            value = getattr(self, name)
            if value < ZERO:
                raise ValueError(f"{name} hours cannot be negative: {value}")

    @property
    def total(self) -> Decimal:
        return self.regular + self.overtime + self.double_time


@dataclass(frozen=True)
class GrossPayResult:
    """Gross pay components, each rounded to cents."""

    regular_pay: Decimal
    overtime_pay: Decimal
    double_time_pay: Decimal
    base_pay: Decimal
    bonuses: Decimal
    commissions: Decimal
    total_gross: Decimal


class GrossPayCalculator:
    """
    Gross earnings for one period.

    Contract:
        HOURLY requires ``hours``; YEARLY requires ``frequency``.  The caller
        resolves both before calling.

    Guarantees:
        - ``total_gross == base_pay + bonuses + commissions`` exactly.
        - ``base_pay == regular_pay + overtime_pay + double_time_pay`` for
          hourly employees.
    """

    def __init__(
        self,
        overtime_multiplier: Decimal = Decimal("1.5"),
        double_time_multiplier: Decimal = Decimal("2.0"),
    ):
        if overtime_multiplier < Decimal("1") or double_time_multiplier < Decimal("1"):
            raise ValueError("Overtime multipliers must be at least 1")
        self.overtime_multiplier = overtime_multiplier
        self.double_time_multiplier = double_time_multiplier

    @traced_engine(
        "gross_pay", "1.0",
        fingerprint_fields=("compensation_type", "pay_rate", "bonuses", "commissions"),
    )
    def calculate(
        self,
        *,
        compensation_type: CompensationType,
        pay_rate: Decimal,
        hours: HoursWorked | None = None,
        frequency: PayFrequency | None = None,
        bonuses: Decimal = ZERO,
        commissions: Decimal = ZERO,
    ) -> GrossPayResult:
        if pay_rate < ZERO:
            raise ValueError(f"Pay rate cannot be negative: {pay_rate}")
        if bonuses < ZERO or commissions < ZERO:
            raise ValueError("Bonuses and commissions cannot be negative")

        regular = overtime = double_time = ZERO
        if compensation_type == CompensationType.HOURLY:
            if hours is None:
                raise ValueError("Hours are required for hourly compensation")
            regular = to_cents(pay_rate * hours.regular)
            overtime = to_cents(pay_rate * self.overtime_multiplier * hours.overtime)
            double_time = to_cents(pay_rate * self.double_time_multiplier * hours.double_time)
            base = regular + overtime + double_time
        elif compensation_type.is_fixed_periodic:
            base = to_cents(pay_rate)
        elif compensation_type == CompensationType.YEARLY:
            if frequency is None:
                raise ValueError("A pay frequency is required for yearly salaries")
            base = to_cents(PayPeriodConverter.periodize(pay_rate, frequency))
        else:
            raise ValueError(f"Unsupported compensation type: {compensation_type}")

        bonuses = to_cents(bonuses)
        commissions = to_cents(commissions)
        return GrossPayResult(
            regular_pay=regular,
            overtime_pay=overtime,
            double_time_pay=double_time,
            base_pay=base,
            bonuses=bonuses,
            commissions=commissions,
            total_gross=base + bonuses + commissions,
        )
