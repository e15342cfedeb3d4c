"""
Pay Period Converter - annualize and periodize by pay frequency.

Withholding tables are annual; paychecks are not.  Amounts are scaled up by
the number of pay periods per year, taxed, then scaled back down.

    annualize(x, f) = x * periods_per_year(f)
    periodize(x, f) = x / periods_per_year(f)

Conversions are unrounded Decimal arithmetic, so
``periodize(annualize(x, f), f) == x`` holds exactly.  Rounding happens once,
on the final per-period amounts.

``classify_by_day_span`` guesses a frequency from a period's length.  It is
only a fallback for employees with no stored frequency; a 15-day period
could be semi-monthly or a long bi-weekly.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum

from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.periods")


class PayFrequency(str, Enum):
    """How often an employee is paid."""

    WEEKLY = "weekly"
    BI_WEEKLY = "bi_weekly"
    SEMI_MONTHLY = "semi_monthly"
    MONTHLY = "monthly"

    @property
    def periods_per_year(self) -> int:
        return _PERIODS_PER_YEAR[self]


_PERIODS_PER_YEAR: dict[PayFrequency, int] = {
    PayFrequency.WEEKLY: 52,
    PayFrequency.BI_WEEKLY: 26,
    PayFrequency.SEMI_MONTHLY: 24,
    PayFrequency.MONTHLY: 12,
}

# (max day span inclusive, frequency), checked in order.
_DAY_SPAN_BUCKETS: tuple[tuple[int, PayFrequency], ...] = (
    (7, PayFrequency.WEEKLY),
    (14, PayFrequency.BI_WEEKLY),
    (16, PayFrequency.SEMI_MONTHLY),
)


class PayPeriodConverter:
    """Stateless conversions between per-period and annual amounts."""

    @staticmethod
    def annualize(amount: Decimal, frequency: PayFrequency) -> Decimal:
        return amount * frequency.periods_per_year

    @staticmethod
    def periodize(amount: Decimal, frequency: PayFrequency) -> Decimal:
        return amount / frequency.periods_per_year

    @staticmethod
    def day_span(period_start: date, period_end: date) -> int:
        """Whole days between start and end (end - start)."""
        return (period_end - period_start).days

    @classmethod
    def classify_by_day_span(cls, period_start: date, period_end: date) -> PayFrequency:
        """
        Infer a frequency from the period length.

        <=7 days weekly, <=14 bi-weekly, <=16 semi-monthly, else monthly.
        """
        span = cls.day_span(period_start, period_end)
        if span < 0:
            raise ValueError(f"Period end {period_end} precedes start {period_start}")
        for max_days, frequency in _DAY_SPAN_BUCKETS:
            if span <= max_days:
                return frequency
        return PayFrequency.MONTHLY
