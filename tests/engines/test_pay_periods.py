"""
Tests for pay frequency conversions.

Covers:
- Periods per year
- Annualize / periodize
- Day-span classification buckets
"""

from datetime import date
from decimal import Decimal

import pytest

from payroll_engines.periods import PayFrequency, PayPeriodConverter


class TestPayFrequency:

    @pytest.mark.parametrize(
        "frequency, periods",
        [
            (PayFrequency.WEEKLY, 52),
            (PayFrequency.BI_WEEKLY, 26),
            (PayFrequency.SEMI_MONTHLY, 24),
            (PayFrequency.MONTHLY, 12),
        ],
    )
    def test_periods_per_year(self, frequency, periods):
        assert frequency.periods_per_year == periods

    def test_value_round_trip(self):
        assert PayFrequency("bi_weekly") is PayFrequency.BI_WEEKLY


class TestAnnualizePeriodize:

    def test_annualize_biweekly(self):
        assert PayPeriodConverter.annualize(Decimal("3000"), PayFrequency.BI_WEEKLY) == Decimal("78000")

    def test_periodize_monthly(self):
        assert PayPeriodConverter.periodize(Decimal("78000"), PayFrequency.MONTHLY) == Decimal("6500")

    def test_periodize_keeps_precision(self):
        result = PayPeriodConverter.periodize(Decimal("9001"), PayFrequency.BI_WEEKLY)
        assert result > Decimal("346.19")
        assert result < Decimal("346.20")

    def test_round_trip(self):
        amount = Decimal("1234.56")
        for frequency in PayFrequency:
            annual = PayPeriodConverter.annualize(amount, frequency)
            assert PayPeriodConverter.periodize(annual, frequency) == amount


class TestDaySpanClassification:
    """<=7 weekly, <=14 bi-weekly, <=16 semi-monthly, otherwise monthly."""

    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (date(2024, 1, 1), date(2024, 1, 1), PayFrequency.WEEKLY),
            (date(2024, 1, 1), date(2024, 1, 7), PayFrequency.WEEKLY),
            (date(2024, 1, 1), date(2024, 1, 8), PayFrequency.WEEKLY),
            (date(2024, 1, 1), date(2024, 1, 9), PayFrequency.BI_WEEKLY),
            (date(2024, 1, 1), date(2024, 1, 14), PayFrequency.BI_WEEKLY),
            (date(2024, 1, 1), date(2024, 1, 15), PayFrequency.BI_WEEKLY),
            (date(2024, 1, 1), date(2024, 1, 16), PayFrequency.SEMI_MONTHLY),
            (date(2024, 1, 1), date(2024, 1, 17), PayFrequency.SEMI_MONTHLY),
            (date(2024, 1, 1), date(2024, 1, 18), PayFrequency.MONTHLY),
            (date(2024, 1, 1), date(2024, 1, 31), PayFrequency.MONTHLY),
        ],
    )
    def test_buckets(self, start, end, expected):
        assert PayPeriodConverter.classify_by_day_span(start, end) == expected

    def test_day_span(self):
        assert PayPeriodConverter.day_span(date(2024, 1, 1), date(2024, 1, 14)) == 13

    def test_reversed_period_rejected(self):
        with pytest.raises(ValueError):
            PayPeriodConverter.classify_by_day_span(date(2024, 1, 14), date(2024, 1, 1))
