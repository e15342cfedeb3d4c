"""
FICA Calculator - Social Security and Medicare withholding.

Pure functions, no I/O.  Rates and thresholds come from the active tax table
set; nothing here is year-specific.

    social security     = rate * min(pay, wage_base - ytd_gross)    (0 past base)
    medicare            = rate * pay                                 (uncapped)
    additional medicare = rate * portion of pay above the threshold

Year-to-date gross is what makes these continuous: splitting one payment into
several smaller ones yields the same totals (up to cent rounding).

Usage:
    from decimal import Decimal
    from payroll_engines.fica import FICACalculator, FicaRates

    calc = FICACalculator(FicaRates.for_2024())
    result = calc.calculate(pay=Decimal("3000"), ytd_gross=Decimal("0"))
    print(result.social_security, result.medicare)  # 186.00 43.50
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.money import ZERO, prorated_base, to_cents
from payroll_engines.tracer import traced_engine
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.fica")


@dataclass(frozen=True)
class FicaRates:
    """FICA parameters for one tax year."""

    social_security_rate: Decimal
    social_security_wage_base: Decimal
    medicare_rate: Decimal
    additional_medicare_rate: Decimal
    additional_medicare_threshold: Decimal

    def __post_init__(self) -> None:
        for name in (
            "social_security_rate",
            "medicare_rate",
            "additional_medicare_rate",
        ):
            rate = getattr(self, name)
            if not (ZERO <= rate <= Decimal("1")):
                raise ValueError(f"{name} must be within [0, 1]: {rate}")
        if self.social_security_wage_base <= ZERO:
            raise ValueError("Social security wage base must be positive")
        if self.additional_medicare_threshold < ZERO:
            raise ValueError("Additional medicare threshold cannot be negative")

    @classmethod
    def for_2024(cls) -> FicaRates:
        """2024 federal rates; used by tests and as documentation."""
        return cls(
            social_security_rate=Decimal("0.062"),
            social_security_wage_base=Decimal("168600"),
            medicare_rate=Decimal("0.0145"),
            additional_medicare_rate=Decimal("0.009"),
            additional_medicare_threshold=Decimal("200000"),
        )


@dataclass(frozen=True)
class FicaResult:
    """Employee FICA for one payment, each component rounded to cents."""

    social_security: Decimal
    medicare: Decimal
    additional_medicare: Decimal
    social_security_taxable: Decimal

    @property
    def total(self) -> Decimal:
        return self.social_security + self.medicare + self.additional_medicare

    @property
    def medicare_total(self) -> Decimal:
        return self.medicare + self.additional_medicare


class FICACalculator:
    """
    Employee-side FICA.

    Contract:
        ``pay`` and ``ytd_gross`` are non-negative; ``ytd_gross`` is the gross
        paid earlier in the same tax year, excluding ``pay``.

    Guarantees:
        - Social security stops exactly at the wage base.
        - Additional medicare applies only to pay above the threshold.
    """

    def __init__(self, rates: FicaRates):
        self.rates = rates

    def social_security(self, pay: Decimal, ytd_gross: Decimal) -> Decimal:
        taxable = prorated_base(pay, ytd_gross, self.rates.social_security_wage_base)
        return taxable * self.rates.social_security_rate

    def medicare(self, pay: Decimal) -> Decimal:
        return pay * self.rates.medicare_rate

    def additional_medicare(self, pay: Decimal, ytd_gross: Decimal) -> Decimal:
        threshold = self.rates.additional_medicare_threshold
        if ytd_gross >= threshold:
            return pay * self.rates.additional_medicare_rate
        if ytd_gross + pay > threshold:
            return (ytd_gross + pay - threshold) * self.rates.additional_medicare_rate
        return ZERO

    @traced_engine("fica", "1.0", fingerprint_fields=("pay", "ytd_gross"))
    def calculate(
        self,
        *,
        pay: Decimal,
        ytd_gross: Decimal,
        ytd_social_security: Decimal = ZERO,
    ) -> FicaResult:
        """
        Employee FICA for one payment.

        ``ytd_social_security`` is informational: the cap is driven by
        ``ytd_gross`` so that it holds even when earlier payments were exempt.
        """
        if pay < ZERO:
            raise ValueError(f"Pay cannot be negative: {pay}")
        if ytd_gross < ZERO:
            raise ValueError(f"YTD gross cannot be negative: {ytd_gross}")

        ss_taxable = prorated_base(pay, ytd_gross, self.rates.social_security_wage_base)
        result = FicaResult(
            social_security=to_cents(ss_taxable * self.rates.social_security_rate),
            medicare=to_cents(self.medicare(pay)),
            additional_medicare=to_cents(self.additional_medicare(pay, ytd_gross)),
            social_security_taxable=ss_taxable,
        )

        if ss_taxable < pay:
            logger.info(
                "social_security_wage_base_reached",
                extra={
                    "pay": str(pay),
                    "ytd_gross": str(ytd_gross),
                    "ytd_social_security": str(ytd_social_security),
                    "taxable": str(ss_taxable),
                },
            )
        return result
