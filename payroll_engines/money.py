"""
Decimal helpers shared by the payroll engines.

All payroll arithmetic happens on ``Decimal``.  Intermediate values stay
unrounded; each reported component is rounded to cents exactly once with
ROUND_HALF_UP.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_cents(amount: Decimal) -> Decimal:
    """Round to cents, half up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def prorated_base(pay: Decimal, ytd_gross: Decimal, wage_base: Decimal) -> Decimal:
    """
    Portion of ``pay`` still under an annual ``wage_base``.

    Zero once ``ytd_gross`` has reached the base, otherwise
    ``min(pay, wage_base - ytd_gross)``.
    """
    if ytd_gross >= wage_base:
        return ZERO
    return min(pay, wage_base - ytd_gross)
