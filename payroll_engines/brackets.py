"""
Progressive Tax Bracket Engine - annual income tax from a bracket table.

Pure functions with no I/O.  Bracket tables are data (see payroll_config);
this module only knows how to validate and evaluate them.

A bracket table is an ordered tuple of ``(floor, ceiling, base_tax, rate)``
rows covering ``[0, infinity)`` without gaps.  ``base_tax`` is the cumulative
tax owed at ``floor``, so evaluating one bracket is enough:

    tax(income) = base_tax + (income - floor) * rate

Usage:
    from decimal import Decimal
    from payroll_engines.brackets import BracketTable, TaxBracket, TaxBracketEngine

    table = BracketTable(
        filing_status="single",
        standard_deduction=Decimal("14600"),
        brackets=(
            TaxBracket(Decimal("0"), Decimal("11600"), Decimal("0"), Decimal("0.10")),
            TaxBracket(Decimal("11600"), None, Decimal("1160"), Decimal("0.12")),
        ),
    )
    engine = TaxBracketEngine()
    result = engine.compute_withholding(annual_gross=Decimal("78000"), table=table)
    print(result.annual_tax)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.money import ZERO
from payroll_engines.tracer import traced_engine
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.brackets")


@dataclass(frozen=True)
class TaxBracket:
    """One row of a progressive table.  ``ceiling`` None means open-ended."""

    floor: Decimal
    ceiling: Decimal | None
    base_tax: Decimal
    rate: Decimal

    def __post_init__(self) -> None:
        if self.floor < ZERO:
            raise ValueError(f"Bracket floor cannot be negative: {self.floor}")
        if self.ceiling is not None and self.ceiling <= self.floor:
            raise ValueError(
                f"Bracket ceiling {self.ceiling} must exceed floor {self.floor}"
            )
        if not (ZERO <= self.rate <= Decimal("1")):
            raise ValueError(f"Bracket rate must be within [0, 1]: {self.rate}")
        if self.base_tax < ZERO:
            raise ValueError(f"Bracket base tax cannot be negative: {self.base_tax}")

    def contains(self, income: Decimal) -> bool:
        return income >= self.floor and (self.ceiling is None or income < self.ceiling)

    def tax_at(self, income: Decimal) -> Decimal:
        return self.base_tax + (income - self.floor) * self.rate


@dataclass(frozen=True)
class BracketTable:
    """
    Bracket table for one filing status.

    Contract:
        ``brackets`` are ordered, start at zero, each floor equals the previous
        ceiling, and only the last bracket is open-ended.

    Guarantees:
        Every non-negative income falls in exactly one bracket.
    """

    filing_status: str
    brackets: tuple[TaxBracket, ...]
    standard_deduction: Decimal = ZERO

    def __post_init__(self) -> None:
        if not self.brackets:
            raise ValueError(f"Bracket table {self.filing_status} is empty")
        if self.brackets[0].floor != ZERO:
            raise ValueError(
                f"Bracket table {self.filing_status} must start at 0, "
                f"starts at {self.brackets[0].floor}"
            )
        for previous, current in zip(self.brackets, self.brackets[1:]):
            if previous.ceiling is None:
                raise ValueError(
                    f"Bracket table {self.filing_status}: only the last bracket "
                    f"may be open-ended"
                )
            if current.floor != previous.ceiling:
                raise ValueError(
                    f"Bracket table {self.filing_status}: gap or overlap between "
                    f"{previous.ceiling} and {current.floor}"
                )
            # Cumulative tax must carry over, or tax would jump at the boundary.
            if current.base_tax != previous.tax_at(previous.ceiling):
                raise ValueError(
                    f"Bracket table {self.filing_status}: base tax {current.base_tax} "
                    f"at {current.floor} does not continue the previous bracket "
                    f"({previous.tax_at(previous.ceiling)})"
                )
        if self.brackets[-1].ceiling is not None:
            raise ValueError(
                f"Bracket table {self.filing_status} must end with an open bracket"
            )
        if self.standard_deduction < ZERO:
            raise ValueError("Standard deduction cannot be negative")

    def bracket_for(self, income: Decimal) -> TaxBracket:
        for bracket in self.brackets:
            if bracket.contains(income):
                return bracket
        # Unreachable for income >= 0 on a validated table.
        raise ValueError(f"Income {income} is outside bracket table {self.filing_status}")


@dataclass(frozen=True)
class WithholdingResult:
    """Annual income tax computation, unrounded."""

    annual_gross: Decimal
    taxable_income: Decimal
    annual_tax: Decimal
    bracket: TaxBracket


class TaxBracketEngine:
    """
    Evaluates progressive bracket tables.

    Contract:
        Deterministic, O(number of brackets).  Exempt employees never reach
        this engine; the caller skips it.

    Guarantees:
        - Tax is monotonic non-decreasing in income.
        - Taxable income is floored at zero.
    """

    def __init__(self, allowance_amount: Decimal = Decimal("4400")):
        if allowance_amount < ZERO:
            raise ValueError("Allowance amount cannot be negative")
        self.allowance_amount = allowance_amount

    def tax_on(self, taxable_income: Decimal, table: BracketTable) -> Decimal:
        """Annual tax on already-reduced taxable income."""
        if taxable_income < ZERO:
            raise ValueError(f"Taxable income cannot be negative: {taxable_income}")
        return table.bracket_for(taxable_income).tax_at(taxable_income)

    def taxable_income(
        self,
        annual_gross: Decimal,
        table: BracketTable,
        allowances: int = 0,
    ) -> Decimal:
        if allowances < 0:
            raise ValueError(f"Allowances cannot be negative: {allowances}")
        reduced = annual_gross - table.standard_deduction - self.allowance_amount * allowances
        return max(ZERO, reduced)

    @traced_engine(
        "tax_brackets", "1.0",
        fingerprint_fields=("annual_gross", "allowances"),
    )
    def compute_withholding(
        self,
        *,
        annual_gross: Decimal,
        table: BracketTable,
        allowances: int = 0,
    ) -> WithholdingResult:
        taxable = self.taxable_income(annual_gross, table, allowances)
        annual_tax = self.tax_on(taxable, table)
        bracket = table.bracket_for(taxable)
        logger.debug(
            "federal_tax_computed",
            extra={
                "filing_status": table.filing_status,
                "annual_gross": str(annual_gross),
                "taxable_income": str(taxable),
                "bracket_floor": str(bracket.floor),
                "annual_tax": str(annual_tax),
            },
        )
        return WithholdingResult(
            annual_gross=annual_gross,
            taxable_income=taxable,
            annual_tax=annual_tax,
            bracket=bracket,
        )
