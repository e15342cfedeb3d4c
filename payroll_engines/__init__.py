"""
Module: payroll_engines
Responsibility:
    Package entrypoint re-exporting the pure payroll calculators.  This is
    the canonical import surface for payroll_modules and payroll_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel.logging_config (and sibling engines).
    MUST NOT import payroll_config, payroll_modules or payroll_services.

Invariants enforced:
    - Purity: engines never read the clock, the database or files.  Rates,
      tables and year-to-date totals are passed in.
    - Decimal-only arithmetic; floats are rejected at the boundary.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Engine invocations are traced with ``@traced_engine`` (see
    ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE records with
    an input fingerprint.
"""

from payroll_engines.brackets import (
    BracketTable,
    TaxBracket,
    TaxBracketEngine,
    WithholdingResult,
)
from payroll_engines.employer_tax import (
    EmployerTaxLiability,
    EmployerTaxLiabilityCalculator,
)
from payroll_engines.fica import FICACalculator, FicaRates, FicaResult
from payroll_engines.gross_pay import (
    CompensationType,
    GrossPayCalculator,
    GrossPayResult,
    HoursWorked,
)
from payroll_engines.money import CENT, ZERO, to_cents
from payroll_engines.periods import PayFrequency, PayPeriodConverter
from payroll_engines.unemployment import UnemploymentRate, UnemploymentTaxCalculator

__all__ = [
    "BracketTable",
    "TaxBracket",
    "TaxBracketEngine",
    "WithholdingResult",
    "EmployerTaxLiability",
    "EmployerTaxLiabilityCalculator",
    "FICACalculator",
    "FicaRates",
    "FicaResult",
    "CompensationType",
    "GrossPayCalculator",
    "GrossPayResult",
    "HoursWorked",
    "CENT",
    "ZERO",
    "to_cents",
    "PayFrequency",
    "PayPeriodConverter",
    "UnemploymentRate",
    "UnemploymentTaxCalculator",
]
