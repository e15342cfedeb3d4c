"""
TaxTableSet schema.

The human-authored, reviewable source artifact for payroll tax rates.  YAML
files under ``payroll_config/sets`` are parsed into these types by the
loader and turned into engine inputs by the bridges.

Key distinction:
  TaxTableSet  = source artifact (versioned YAML, checksummed)
  TaxTables    = runtime artifact (engine objects, see bridges.py)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class BracketDef:
    floor: Decimal
    ceiling: Decimal | None
    base_tax: Decimal
    rate: Decimal


@dataclass(frozen=True)
class FilingStatusDef:
    """Withholding table for one filing status."""

    filing_status: str
    standard_deduction: Decimal
    brackets: tuple[BracketDef, ...]


@dataclass(frozen=True)
class FicaDef:
    social_security_rate: Decimal
    social_security_wage_base: Decimal
    medicare_rate: Decimal
    additional_medicare_rate: Decimal
    additional_medicare_threshold: Decimal


@dataclass(frozen=True)
class UnemploymentDef:
    rate: Decimal
    wage_base: Decimal


@dataclass(frozen=True)
class TaxTableSet:
    """
    One jurisdiction's payroll tax tables for one tax year.

    ``checksum`` is the SHA-256 of the parsed YAML; records store it so an
    auditor can tell exactly which tables produced a paycheck.
    """

    tax_table_id: str
    version: int
    jurisdiction: str
    tax_year: int
    effective_from: date
    effective_to: date | None
    allowance_amount: Decimal
    filing_statuses: tuple[FilingStatusDef, ...]
    fica: FicaDef
    futa: UnemploymentDef
    suta: UnemploymentDef
    checksum: str = ""

    @property
    def version_label(self) -> str:
        return f"{self.tax_table_id}@v{self.version}"
