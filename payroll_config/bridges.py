"""
Config-to-engine bridges (``payroll_config.bridges``).

Responsibility
--------------
Translate a parsed ``TaxTableSet`` into the objects the pure engines
consume.  Engines never see YAML or schema types; the config layer never
does arithmetic.

Invariants enforced
-------------------
* Bracket tables are validated by ``BracketTable`` at build time: a set with
  gaps, overlaps or discontinuous base tax fails loudly here, not on the
  first paycheck.
"""

from __future__ import annotations

from dataclasses import dataclass

from payroll_config.schema import FilingStatusDef, TaxTableSet
from payroll_engines.brackets import BracketTable, TaxBracket, TaxBracketEngine
from payroll_engines.employer_tax import EmployerTaxLiabilityCalculator
from payroll_engines.fica import FICACalculator, FicaRates
from payroll_engines.unemployment import UnemploymentRate
from payroll_kernel.exceptions import InvalidTaxTableError


@dataclass(frozen=True)
class TaxTables:
    """
    Runtime tax tables for one year: engine-ready and checksummed.

    Contract:
        Built only through ``build_tax_tables``.
    Guarantees:
        Every filing status in the source set has a validated BracketTable.
    """

    version_label: str
    checksum: str
    tax_year: int
    jurisdiction: str
    bracket_tables: dict[str, BracketTable]
    bracket_engine: TaxBracketEngine
    fica_rates: FicaRates
    futa: UnemploymentRate
    suta: UnemploymentRate

    def table_for(self, filing_status: str) -> BracketTable:
        try:
            return self.bracket_tables[filing_status]
        except KeyError:
            raise InvalidTaxTableError(
                source=self.version_label,
                reason=f"no withholding table for filing status {filing_status}",
            ) from None

    def fica_calculator(self) -> FICACalculator:
        return FICACalculator(self.fica_rates)

    def employer_tax_calculator(self) -> EmployerTaxLiabilityCalculator:
        return EmployerTaxLiabilityCalculator(self.fica_rates, self.futa, self.suta)


def build_bracket_table(fs: FilingStatusDef) -> BracketTable:
    return BracketTable(
        filing_status=fs.filing_status,
        standard_deduction=fs.standard_deduction,
        brackets=tuple(
            TaxBracket(
                floor=b.floor,
                ceiling=b.ceiling,
                base_tax=b.base_tax,
                rate=b.rate,
            )
            for b in fs.brackets
        ),
    )


def build_tax_tables(table_set: TaxTableSet) -> TaxTables:
    """
    Build engine inputs from a parsed set.

    Raises:
        InvalidTaxTableError: if any table fails engine validation.
    """
    try:
        bracket_tables = {
            fs.filing_status: build_bracket_table(fs) for fs in table_set.filing_statuses
        }
        fica_rates = FicaRates(
            social_security_rate=table_set.fica.social_security_rate,
            social_security_wage_base=table_set.fica.social_security_wage_base,
            medicare_rate=table_set.fica.medicare_rate,
            additional_medicare_rate=table_set.fica.additional_medicare_rate,
            additional_medicare_threshold=table_set.fica.additional_medicare_threshold,
        )
        futa = UnemploymentRate("FUTA", table_set.futa.rate, table_set.futa.wage_base)
        suta = UnemploymentRate("SUTA", table_set.suta.rate, table_set.suta.wage_base)
        engine = TaxBracketEngine(allowance_amount=table_set.allowance_amount)
    except ValueError as exc:
        raise InvalidTaxTableError(source=table_set.version_label, reason=str(exc)) from exc

    return TaxTables(
        version_label=table_set.version_label,
        checksum=table_set.checksum,
        tax_year=table_set.tax_year,
        jurisdiction=table_set.jurisdiction,
        bracket_tables=bracket_tables,
        bracket_engine=engine,
        fica_rates=fica_rates,
        futa=futa,
        suta=suta,
    )
