"""
payroll_config -- single public entrypoint for payroll tax configuration.

Responsibility:
    ``get_tax_tables()`` is the ONLY way to obtain tax tables at runtime.
    No calculator or service reads YAML directly.

Architecture position:
    Configuration -- sits above ``payroll_kernel`` and ``payroll_engines``
    and below ``payroll_modules`` / ``payroll_services``.  The kernel and
    engines MUST NEVER import from ``payroll_config``.

Invariants enforced:
    - A missing year is an error, never a silent fallback to another year.
    - A set is only used for payment dates inside its effective range.
    - Two sets claiming the same jurisdiction and year is an error.

Failure modes:
    - ``TaxTableNotFoundError`` -- no set for the requested year.
    - ``InvalidTaxTableError`` -- duplicate or structurally invalid set.
    - ``yaml.YAMLError`` / ``KeyError`` / ``ValueError`` -- malformed file.

Audit relevance:
    Every successful call emits a ``PAYROLL_CONFIG_TRACE`` log entry with the
    table id, version and checksum.  Payroll records store the version label
    and checksum of the tables that produced them.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

from payroll_config.bridges import TaxTables, build_tax_tables
from payroll_config.loader import load_tax_table_set
from payroll_config.schema import TaxTableSet
from payroll_kernel.exceptions import InvalidTaxTableError, TaxTableNotFoundError
from payroll_kernel.logging_config import get_logger

logger = get_logger("config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

DEFAULT_JURISDICTION = "US-FED"


def _covers(table_set: TaxTableSet, as_of: date | None) -> bool:
    if as_of is None:
        return True
    return table_set.effective_from <= as_of and (
        table_set.effective_to is None or table_set.effective_to >= as_of
    )


def _find_table_set(
    sets_dir: Path, tax_year: int, jurisdiction: str, as_of: date | None,
) -> TaxTableSet:
    matches: list[tuple[Path, TaxTableSet]] = []
    for path in sorted(sets_dir.glob("*.yaml")):
        table_set = load_tax_table_set(path)
        if (
            table_set.tax_year == tax_year
            and table_set.jurisdiction == jurisdiction
            and _covers(table_set, as_of)
        ):
            matches.append((path, table_set))

    if not matches:
        raise TaxTableNotFoundError(
            tax_year=tax_year, jurisdiction=jurisdiction, as_of=as_of,
        )
    if len(matches) > 1:
        raise InvalidTaxTableError(
            source=", ".join(p.name for p, _ in matches),
            reason=f"several sets claim {jurisdiction} {tax_year}",
        )
    return matches[0][1]


def get_tax_tables(
    tax_year: int,
    jurisdiction: str = DEFAULT_JURISDICTION,
    config_dir: Path | None = None,
    as_of: date | None = None,
) -> TaxTables:
    """The ONLY public tax-table entrypoint.

    Args:
        tax_year: Calendar year of the payment date.
        jurisdiction: Jurisdiction code declared by the set.
        config_dir: Override path to the sets directory.
            Defaults to payroll_config/sets/.
        as_of: Payment date the set must be effective on. When omitted only
            the year and jurisdiction are matched.

    Raises:
        TaxTableNotFoundError: no set for the year, or none effective on
            ``as_of``.
        InvalidTaxTableError: the set fails validation or is ambiguous.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    table_set = _find_table_set(sets_dir, tax_year, jurisdiction, as_of)
    tables = build_tax_tables(table_set)

    logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "tax_table": tables.version_label,
            "tax_year": tax_year,
            "jurisdiction": jurisdiction,
            "as_of": as_of,
            "checksum": tables.checksum,
            "filing_statuses": sorted(tables.bracket_tables),
        },
    )
    return tables


__all__ = [
    "DEFAULT_JURISDICTION",
    "TaxTables",
    "TaxTableSet",
    "get_tax_tables",
]
