"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads tax table YAML files and parses them into typed
``payroll_config.schema`` dataclass instances.  Services never call this
directly; the runtime entry point is ``payroll_config.get_tax_tables()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on PyYAML and the
schema only.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* Money and rates parse to ``Decimal``.  YAML floats are converted through
  their string form, never through binary float arithmetic.
* ``compute_checksum`` is a deterministic SHA-256 of the parsed document.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import (
    BracketDef,
    FicaDef,
    FilingStatusDef,
    TaxTableSet,
    UnemploymentDef,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_decimal(value: Any, field: str) -> Decimal:
    """Parse a Decimal from a YAML scalar."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{field}: expected a number, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{field}: cannot parse {value!r} as a decimal") from exc


def parse_bracket(data: dict[str, Any], where: str) -> BracketDef:
    ceiling = data.get("ceiling")
    return BracketDef(
        floor=parse_decimal(data["floor"], f"{where}.floor"),
        ceiling=parse_decimal(ceiling, f"{where}.ceiling") if ceiling is not None else None,
        base_tax=parse_decimal(data["base_tax"], f"{where}.base_tax"),
        rate=parse_decimal(data["rate"], f"{where}.rate"),
    )


def parse_filing_status(name: str, data: dict[str, Any]) -> FilingStatusDef:
    brackets = data["brackets"]
    if not brackets:
        raise ValueError(f"Filing status {name} has no brackets")
    return FilingStatusDef(
        filing_status=name,
        standard_deduction=parse_decimal(
            data["standard_deduction"], f"{name}.standard_deduction"
        ),
        brackets=tuple(
            parse_bracket(b, f"{name}.brackets[{i}]") for i, b in enumerate(brackets)
        ),
    )


def parse_fica(data: dict[str, Any]) -> FicaDef:
    return FicaDef(
        **{
            key: parse_decimal(data[key], f"fica.{key}")
            for key in (
                "social_security_rate",
                "social_security_wage_base",
                "medicare_rate",
                "additional_medicare_rate",
                "additional_medicare_threshold",
            )
        }
    )


def parse_unemployment(data: dict[str, Any], name: str) -> UnemploymentDef:
    return UnemploymentDef(
        rate=parse_decimal(data["rate"], f"unemployment.{name}.rate"),
        wage_base=parse_decimal(data["wage_base"], f"unemployment.{name}.wage_base"),
    )


def parse_tax_table_set(data: dict[str, Any]) -> TaxTableSet:
    """
    Parse a ``TaxTableSet`` from a YAML document.

    Postconditions:
        - ``checksum`` is set from the raw document.
    Raises:
        KeyError: if required keys are missing.
        ValueError: if a number or date cannot be parsed.
    """
    withholding = data["withholding"]
    unemployment = data["unemployment"]
    return TaxTableSet(
        tax_table_id=data["tax_table_id"],
        version=int(data.get("version", 1)),
        jurisdiction=data["jurisdiction"],
        tax_year=int(data["tax_year"]),
        effective_from=parse_date(data["effective_from"]),
        effective_to=parse_date(data["effective_to"]) if data.get("effective_to") else None,
        allowance_amount=parse_decimal(
            withholding.get("allowance_amount", "0"), "withholding.allowance_amount"
        ),
        filing_statuses=tuple(
            parse_filing_status(name, fs)
            for name, fs in sorted(withholding["filing_statuses"].items())
        ),
        fica=parse_fica(data["fica"]),
        futa=parse_unemployment(unemployment["futa"], "futa"),
        suta=parse_unemployment(unemployment["suta"], "suta"),
        checksum=compute_checksum(data),
    )


def load_tax_table_set(path: Path) -> TaxTableSet:
    """Load and parse one tax table YAML file."""
    return parse_tax_table_set(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
