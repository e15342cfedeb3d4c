"""
Tests for tax table configuration: YAML parsing, bridges and the
``get_tax_tables`` entry point.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from payroll_config import get_tax_tables
from payroll_config.bridges import build_tax_tables
from payroll_config.loader import (
    compute_checksum,
    load_tax_table_set,
    load_yaml_file,
    parse_decimal,
    parse_tax_table_set,
)
from payroll_kernel.exceptions import InvalidTaxTableError, TaxTableNotFoundError

SETS_DIR = Path(__file__).resolve().parents[2] / "payroll_config" / "sets"
SAMPLE_SET = SETS_DIR / "us_federal_2024.yaml"


def _sample_data() -> dict:
    return load_yaml_file(SAMPLE_SET)


def _write_set(directory: Path, name: str, data: dict) -> Path:
    path = directory / name
    path.write_text(yaml.safe_dump(data))
    return path


class TestLoader:

    def test_sample_set_parses(self):
        table_set = load_tax_table_set(SAMPLE_SET)
        assert table_set.tax_table_id == "us-federal-2024"
        assert table_set.tax_year == 2024
        assert table_set.jurisdiction == "US-FED"
        assert table_set.allowance_amount == Decimal("4400")
        assert {fs.filing_status for fs in table_set.filing_statuses} == {
            "single",
            "married_filing_jointly",
            "married_filing_separately",
            "head_of_household",
        }
        assert table_set.version_label == "us-federal-2024@v1"

    def test_fica_and_unemployment(self):
        table_set = load_tax_table_set(SAMPLE_SET)
        assert table_set.fica.social_security_wage_base == Decimal("168600")
        assert table_set.futa.rate == Decimal("0.006")
        assert table_set.suta.wage_base == Decimal("7000")

    def test_checksum_is_stable(self):
        data = _sample_data()
        assert compute_checksum(data) == compute_checksum(_sample_data())
        assert parse_tax_table_set(data).checksum == compute_checksum(data)

    def test_checksum_changes_with_content(self):
        data = _sample_data()
        before = compute_checksum(data)
        data["fica"]["medicare_rate"] = "0.015"
        assert compute_checksum(data) != before

    def test_null_value_rejected(self):
        with pytest.raises(ValueError, match="expected a number"):
            parse_decimal(None, "fica.medicare_rate")

    def test_missing_section_raises_key_error(self):
        data = _sample_data()
        del data["fica"]
        with pytest.raises(KeyError):
            parse_tax_table_set(data)


class TestBridges:

    def test_build_tax_tables(self):
        tables = build_tax_tables(load_tax_table_set(SAMPLE_SET))
        assert tables.tax_year == 2024
        assert tables.bracket_engine.allowance_amount == Decimal("4400")
        assert tables.table_for("single").standard_deduction == Decimal("14600")

    def test_unknown_filing_status(self):
        tables = build_tax_tables(load_tax_table_set(SAMPLE_SET))
        with pytest.raises(InvalidTaxTableError):
            tables.table_for("qualifying_widow")

    def test_broken_brackets_become_invalid_tax_table(self):
        data = _sample_data()
        data["withholding"]["filing_statuses"]["single"]["brackets"][1]["base_tax"] = "1000"
        with pytest.raises(InvalidTaxTableError, match="does not continue"):
            build_tax_tables(parse_tax_table_set(data))


class TestGetTaxTables:

    def test_2024(self, captured_logs):
        tables = get_tax_tables(2024)
        assert tables.version_label == "us-federal-2024@v1"
        assert len(tables.checksum) == 64

        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_CONFIG_TRACE"]
        assert traces
        assert traces[-1]["tax_table"] == "us-federal-2024@v1"

    def test_missing_year(self):
        with pytest.raises(TaxTableNotFoundError) as exc_info:
            get_tax_tables(1999)
        assert exc_info.value.tax_year == 1999
        assert exc_info.value.code == "TAX_TABLE_NOT_FOUND"

    def test_unknown_jurisdiction(self):
        with pytest.raises(TaxTableNotFoundError):
            get_tax_tables(2024, jurisdiction="US-CA")

    def test_custom_directory(self, tmp_path):
        data = _sample_data()
        data["tax_year"] = 2025
        data["tax_table_id"] = "us-federal-2025"
        _write_set(tmp_path, "us_federal_2025.yaml", data)

        tables = get_tax_tables(2025, config_dir=tmp_path)
        assert tables.version_label == "us-federal-2025@v1"

    def test_ambiguous_sets_rejected(self, tmp_path):
        data = _sample_data()
        _write_set(tmp_path, "a.yaml", data)
        _write_set(tmp_path, "b.yaml", data)
        with pytest.raises(InvalidTaxTableError, match="several sets"):
            get_tax_tables(2024, config_dir=tmp_path)


class TestEffectiveDates:

    def test_payment_date_inside_range(self):
        tables = get_tax_tables(2024, as_of=date(2024, 7, 3))
        assert tables.version_label == "us-federal-2024@v1"

    def test_payment_date_outside_range(self, tmp_path):
        data = _sample_data()
        data["effective_from"] = "2024-07-01"
        _write_set(tmp_path, "us_federal_2024.yaml", data)

        with pytest.raises(TaxTableNotFoundError) as exc_info:
            get_tax_tables(2024, config_dir=tmp_path, as_of=date(2024, 3, 15))
        assert exc_info.value.as_of == date(2024, 3, 15)
        assert "effective on 2024-03-15" in str(exc_info.value)

    def test_mid_year_revision_selected_by_payment_date(self, tmp_path):
        first_half = _sample_data()
        first_half["effective_to"] = "2024-06-30"
        second_half = _sample_data()
        second_half["version"] = 2
        second_half["effective_from"] = "2024-07-01"
        second_half["fica"]["medicare_rate"] = "0.0150"
        _write_set(tmp_path, "us_federal_2024_h1.yaml", first_half)
        _write_set(tmp_path, "us_federal_2024_h2.yaml", second_half)

        spring = get_tax_tables(2024, config_dir=tmp_path, as_of=date(2024, 3, 15))
        autumn = get_tax_tables(2024, config_dir=tmp_path, as_of=date(2024, 9, 13))
        assert spring.version_label == "us-federal-2024@v1"
        assert autumn.version_label == "us-federal-2024@v2"
        assert spring.checksum != autumn.checksum

    def test_open_ended_set(self, tmp_path):
        data = _sample_data()
        data["effective_to"] = None
        _write_set(tmp_path, "us_federal_2024.yaml", data)

        tables = get_tax_tables(2024, config_dir=tmp_path, as_of=date(2024, 12, 31))
        assert tables.tax_year == 2024
