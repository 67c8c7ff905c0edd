"""
Tests for SQL literal encoding and insert-row sniffing.
"""
import datetime
import decimal

import pytest

from schemaforge.database.literals import (
    boolean_literal,
    coerce_insert_value,
    format_value,
    is_numeric_text,
    parse_row_key,
    quote_string,
)


class TestFormatValue:
    """Tests for format_value()"""

    def test_basic_values(self):
        assert format_value(None) == "NULL"
        assert format_value(42) == "42"
        assert format_value("O'Brien") == "'O''Brien'"
        assert format_value(decimal.Decimal("1.50")) == "1.50"
        assert format_value(2.5) == "2.5"

    def test_booleans_per_dialect(self):
        """SQL Server has no boolean literal"""
        assert format_value(True, "postgres") == "TRUE"
        assert format_value(False, "mysql") == "FALSE"
        assert format_value(True, "mssql") == "1"
        assert boolean_literal(False, "mssql") == "0"

    def test_bool_is_not_treated_as_int(self):
        assert format_value(True) == "TRUE"

    def test_bytes_per_dialect(self):
        data = b"\x01\xff"
        assert format_value(data, "postgres") == "'\\x01ff'"
        assert format_value(data, "mysql") == "X'01ff'"
        assert format_value(data, "mssql") == "0x01ff"

    def test_dates(self):
        assert format_value(datetime.date(2024, 1, 31)) == "'2024-01-31'"
        assert format_value(datetime.datetime(2024, 1, 31, 8, 30)) == "'2024-01-31 08:30:00'"

    def test_non_finite_numbers_are_quoted(self):
        assert format_value(float("nan")) == "'nan'"

    def test_mysql_doubles_backslashes(self):
        """MySQL treats backslash as an escape inside strings"""
        assert format_value("a\\b", "mysql") == "'a\\\\b'"
        assert format_value("a\\b", "postgres") == "'a\\b'"

    def test_quote_string(self):
        assert quote_string("it's") == "'it''s'"


class TestCoerceInsertValue:
    """Tests for insert-row text sniffing"""

    @pytest.mark.parametrize("raw,expected", [
        ("null", "NULL"),
        ("NULL", "NULL"),
        (" true ", "TRUE"),
        ("False", "FALSE"),
        ("42", "42"),
        (" 42 ", "42"),
        ("-1.5e3", "-1.5e3"),
        (".5", ".5"),
        ("12abc", "'12abc'"),
        ("O'Brien", "'O''Brien'"),
    ])
    def test_sniffing(self, raw, expected):
        assert coerce_insert_value(raw, "postgres") == expected

    def test_mssql_booleans(self):
        assert coerce_insert_value("true", "mssql") == "1"
        assert coerce_insert_value("false", "mssql") == "0"

    def test_text_keeps_surrounding_spaces(self):
        """Only sniffed values are stripped"""
        assert coerce_insert_value("  x ") == "'  x '"

    def test_is_numeric_text(self):
        assert is_numeric_text("+3")
        assert is_numeric_text("3.")
        assert not is_numeric_text("1,000")
        assert not is_numeric_text("")


class TestParseRowKey:
    """Tests for parse_row_key()"""

    def test_types(self):
        assert parse_row_key("42") == 42
        assert parse_row_key("-7") == -7
        assert parse_row_key("4.5") == 4.5
        assert parse_row_key("abc") == "abc"
