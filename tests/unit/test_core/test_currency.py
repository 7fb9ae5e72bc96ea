#!/usr/bin/env python3
"""Tests for core currency utilities."""

import pytest

from ledger_import.core.currency import (
    cents_to_dollars_str,
    clean_formula_value,
    format_cents,
    parse_amount_or_zero,
    parse_amount_to_cents,
    parse_integer,
)


class TestAmountParsing:
    """Test statement amount parsing into integer cents."""

    @pytest.mark.currency
    def test_plain_and_symbol_amounts(self):
        assert parse_amount_to_cents("45.99") == 4599
        assert parse_amount_to_cents("$45.99") == 4599
        assert parse_amount_to_cents("12") == 1200
        assert parse_amount_to_cents("12.5") == 1250
        assert parse_amount_to_cents("  7.05 ") == 705

    @pytest.mark.currency
    def test_thousands_separators(self):
        """Both separator conventions resolve to the same cents."""
        assert parse_amount_to_cents("1,234.56") == 123456
        assert parse_amount_to_cents("1.234,56") == 123456
        assert parse_amount_to_cents("1,234") == 123400
        assert parse_amount_to_cents("12,50") == 1250
        assert parse_amount_to_cents("1.234.567") == 123456700

    @pytest.mark.currency
    def test_lone_separator_reads_the_same_either_way(self):
        assert parse_amount_to_cents("12,345") == parse_amount_to_cents("12.345") == 1234500
        assert parse_amount_to_cents("1.234") == 123400
        assert parse_amount_to_cents("12,5") == parse_amount_to_cents("12.5") == 1250
        assert parse_amount_to_cents("0.125") == 13
        assert parse_amount_to_cents(",50") == 50

    @pytest.mark.currency
    def test_negative_notations(self):
        assert parse_amount_to_cents("-12.34") == -1234
        assert parse_amount_to_cents("12.34-") == -1234
        assert parse_amount_to_cents("(45.00)") == -4500
        assert parse_amount_to_cents("-$1,000.00") == -100000

    @pytest.mark.currency
    def test_formula_escaped_values(self):
        """Spreadsheet exports wrap numbers as ="123.45"."""
        assert parse_amount_to_cents('="123.45"') == 12345
        assert parse_amount_to_cents('="-12.5"') == -1250
        assert parse_amount_to_cents('"86.40"') == 8640

    @pytest.mark.currency
    def test_numeric_inputs(self):
        assert parse_amount_to_cents(45.99) == 4599
        assert parse_amount_to_cents(0.1) == 10
        assert parse_amount_to_cents(12) == 1200
        assert parse_amount_to_cents(float("nan")) is None

    @pytest.mark.currency
    def test_unparseable_amounts(self):
        assert parse_amount_to_cents(None) is None
        assert parse_amount_to_cents("") is None
        assert parse_amount_to_cents("FREE") is None
        assert parse_amount_to_cents("--") is None

    @pytest.mark.currency
    def test_parse_amount_or_zero(self):
        assert parse_amount_or_zero("FREE") == 0
        assert parse_amount_or_zero(None) == 0
        assert parse_amount_or_zero("(1.50)") == -150


class TestCellHelpers:
    """Test formula cleanup and integer cells."""

    @pytest.mark.currency
    def test_clean_formula_value(self):
        assert clean_formula_value('="6674"') == "6674"
        assert clean_formula_value('"6674"') == "6674"
        assert clean_formula_value("6674") == "6674"
        assert clean_formula_value(None) == ""
        assert clean_formula_value("   ") == ""

    @pytest.mark.currency
    def test_parse_integer(self):
        assert parse_integer('="3"') == 3
        assert parse_integer("1,200") == 1200
        assert parse_integer("", default=1) == 1
        assert parse_integer("many") == 0


class TestCurrencyFormatting:
    """Test formatting cents for display."""

    @pytest.mark.currency
    def test_cents_to_dollars_str(self):
        assert cents_to_dollars_str(4599) == "45.99"
        assert cents_to_dollars_str(5) == "0.05"
        assert cents_to_dollars_str(0) == "0.00"
        assert cents_to_dollars_str(-4599) == "-45.99"

    @pytest.mark.currency
    def test_format_cents(self):
        assert format_cents(4599) == "$45.99"
        assert format_cents(-100) == "$-1.00"
