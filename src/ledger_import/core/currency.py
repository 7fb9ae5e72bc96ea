#!/usr/bin/env python3
"""
Currency Parsing and Formatting Utilities

All amounts handled by the import pipeline are integers in minor currency
units (cents). Statement exports express amounts as free-form text, so this
module turns those strings into cents without ever going through float.

Supported input quirks:
- Currency symbols and whitespace: "$1,234.56", "€ 12,50"
- Thousands separators in either convention: "1,234.56", "1.234,56"
- A lone "," or "." is read the same way for both: followed by exactly three
  digits it groups thousands ("12,345" and "12.345" are both 12345.00),
  otherwise it is the decimal mark ("12,5" and "12.5" are both 12.50)
- Negative amounts as "-12.34", "12.34-" or "(12.34)"
- Spreadsheet formula escaping: '="123.45"'
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

_FORMULA_RE = re.compile(r'^="(.*)"$', re.DOTALL)
_QUOTED_RE = re.compile(r'^"(.*)"$', re.DOTALL)
_NON_NUMERIC_RE = re.compile(r"[^0-9,.]")


def clean_formula_value(value: object) -> str:
    """
    Strip spreadsheet formula notation from an exported cell.

    Examples:
        clean_formula_value('="6674"') -> "6674"
        clean_formula_value('"6674"') -> "6674"
        clean_formula_value("6674") -> "6674"
    """
    if value is None:
        return ""
    text = str(value).strip()
    if not text:
        return ""
    text = _FORMULA_RE.sub(r"\1", text)
    return _QUOTED_RE.sub(r"\1", text).strip()


def _normalize_separators(digits: str) -> str:
    """Reduce a digits-and-separators string to a plain decimal literal."""
    has_comma = "," in digits
    has_dot = "." in digits

    if has_comma and has_dot:
        # Whichever separator appears last is the decimal mark
        if digits.rfind(",") > digits.rfind("."):
            return digits.replace(".", "").replace(",", ".")
        return digits.replace(",", "")

    if not (has_comma or has_dot):
        return digits

    # Only one kind of separator: repeated, or followed by exactly three digits, means thousands
    separator = "," if has_comma else "."
    head, _, tail = digits.rpartition(separator)
    if digits.count(separator) > 1 or (len(tail) == 3 and head not in ("", "0")):
        return digits.replace(separator, "")
    return f"{head or 0}.{tail}"


def parse_amount_to_cents(value: Union[str, int, float, None]) -> int | None:
    """
    Parse a statement amount into signed integer cents.

    Args:
        value: Raw cell value

    Returns:
        Signed cents, or None when the value holds no parseable number

    Examples:
        parse_amount_to_cents("1,234.56") -> 123456
        parse_amount_to_cents("(45.00)") -> -4500
        parse_amount_to_cents('="-12.5"') -> -1250
        parse_amount_to_cents("12,50") -> 1250
        parse_amount_to_cents("FREE") -> None
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value * 100
    if isinstance(value, float):
        if value != value:  # NaN from spreadsheet readers
            return None
        return int((Decimal(str(value)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    text = clean_formula_value(value)
    if not text:
        return None

    negative = text.startswith("-") or text.endswith("-") or (text.startswith("(") and text.endswith(")"))
    digits = _NON_NUMERIC_RE.sub("", text)
    if not any(ch.isdigit() for ch in digits):
        return None

    literal = _normalize_separators(digits)
    try:
        amount = Decimal(literal)
    except InvalidOperation:
        return None

    cents = int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return -cents if negative else cents


def parse_amount_or_zero(value: Union[str, int, float, None]) -> int:
    """Parse a statement amount, treating unparseable input as zero cents."""
    cents = parse_amount_to_cents(value)
    return 0 if cents is None else cents


def parse_integer(value: object, default: int = 0) -> int:
    """Parse an integer cell (quantities), tolerating formula escaping."""
    text = clean_formula_value(value)
    if not text:
        return default
    try:
        return int(Decimal(text.replace(",", "")))
    except (InvalidOperation, ValueError):
        return default


def cents_to_dollars_str(cents: int) -> str:
    """
    Convert cents to a decimal string using pure integer arithmetic.

    Example:
        cents_to_dollars_str(4599) -> "45.99"
    """
    is_negative = cents < 0
    abs_cents = abs(int(cents))

    dollars = abs_cents // 100
    remainder = abs_cents % 100

    if is_negative:
        return f"-{dollars}.{remainder:02d}"
    return f"{dollars}.{remainder:02d}"


def format_cents(cents: int) -> str:
    """Format cents as dollar string with $ prefix."""
    return f"${cents_to_dollars_str(cents)}"
