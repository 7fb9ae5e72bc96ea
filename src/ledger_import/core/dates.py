#!/usr/bin/env python3
"""
FinancialDate Primitive Type

Immutable date wrapper used for every issued/payment date that flows through
the import pipeline. Statement exports disagree on date formats, so parsing
accepts a list of candidate formats and never raises for bad input.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .currency import clean_formula_value

# Formats seen in US card-issuer and marketplace exports, most specific first
STATEMENT_DATE_FORMATS = ("%m/%d/%Y", "%Y-%m-%d", "%m/%d/%y", "%Y/%m/%d", "%d.%m.%Y")


@dataclass(frozen=True, order=True)
class FinancialDate:
    """Immutable financial date wrapper with consistent formatting."""

    date: date

    @classmethod
    def from_string(cls, date_str: str, format: str = "%Y-%m-%d") -> "FinancialDate":
        """
        Parse from string in specified format.

        Raises:
            ValueError: If the string does not match the format
        """
        return cls(date=datetime.strptime(date_str.strip(), format).date())

    @classmethod
    def from_value(cls, value: object) -> "FinancialDate | None":
        """Coerce a date, datetime, FinancialDate or ISO string; None if impossible."""
        if value is None or value == "":
            return None
        if isinstance(value, FinancialDate):
            return value
        if isinstance(value, datetime):
            return cls(date=value.date())
        if isinstance(value, date):
            return cls(date=value)
        return parse_statement_date(str(value))

    @classmethod
    def today(cls) -> "FinancialDate":
        """Get today's date."""
        return cls(date=date.today())

    def to_iso_string(self) -> str:
        """Format as YYYY-MM-DD."""
        return self.date.isoformat()

    def shift(self, days: int) -> "FinancialDate":
        """Return a new date offset by the given number of days."""
        return FinancialDate(date=self.date + timedelta(days=days))

    def days_between(self, other: "FinancialDate") -> int:
        """Absolute number of calendar days between two dates."""
        return abs((other.date - self.date).days)

    def __str__(self) -> str:
        return self.to_iso_string()

    def __repr__(self) -> str:
        return f"FinancialDate(date={self.date!r})"


def parse_statement_date(
    value: object, formats: tuple[str, ...] = STATEMENT_DATE_FORMATS
) -> FinancialDate | None:
    """
    Parse a statement date cell, trying each format in order.

    Handles formula-escaped cells ('="08/02/2024"') and ISO timestamps
    ("2024-08-02T00:00:00").

    Returns:
        FinancialDate, or None if no format matched
    """
    text = clean_formula_value(value)
    if not text:
        return None

    for fmt in formats:
        try:
            return FinancialDate.from_string(text, fmt)
        except ValueError:
            continue

    try:
        return FinancialDate(date=datetime.fromisoformat(text).date())
    except ValueError:
        return None
