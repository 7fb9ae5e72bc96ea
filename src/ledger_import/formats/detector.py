#!/usr/bin/env python3
"""
Statement Format Detection

Classifies a CSV header row into one of the known export dialects. A dialect
is only selected when a quorum of its signature columns is present, so a
generic CSV that happens to contain "Date" or "Description" stays generic.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum


class StatementFormat(Enum):
    """Known statement export dialects."""

    AMAZON = "amazon"
    AMEX = "amex"
    CHASE = "chase"
    GENERIC = "generic"


@dataclass(frozen=True)
class FormatSignature:
    """Signature columns for one dialect and the quorum needed to claim it."""

    format: StatementFormat
    columns: frozenset[str]
    min_matches: int

    def matches(self, normalized_headers: set[str]) -> int:
        return len(self.columns & normalized_headers)


# Checked in order; first dialect reaching its quorum wins.
SIGNATURES: tuple[FormatSignature, ...] = (
    FormatSignature(
        StatementFormat.AMAZON,
        frozenset(
            {
                "order id",
                "asin",
                "charge identifier",
                "payment reference id",
                "payment instrument type",
                "item quantity",
                "payment amount",
                "item subtotal",
            }
        ),
        min_matches=3,
    ),
    FormatSignature(
        StatementFormat.CHASE,
        frozenset({"transaction date", "post date", "description", "amount", "type"}),
        min_matches=4,
    ),
    FormatSignature(
        StatementFormat.AMEX,
        frozenset({"date", "description", "amount", "reference"}),
        min_matches=3,
    ),
)

FORMAT_INFO: dict[StatementFormat, dict[str, str]] = {
    StatementFormat.AMAZON: {
        "name": "Amazon Business Order Report",
        "description": "Multiple items per order are grouped into one transaction",
    },
    StatementFormat.AMEX: {
        "name": "American Express Statement",
        "description": "One transaction per row",
    },
    StatementFormat.CHASE: {
        "name": "Chase Credit Card Statement",
        "description": "Charges become expenses, refunds become income",
    },
    StatementFormat.GENERIC: {
        "name": "Generic CSV",
        "description": "Manual column mapping required",
    },
}


def normalize_header(header: object) -> str:
    """Trim, drop a UTF-8 BOM and lowercase a header cell."""
    return str(header or "").replace("\ufeff", "").strip().lower()


def detect_format(headers: Sequence[str]) -> StatementFormat:
    """
    Detect the statement dialect from its header row.

    Pure and total: unknown or empty headers yield GENERIC.
    """
    normalized = {normalize_header(h) for h in headers}

    for signature in SIGNATURES:
        if signature.matches(normalized) >= signature.min_matches:
            return signature.format

    return StatementFormat.GENERIC
