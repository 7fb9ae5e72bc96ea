#!/usr/bin/env python3
"""
Card-Issuer Statement Mappers

Row-per-transaction dialects: each statement row maps to one candidate.

Amounts are stored by absolute value; a negative statement amount (minus sign
or parentheses) marks money coming back to the card and becomes income.
When the export has no stable reference column, the import reference falls
back to a deterministic "date|description|amount" composite so re-importing the
same statement still matches exactly.
"""

import logging
import re
from typing import Any

from ..core.currency import parse_amount_to_cents
from ..core.dates import parse_statement_date
from ..core.models import TransactionCandidate, TransactionType
from .context import ParseContext

logger = logging.getLogger(__name__)

CARD_DATE_FORMATS = ("%m/%d/%Y",)
CARD_PAYMENT_MARKER = "ONLINE PAYMENT - THANK YOU"
_WHITESPACE_RE = re.compile(r"\s+")


def _text(row: dict[str, Any], column: str) -> str | None:
    value = row.get(column)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _first_text(row: dict[str, Any], *columns: str) -> str | None:
    for column in columns:
        text = _text(row, column)
        if text:
            return text
    return None


def composite_reference(*parts: str | None) -> str | None:
    """Deterministic fallback reference from the identifying columns."""
    present = [part.strip() for part in parts if part and part.strip()]
    return "|".join(present) or None


def _amount_and_type(raw_amount: str | None) -> tuple[int | None, TransactionType]:
    cents = parse_amount_to_cents(raw_amount)
    if cents is None:
        return None, TransactionType.EXPENSE
    return abs(cents), TransactionType.INCOME if cents < 0 else TransactionType.EXPENSE


def _resolve_category(context: ParseContext, name: str | None) -> str | None:
    if not name or context.category_resolver is None:
        return None
    return context.category_resolver.resolve_or_create_by_name(context.user_id, name)


def map_amex_row(row: dict[str, Any], context: ParseContext) -> TransactionCandidate:
    """Map one American Express statement row."""
    total, tx_type = _amount_and_type(_text(row, "Amount"))

    extended = _text(row, "Extended Details")
    statement_as = _text(row, "Appears On Your Statement As")
    description_col = _text(row, "Description")

    descriptor = _WHITESPACE_RE.sub(" ", extended or statement_as or description_col or "").upper()
    is_card_payment = CARD_PAYMENT_MARKER in descriptor

    merchant = description_col or statement_as or extended or ("Card Payment" if is_card_payment else None)
    description = extended or statement_as or description_col

    reference = _text(row, "Reference")
    if reference:
        reference = reference.replace('"', "").replace("'", "").strip() or None
    if not reference:
        reference = composite_reference(_text(row, "Date"), description_col, _text(row, "Amount"))

    address = ", ".join(
        part for part in (_text(row, c) for c in ("Address", "City/State", "Zip Code", "Country")) if part
    )

    extra = {
        "address": address or None,
        "card_payment": is_card_payment,
        "receipt": _text(row, "Receipt"),
        "card_member": _text(row, "Card Member"),
        "account_number": _text(row, "Account #"),
        "extended_details": description,
        "statement_descriptor": statement_as,
        "city_state": _text(row, "City/State"),
        "zip_code": _text(row, "Zip Code"),
        "country": _text(row, "Country"),
    }

    return TransactionCandidate(
        name="Card Payment" if is_card_payment else merchant,
        merchant=merchant,
        description=description,
        total=total,
        currency_code=context.currency_code,
        issued_at=parse_statement_date(row.get("Date"), CARD_DATE_FORMATS),
        type=tx_type,
        import_reference=reference,
        category_code=_resolve_category(context, _text(row, "Category")),
        extra={key: value for key, value in extra.items() if value is not None},
        raw_data=dict(row),
    )


def map_chase_row(row: dict[str, Any], context: ParseContext) -> TransactionCandidate:
    """Map one Chase credit card statement row."""
    raw_amount = _text(row, "Amount")
    total, tx_type = _amount_and_type(raw_amount)
    description = _text(row, "Description")

    issued_at = parse_statement_date(row.get("Transaction Date"), CARD_DATE_FORMATS) or parse_statement_date(
        row.get("Post Date"), CARD_DATE_FORMATS
    )

    reference = _first_text(row, "Transaction ID", "Reference Number") or composite_reference(
        _text(row, "Transaction Date"), description, raw_amount
    )

    extra = {
        "post_date": _text(row, "Post Date"),
        "category": _text(row, "Category"),
        "statement_type": _text(row, "Type"),
        "memo": _text(row, "Memo"),
    }

    return TransactionCandidate(
        name=description,
        merchant=description,
        description=description,
        total=total,
        currency_code=context.currency_code,
        issued_at=issued_at,
        type=tx_type,
        import_reference=reference,
        category_code=_resolve_category(context, _text(row, "Category")),
        extra={key: value for key, value in extra.items() if value is not None},
        raw_data=dict(row),
    )
