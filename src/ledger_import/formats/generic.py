#!/usr/bin/env python3
"""
Generic CSV Mapper

No built-in layout: the caller maps column indexes to candidate fields.
Unmapped columns are dropped. A mapping that targets no known field rejects
the import before anything is written.
"""

from collections.abc import Callable, Sequence
from typing import Any

from ..core.currency import clean_formula_value, parse_amount_to_cents
from ..core.dates import parse_statement_date
from ..core.models import TransactionCandidate, TransactionType
from .context import ParseContext
from .reader import ImportInputError

# Target fields a generic column can be mapped to
GENERIC_FIELDS = (
    "name",
    "merchant",
    "description",
    "total",
    "currency_code",
    "type",
    "note",
    "category",
    "project",
    "issued_at",
    "import_reference",
)

# Accept the camelCase names older mapping presets used
FIELD_ALIASES = {
    "currencyCode": "currency_code",
    "issuedAt": "issued_at",
    "importReference": "import_reference",
    "categoryCode": "category",
    "projectCode": "project",
    "category_code": "category",
    "project_code": "project",
    "amount": "total",
    "date": "issued_at",
}


def normalize_column_mapping(mapping: dict[Any, str] | None) -> dict[int, str]:
    """
    Validate a caller-supplied mapping.

    Returns:
        {column index: canonical field name}

    Raises:
        ImportInputError: No column mapped, or a target field is unknown
    """
    normalized: dict[int, str] = {}
    for index, target in (mapping or {}).items():
        if not target:
            continue
        field_name = FIELD_ALIASES.get(target, target)
        if field_name not in GENERIC_FIELDS:
            raise ImportInputError(f"Unknown target field {target!r} for column {index}")
        try:
            normalized[int(index)] = field_name
        except (TypeError, ValueError) as e:
            raise ImportInputError(f"Column index must be an integer, got {index!r}") from e

    if not normalized:
        raise ImportInputError("Generic import needs at least one mapped column")
    return normalized


def _resolver_lookup(context: ParseContext, kind: str) -> Callable[[str], str | None]:
    resolver = context.category_resolver if kind == "category" else context.project_resolver

    def lookup(name: str) -> str | None:
        if not name or resolver is None:
            return None
        return resolver.resolve_or_create_by_name(context.user_id, name)

    return lookup


def map_generic_row(
    header: Sequence[str], row: Sequence[str], mapping: dict[int, str], context: ParseContext
) -> TransactionCandidate:
    """Map one row through an already normalized column mapping."""
    candidate = TransactionCandidate(
        currency_code=context.currency_code,
        raw_data={str(header[i]) if i < len(header) else str(i): value for i, value in enumerate(row)},
    )
    resolve_category = _resolver_lookup(context, "category")
    resolve_project = _resolver_lookup(context, "project")

    for index, field_name in mapping.items():
        if index >= len(row):
            continue
        value = clean_formula_value(row[index])
        if not value:
            continue

        if field_name == "total":
            cents = parse_amount_to_cents(value)
            candidate.total = abs(cents) if cents is not None else None
        elif field_name == "issued_at":
            candidate.issued_at = parse_statement_date(value)
        elif field_name == "type":
            candidate.type = TransactionType.from_value(value)
        elif field_name == "currency_code":
            candidate.currency_code = value.upper()
        elif field_name == "category":
            candidate.category_code = resolve_category(value)
        elif field_name == "project":
            candidate.project_code = resolve_project(value)
        else:
            setattr(candidate, field_name, value)

    return candidate
