#!/usr/bin/env python3
"""
Dialect Parser Registry

One parser per StatementFormat behind a common interface; detect_format()
returns the tag and PARSERS maps the tag to its parser.
"""

import logging
from collections.abc import Sequence
from typing import Protocol

from ..amazon import aggregate_amazon_rows, get_aggregation_stats, map_amazon_order
from ..core.models import TransactionCandidate
from .cards import map_amex_row, map_chase_row
from .context import ParseContext
from .detector import StatementFormat
from .generic import map_generic_row, normalize_column_mapping

logger = logging.getLogger(__name__)


class DialectParser(Protocol):
    """Turns a header and raw string rows into candidates."""

    def parse(
        self, header: Sequence[str], rows: Sequence[Sequence[str]], context: ParseContext
    ) -> list[TransactionCandidate]: ...


def _records(header: Sequence[str], rows: Sequence[Sequence[str]]) -> list[dict[str, str]]:
    keys = [str(h).replace("\ufeff", "").strip() for h in header]
    return [dict(zip(keys, row)) for row in rows]


class AmazonParser:
    """Row-per-line-item dialect: aggregate first, then map each order."""

    def parse(
        self, header: Sequence[str], rows: Sequence[Sequence[str]], context: ParseContext
    ) -> list[TransactionCandidate]:
        orders = aggregate_amazon_rows(_records(header, rows))
        stats = get_aggregation_stats(len(rows), orders)
        logger.info(
            "Amazon aggregation: %d rows -> %d orders (%d%% reduction, avg %.1f items/order)",
            stats.total_rows,
            stats.total_orders,
            stats.reduction_percent,
            stats.avg_items_per_order,
        )

        project_codes = self._resolve_project_mappings(context)
        return [
            map_amazon_order(
                order,
                project_code=project_codes.get(order.purchase_order_number or ""),
                currency_code=context.currency_code,
            )
            for order in orders
        ]

    @staticmethod
    def _resolve_project_mappings(context: ParseContext) -> dict[str, str]:
        """Resolve each mapped PO number's project once per import."""
        if not context.project_mappings or context.project_resolver is None:
            return {}
        resolved = {}
        for po_number, project_name in context.project_mappings.items():
            if not po_number:
                continue
            name = (project_name or "").strip() or po_number
            resolved[po_number] = context.project_resolver.resolve_or_create_by_name(context.user_id, name)
        return resolved


class AmexParser:
    def parse(
        self, header: Sequence[str], rows: Sequence[Sequence[str]], context: ParseContext
    ) -> list[TransactionCandidate]:
        return [map_amex_row(record, context) for record in _records(header, rows)]


class ChaseParser:
    def parse(
        self, header: Sequence[str], rows: Sequence[Sequence[str]], context: ParseContext
    ) -> list[TransactionCandidate]:
        return [map_chase_row(record, context) for record in _records(header, rows)]


class GenericParser:
    """Explicit column mapping; raises ImportInputError when nothing is mapped."""

    def parse(
        self, header: Sequence[str], rows: Sequence[Sequence[str]], context: ParseContext
    ) -> list[TransactionCandidate]:
        mapping = normalize_column_mapping(context.column_mapping)
        return [map_generic_row(header, row, mapping, context) for row in rows]


PARSERS: dict[StatementFormat, DialectParser] = {
    StatementFormat.AMAZON: AmazonParser(),
    StatementFormat.AMEX: AmexParser(),
    StatementFormat.CHASE: ChaseParser(),
    StatementFormat.GENERIC: GenericParser(),
}


def parse_rows(
    format: StatementFormat,
    header: Sequence[str],
    rows: Sequence[Sequence[str]],
    context: ParseContext,
) -> list[TransactionCandidate]:
    """
    Parse raw rows of a detected dialect into transaction candidates.

    Args:
        format: Dialect tag from detect_format()
        header: Header row
        rows: Data rows (header excluded)
        context: User, resolvers and dialect-specific options

    Raises:
        ImportInputError: Generic import without a usable column mapping
    """
    candidates = PARSERS[format].parse(header, rows, context)
    logger.info("Parsed %d %s rows into %d candidates", len(rows), format.value, len(candidates))
    return candidates
