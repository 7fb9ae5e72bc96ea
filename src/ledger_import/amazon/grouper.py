#!/usr/bin/env python3
"""
Amazon Order Aggregation

Amazon Business reports have one row per item. This module groups rows by the
(Order ID, charge reference) composite key and folds each group into one
immutable AmazonAggregatedOrder.

Example: a 65-row report typically becomes 10-15 orders.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from ..core.currency import parse_amount_or_zero, parse_integer
from ..core.dates import parse_statement_date
from .models import (
    ASIN,
    BRAND,
    BUSINESS_METADATA_COLUMNS,
    INVOICE_NUMBER,
    ITEM_NET_TOTAL,
    ITEM_PROMOTION,
    ITEM_QUANTITY,
    ITEM_SHIPPING,
    ITEM_SUBTOTAL,
    ITEM_TAX,
    MANUFACTURER,
    ORDER_DATE,
    ORDER_ID,
    PAYMENT_AMOUNT,
    PAYMENT_DATE,
    PAYMENT_INSTRUMENT_TYPE,
    PURCHASE_ORDER_NUMBER,
    TITLE,
    AmazonAggregatedOrder,
    AmazonOrderItem,
    cell,
    charge_reference,
    normalize_row,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationStats:
    """Summary of one aggregation pass, for logging."""

    total_rows: int
    total_orders: int
    reduction_percent: int
    avg_items_per_order: float


def grouping_key(row: dict[str, str]) -> tuple[str, str] | None:
    """
    Composite key for a raw row.

    Returns:
        (order_id, charge_reference), or None if either part is missing
    """
    order_id = cell(row, ORDER_ID)
    reference = charge_reference(row)
    if not order_id or not reference:
        return None
    return order_id, reference


def _item_from_row(row: dict[str, str]) -> AmazonOrderItem | None:
    asin = cell(row, ASIN)
    if not asin:
        return None
    return AmazonOrderItem(
        asin=asin,
        title=cell(row, TITLE) or "Unknown Item",
        brand=cell(row, BRAND),
        manufacturer=cell(row, MANUFACTURER),
        quantity=parse_integer(row.get(ITEM_QUANTITY), default=1),
        subtotal=parse_amount_or_zero(row.get(ITEM_SUBTOTAL)),
        shipping=parse_amount_or_zero(row.get(ITEM_SHIPPING)),
        promotion=parse_amount_or_zero(row.get(ITEM_PROMOTION)),
        tax=parse_amount_or_zero(row.get(ITEM_TAX)),
        net_total=parse_amount_or_zero(row.get(ITEM_NET_TOTAL)),
    )


def _fold_group(key: tuple[str, str], rows: list[dict[str, str]]) -> AmazonAggregatedOrder | None:
    """Build one order from its rows; order-level fields come from the first row."""
    first = rows[0]

    items = []
    for row in rows:
        item = _item_from_row(row)
        if item is None:
            logger.warning("Skipping item row without ASIN in order %s", key[0])
            continue
        items.append(item)

    if not items:
        logger.warning("Skipping order %s:%s with no valid items", key[0], key[1])
        return None

    payment_date = parse_statement_date(first.get(PAYMENT_DATE))
    if payment_date is None:
        logger.warning("Order %s has unparseable payment date %r", key[0], first.get(PAYMENT_DATE))

    metadata = {
        meta_key: value for column, meta_key in BUSINESS_METADATA_COLUMNS.items() if (value := cell(first, column))
    }

    return AmazonAggregatedOrder(
        order_id=key[0],
        charge_identifier=key[1],
        order_date=parse_statement_date(first.get(ORDER_DATE)),
        payment_date=payment_date,
        payment_amount=parse_amount_or_zero(first.get(PAYMENT_AMOUNT)),
        payment_instrument_type=cell(first, PAYMENT_INSTRUMENT_TYPE) or "Unknown",
        items=tuple(items),
        invoice_number=cell(first, INVOICE_NUMBER) or None,
        purchase_order_number=cell(first, PURCHASE_ORDER_NUMBER) or None,
        metadata=metadata,
        source_row_count=len(rows),
    )


def aggregate_amazon_rows(rows: Iterable[dict[str, Any]]) -> list[AmazonAggregatedOrder]:
    """
    Aggregate raw Amazon report rows into orders.

    - Groups by (Order ID, charge reference); rows missing either are dropped
    - Order amount/date are the first row's Payment Amount / Payment Date
    - Item rows without an ASIN are dropped; groups left empty are dropped

    Returns:
        Orders in first-seen order of their groups
    """
    groups: dict[tuple[str, str], list[dict[str, str]]] = {}

    for raw in rows:
        row = normalize_row(raw)
        key = grouping_key(row)
        if key is None:
            logger.warning("Skipping row with missing Order ID or charge reference")
            continue
        groups.setdefault(key, []).append(row)

    orders = []
    for key, group_rows in groups.items():
        order = _fold_group(key, group_rows)
        if order is not None:
            orders.append(order)

    return orders


def get_aggregation_stats(total_rows: int, orders: list[AmazonAggregatedOrder]) -> AggregationStats:
    """Row/order reduction summary for logging."""
    total_orders = len(orders)
    reduction_percent = round((total_rows - total_orders) / total_rows * 100) if total_orders and total_rows else 0
    total_items = sum(order.item_count for order in orders)
    avg_items = round(total_items / total_orders, 1) if total_orders else 0.0

    return AggregationStats(
        total_rows=total_rows,
        total_orders=total_orders,
        reduction_percent=reduction_percent,
        avg_items_per_order=avg_items,
    )
