#!/usr/bin/env python3
"""
Amazon Order to Candidate Mapper

Turns an aggregated Amazon order into a TransactionCandidate:

- total / issued_at: payment amount and payment date (what the card statement shows)
- import_reference: the charge identifier, unique per card charge
- merchant: "Amazon - <brand of first item>" or "Amazon"
- name: single item title, or "<N> items from Amazon"
- description: up to three "<qty>x <title>" entries plus "... and N more"
- items: one sub-candidate per line item
- extra: order identifiers, business metadata and item counts
"""

from ..core.models import TransactionCandidate, TransactionType
from .models import AmazonAggregatedOrder, AmazonOrderItem

PROVIDER = "Amazon"
MAX_DESCRIPTION_ITEMS = 3
NAME_MAX_LENGTH = 60
DESCRIPTION_TITLE_MAX_LENGTH = 50


def truncate(text: str, max_length: int) -> str:
    """Truncate with a trailing ellipsis."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def build_merchant(items: tuple[AmazonOrderItem, ...]) -> str:
    if items and items[0].brand:
        return f"{PROVIDER} - {items[0].brand}"
    return PROVIDER


def build_name(items: tuple[AmazonOrderItem, ...]) -> str:
    if not items:
        return f"{PROVIDER} Order"
    if len(items) == 1:
        return truncate(items[0].title, NAME_MAX_LENGTH)
    total_quantity = sum(item.quantity for item in items)
    return f"{total_quantity} item{'s' if total_quantity != 1 else ''} from {PROVIDER}"


def build_description(items: tuple[AmazonOrderItem, ...]) -> str:
    if not items:
        return f"{PROVIDER} order with no items"

    parts = [
        f"{item.quantity}x {truncate(item.title, DESCRIPTION_TITLE_MAX_LENGTH)}"
        for item in items[:MAX_DESCRIPTION_ITEMS]
    ]
    if len(items) > MAX_DESCRIPTION_ITEMS:
        parts.append(f"... and {len(items) - MAX_DESCRIPTION_ITEMS} more")
    return "; ".join(parts)


def map_item(item: AmazonOrderItem, currency_code: str) -> TransactionCandidate:
    """Line item -> sub-candidate; total is the item's net total."""
    return TransactionCandidate(
        name=item.title,
        description=f"{item.quantity}x {item.title}",
        total=item.net_total,
        currency_code=currency_code,
        type=TransactionType.EXPENSE,
        extra={
            "asin": item.asin,
            "brand": item.brand,
            "manufacturer": item.manufacturer,
            "quantity": item.quantity,
            "subtotal": item.subtotal,
            "shipping": item.shipping,
            "promotion": item.promotion,
            "tax": item.tax,
        },
    )


def map_amazon_order(
    order: AmazonAggregatedOrder, project_code: str | None = None, currency_code: str = "USD"
) -> TransactionCandidate:
    """Map one aggregated order to a candidate."""
    extra = {
        "order_id": order.order_id,
        "charge_identifier": order.charge_identifier,
        "order_date": order.order_date.to_iso_string() if order.order_date else None,
        "invoice_number": order.invoice_number,
        "purchase_order_number": order.purchase_order_number,
        "payment_instrument_type": order.payment_instrument_type,
        **order.metadata,
        "item_count": order.item_count,
        "total_items": order.total_quantity,
    }

    return TransactionCandidate(
        name=build_name(order.items),
        merchant=build_merchant(order.items),
        description=build_description(order.items),
        total=abs(order.payment_amount),
        currency_code=currency_code,
        issued_at=order.payment_date,
        type=TransactionType.EXPENSE,
        import_reference=order.charge_identifier,
        project_code=project_code,
        items=[map_item(item, currency_code) for item in order.items],
        extra={key: value for key, value in extra.items() if value is not None},
        raw_data=order.to_raw_summary(),
    )
