#!/usr/bin/env python3
"""
Amazon Domain Models

Type-safe models for Amazon Business Order Report CSV data.

The report has one row per purchased item. Rows that share an Order ID and a
charge reference (Charge Identifier / Payment Reference ID) belong to one card
charge and are aggregated into a single AmazonAggregatedOrder.
"""

from dataclasses import dataclass, field
from typing import Any

from ..core.currency import clean_formula_value
from ..core.dates import FinancialDate

# Column names as exported by Amazon Business
ORDER_ID = "Order ID"
ORDER_DATE = "Order Date"
PAYMENT_DATE = "Payment Date"
PAYMENT_AMOUNT = "Payment Amount"
CHARGE_IDENTIFIER = "Charge Identifier"
PAYMENT_REFERENCE_ID = "Payment Reference ID"
PAYMENT_INSTRUMENT_TYPE = "Payment Instrument Type"
INVOICE_NUMBER = "Invoice Number"
PURCHASE_ORDER_NUMBER = "Purchase Order Number"
ASIN = "ASIN"
TITLE = "Title"
BRAND = "Brand"
MANUFACTURER = "Manufacturer"
ITEM_QUANTITY = "Item Quantity"
ITEM_SUBTOTAL = "Item Subtotal"
ITEM_SHIPPING = "Item Shipping & Handling"
ITEM_PROMOTION = "Item Promotion"
ITEM_TAX = "Item Tax"
ITEM_NET_TOTAL = "Item Net Total"

# Business metadata columns -> extra keys
BUSINESS_METADATA_COLUMNS = {
    "GL Code": "gl_code",
    "Department": "department",
    "Cost Center": "cost_center",
    "Project Code": "project_code",
    "Location": "location",
    "Custom Field 1": "custom_field_1",
    "Custom Field 2": "custom_field_2",
    "Custom Field 3": "custom_field_3",
}


def normalize_row(row: dict[str, Any]) -> dict[str, str]:
    """Strip BOMs/whitespace from keys and stringify values."""
    return {
        str(key).replace("\ufeff", "").strip(): "" if value is None else str(value)
        for key, value in row.items()
    }


def cell(row: dict[str, str], column: str) -> str:
    """Read a cell with formula escaping removed."""
    return clean_formula_value(row.get(column, ""))


def charge_reference(row: dict[str, str]) -> str:
    """Charge reference for a row; newer exports call it Payment Reference ID."""
    return cell(row, CHARGE_IDENTIFIER) or cell(row, PAYMENT_REFERENCE_ID)


@dataclass(frozen=True)
class AmazonOrderItem:
    """One purchased line item. All amounts in cents."""

    asin: str
    title: str
    brand: str
    manufacturer: str
    quantity: int
    subtotal: int
    shipping: int
    promotion: int  # usually negative
    tax: int
    net_total: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "asin": self.asin,
            "title": self.title,
            "brand": self.brand,
            "manufacturer": self.manufacturer,
            "quantity": self.quantity,
            "subtotal": self.subtotal,
            "shipping": self.shipping,
            "promotion": self.promotion,
            "tax": self.tax,
            "net_total": self.net_total,
        }


@dataclass(frozen=True)
class AmazonAggregatedOrder:
    """
    All rows of one (order id, charge reference) group.

    payment_amount and payment_date come from the first row of the group and
    are what shows up on the card statement; they are never derived from the
    item subtotals or the order date.
    """

    order_id: str
    charge_identifier: str
    order_date: FinancialDate | None
    payment_date: FinancialDate | None
    payment_amount: int
    payment_instrument_type: str
    items: tuple[AmazonOrderItem, ...]
    invoice_number: str | None = None
    purchase_order_number: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    source_row_count: int = 0

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_raw_summary(self) -> dict[str, Any]:
        """Compact snapshot stored as the import row's raw data."""
        return {
            "order_id": self.order_id,
            "charge_identifier": self.charge_identifier,
            "payment_amount_cents": self.payment_amount,
            "payment_date": self.payment_date.to_iso_string() if self.payment_date else None,
            "purchase_order_number": self.purchase_order_number,
            "source_row_count": self.source_row_count,
        }
