#!/usr/bin/env python3
"""Tests for mapping aggregated Amazon orders to candidates."""

import pytest

from ledger_import.amazon.grouper import aggregate_amazon_rows
from ledger_import.amazon.mapper import build_description, build_merchant, build_name, map_amazon_order
from ledger_import.amazon.models import AmazonAggregatedOrder, AmazonOrderItem
from ledger_import.core.dates import FinancialDate
from ledger_import.core.models import TransactionType


def make_item(title: str, quantity: int = 1, brand: str = "", net_total: int = 1000) -> AmazonOrderItem:
    return AmazonOrderItem(
        asin="B0TEST",
        title=title,
        brand=brand,
        manufacturer="",
        quantity=quantity,
        subtotal=net_total,
        shipping=0,
        promotion=0,
        tax=0,
        net_total=net_total,
    )


def make_order(*items: AmazonOrderItem, payment_amount: int = 1000) -> AmazonAggregatedOrder:
    return AmazonAggregatedOrder(
        order_id="111-1",
        charge_identifier="CHG-1",
        order_date=FinancialDate.from_string("2024-08-01"),
        payment_date=FinancialDate.from_string("2024-08-03"),
        payment_amount=payment_amount,
        payment_instrument_type="Visa",
        items=tuple(items),
        source_row_count=len(items),
    )


@pytest.mark.amazon
class TestOrderText:
    def test_merchant_uses_first_brand(self):
        assert build_merchant((make_item("A", brand="Anker"), make_item("B", brand="Acme"))) == "Amazon - Anker"
        assert build_merchant((make_item("A"),)) == "Amazon"
        assert build_merchant(()) == "Amazon"

    def test_single_item_name_is_truncated_title(self):
        title = "X" * 80

        name = build_name((make_item(title),))

        assert len(name) == 60
        assert name.endswith("...")

    def test_multi_item_name_counts_quantity(self):
        assert build_name((make_item("A", quantity=2), make_item("B"))) == "3 items from Amazon"

    def test_description_lists_three_items(self):
        items = (make_item("A"), make_item("B", quantity=2), make_item("C"), make_item("D"), make_item("E"))

        assert build_description(items) == "1x A; 2x B; 1x C; ... and 2 more"

    def test_short_description(self):
        assert build_description((make_item("A"),)) == "1x A"


@pytest.mark.amazon
class TestMapAmazonOrder:
    def test_candidate_uses_payment_amount_and_charge(self):
        order = make_order(make_item("Cable", net_total=400), make_item("Lamp", net_total=500), payment_amount=-1234)

        candidate = map_amazon_order(order, project_code="office", currency_code="EUR")

        assert candidate.total == 1234
        assert candidate.issued_at.to_iso_string() == "2024-08-03"
        assert candidate.import_reference == "CHG-1"
        assert candidate.type == TransactionType.EXPENSE
        assert candidate.project_code == "office"
        assert candidate.currency_code == "EUR"
        assert [item.total for item in candidate.items] == [400, 500]
        assert all(item.currency_code == "EUR" for item in candidate.items)
        assert candidate.extra["order_id"] == "111-1"
        assert candidate.extra["order_date"] == "2024-08-01"
        assert candidate.extra["item_count"] == 2
        assert "invoice_number" not in candidate.extra
        assert candidate.raw_data["source_row_count"] == 2

    def test_fixture_orders(self, amazon_records):
        first, second = (map_amazon_order(order) for order in aggregate_amazon_rows(amazon_records))

        assert first.merchant == "Amazon - Anker"
        assert first.name == "6 items from Amazon"
        assert first.description == "1x USB-C Cable; 1x Desk Lamp; 3x Notebook; ... and 1 more"
        assert first.extra["department"] == "Engineering"
        assert first.extra["total_items"] == 6
        assert second.name == "2 items from Amazon"
        assert second.total == 3198
