#!/usr/bin/env python3
"""
Tests for Amazon order aggregation.

Rows sharing an Order ID and charge reference collapse into one order whose
amount and date come from the first row's payment columns.
"""

import pytest

from ledger_import.amazon.grouper import aggregate_amazon_rows, get_aggregation_stats, grouping_key
from tests.fixtures.statements import AMAZON_HEADER, amazon_row


def records(*rows: list[str]) -> list[dict[str, str]]:
    return [dict(zip(AMAZON_HEADER, row)) for row in rows]


@pytest.mark.amazon
class TestAggregateAmazonRows:
    def test_six_rows_become_two_orders(self, amazon_records):
        orders = aggregate_amazon_rows(amazon_records)

        assert len(orders) == 2
        first, second = orders
        assert (first.order_id, first.charge_identifier) == ("111-0000001-0000001", "CHG-A")
        assert first.item_count == 4
        assert first.source_row_count == 4
        assert second.item_count == 2

    def test_order_level_fields_come_from_first_row(self, amazon_records):
        first, second = aggregate_amazon_rows(amazon_records)

        assert first.payment_amount == 8640
        assert first.payment_date.to_iso_string() == "2024-08-03"
        assert first.order_date.to_iso_string() == "2024-08-01"
        assert first.payment_instrument_type == "Visa"
        assert first.metadata == {"department": "Engineering"}
        assert second.payment_amount == -3198

    def test_payment_amount_is_not_summed_from_items(self):
        rows = records(
            amazon_row("111-9", "CHG-9", "B01", "Cable", "50.00", subtotal="10.00"),
            amazon_row("111-9", "CHG-9", "B02", "Lamp", "99.99", subtotal="10.00", payment_date="09/09/2024"),
        )

        (order,) = aggregate_amazon_rows(rows)

        assert order.payment_amount == 5000
        assert order.payment_date.to_iso_string() == "2024-08-03"
        assert sum(item.subtotal for item in order.items) == 2000

    def test_split_charges_on_one_order(self):
        """One order paid by two charges yields two orders."""
        rows = records(
            amazon_row("111-9", "CHG-1", "B01", "Cable", "10.00"),
            amazon_row("111-9", "CHG-2", "B02", "Lamp", "20.00"),
        )

        orders = aggregate_amazon_rows(rows)

        assert [o.charge_identifier for o in orders] == ["CHG-1", "CHG-2"]

    def test_item_quantities(self, amazon_records):
        first, _ = aggregate_amazon_rows(amazon_records)

        assert [item.quantity for item in first.items] == [1, 1, 3, 1]
        assert first.total_quantity == 6
        assert first.items[1].subtotal == 2500

    def test_rows_without_key_are_dropped(self):
        rows = records(
            amazon_row("", "CHG-1", "B01", "Cable", "10.00"),
            amazon_row("111-9", "", "B02", "Lamp", "20.00"),
        )

        assert aggregate_amazon_rows(rows) == []

    def test_rows_without_asin_are_dropped(self):
        rows = records(
            amazon_row("111-9", "CHG-1", "B01", "Cable", "10.00"),
            amazon_row("111-9", "CHG-1", "", "Gift wrap", "10.00"),
            amazon_row("111-8", "CHG-2", "", "Gift wrap", "5.00"),
        )

        orders = aggregate_amazon_rows(rows)

        assert len(orders) == 1
        assert orders[0].item_count == 1
        assert orders[0].source_row_count == 2

    def test_charge_identifier_column(self):
        rows = [
            {"Order ID": "111-9", "Charge Identifier": '="CI-1"', "ASIN": "B01", "Payment Amount": "7.00"},
            {"Order ID": "111-9", "Charge Identifier": '="CI-1"', "ASIN": "B02", "Payment Amount": "7.00"},
        ]

        (order,) = aggregate_amazon_rows(rows)

        assert order.charge_identifier == "CI-1"
        assert order.payment_amount == 700
        assert order.payment_date is None
        assert order.items[0].title == "Unknown Item"
        assert order.items[0].quantity == 1

    def test_grouping_key(self):
        assert grouping_key({"Order ID": "1", "Payment Reference ID": "R"}) == ("1", "R")
        assert grouping_key({"Order ID": "1"}) is None


@pytest.mark.amazon
class TestAggregationStats:
    def test_stats(self, amazon_records):
        orders = aggregate_amazon_rows(amazon_records)

        stats = get_aggregation_stats(len(amazon_records), orders)

        assert stats.total_rows == 6
        assert stats.total_orders == 2
        assert stats.reduction_percent == 67
        assert stats.avg_items_per_order == 3.0

    def test_no_orders(self):
        stats = get_aggregation_stats(0, [])

        assert stats.total_orders == 0
        assert stats.reduction_percent == 0
        assert stats.avg_items_per_order == 0.0
