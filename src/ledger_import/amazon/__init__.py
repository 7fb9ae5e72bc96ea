"""
Amazon Business Order Report Package

Amazon reports list one row per purchased item, while the card statement shows
one charge per order shipment. This package folds the item rows back into
per-charge orders and maps them to transaction candidates.

Key Components:
- models: raw column names, line item and aggregated order models
- grouper: (order id, charge reference) aggregation
- mapper: aggregated order -> TransactionCandidate
"""

from .grouper import (
    AggregationStats,
    aggregate_amazon_rows,
    get_aggregation_stats,
    grouping_key,
)
from .mapper import map_amazon_order
from .models import AmazonAggregatedOrder, AmazonOrderItem

__all__ = [
    "AggregationStats",
    "AmazonAggregatedOrder",
    "AmazonOrderItem",
    "aggregate_amazon_rows",
    "get_aggregation_stats",
    "grouping_key",
    "map_amazon_order",
]
