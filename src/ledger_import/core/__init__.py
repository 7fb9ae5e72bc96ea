"""
Core Utilities Package

Shared models and utilities used by every part of the import pipeline.

This package provides:
- Currency parsing into integer cents
- FinancialDate and statement date parsing
- Transaction and candidate models
- Collaborator protocols (transaction store, name resolver, progress sink)
- Audit events
- Configuration management for environment-specific settings
"""

from .audit import AuditAction, AuditEmitter, AuditEvent, LoggingAuditEmitter
from .config import Config, Environment, ImportConfig, get_config, get_data_dir, reload_config
from .currency import (
    cents_to_dollars_str,
    clean_formula_value,
    format_cents,
    parse_amount_or_zero,
    parse_amount_to_cents,
)
from .datastore import NameResolver, ProgressSink, TransactionStore
from .dates import FinancialDate, parse_statement_date
from .models import Transaction, TransactionCandidate, TransactionType

__all__ = [
    "AuditAction",
    "AuditEmitter",
    "AuditEvent",
    "Config",
    "Environment",
    "FinancialDate",
    "ImportConfig",
    "LoggingAuditEmitter",
    "NameResolver",
    "ProgressSink",
    "Transaction",
    "TransactionCandidate",
    "TransactionStore",
    "TransactionType",
    "cents_to_dollars_str",
    "clean_formula_value",
    "format_cents",
    "get_config",
    "get_data_dir",
    "parse_amount_or_zero",
    "parse_amount_to_cents",
    "parse_statement_date",
    "reload_config",
]
