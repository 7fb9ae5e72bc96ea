"""
Ledger Import - Statement CSV Import and Reconciliation

Turns statement exports (Amazon Business order reports, card issuer
statements, arbitrary CSVs) into transactions, reconciling each row against
the transactions already on record.

Domain Packages:
- core: currency, dates, models, collaborator protocols, audit, configuration
- formats: file reading, dialect detection and row parsing
- amazon: line-item aggregation into per-charge orders
- matching: confidence scoring, match lookup, non-destructive merge
- batches: batch/row/match lifecycle, orchestrator, match review
- stores: in-memory and JSON-file implementations of the protocols
- cli: `ledger-import` command line

Example Usage:
    from ledger_import import detect_format, parse_rows, run_import_batch
"""

__version__ = "0.1.0"

from .batches import ImportOptions, approve_match, reject_match, run_import_batch
from .core.models import Transaction, TransactionCandidate, TransactionType
from .formats import ParseContext, StatementFormat, detect_format, parse_rows, read_statement
from .matching import MatchFinder, calculate_match_confidence

__all__ = [
    "ImportOptions",
    "MatchFinder",
    "ParseContext",
    "StatementFormat",
    "Transaction",
    "TransactionCandidate",
    "TransactionType",
    "approve_match",
    "calculate_match_confidence",
    "detect_format",
    "parse_rows",
    "read_statement",
    "reject_match",
    "run_import_batch",
]
