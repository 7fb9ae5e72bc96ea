"""
Import Batches Package

Batch, row and match records, the per-row reconciliation loop, and the human
review of flagged matches.

Key Components:
- models: ImportBatch / ImportRow / TransactionMatch and their state machines
- datastore: ImportStore persistence protocol
- orchestrator: run_import_batch() and ImportOptions
- review: approve/reject flagged matches
"""

from .datastore import ImportStore
from .models import (
    BatchStatus,
    ImportBatch,
    ImportRow,
    MatchStatus,
    RowStateError,
    RowStatus,
    TransactionMatch,
)
from .orchestrator import BatchOrchestrator, BatchResult, ImportOptions, run_import_batch
from .review import (
    MatchNotFoundError,
    ReviewOutcome,
    TransactionNotFoundError,
    approve_match,
    approve_matches,
    reject_match,
    reject_matches,
)

__all__ = [
    "BatchOrchestrator",
    "BatchResult",
    "BatchStatus",
    "ImportBatch",
    "ImportOptions",
    "ImportRow",
    "ImportStore",
    "MatchNotFoundError",
    "MatchStatus",
    "ReviewOutcome",
    "RowStateError",
    "RowStatus",
    "TransactionMatch",
    "TransactionNotFoundError",
    "approve_match",
    "approve_matches",
    "reject_match",
    "reject_matches",
    "run_import_batch",
]
