#!/usr/bin/env python3
"""
Batch Persistence Protocol

Durable record of batches, rows and matches. Batch-level calls are scoped by
user id; row and match calls are reached through a batch the caller already
owns.
"""

from typing import Any, Protocol

from ..core.dates import FinancialDate
from .models import BatchStatus, ImportBatch, ImportRow, MatchStatus, RowStatus, TransactionMatch


class ImportStore(Protocol):
    """Lifecycle operations the orchestrator and review flows rely on."""

    # Batches

    def create_batch(
        self,
        user_id: str,
        filename: str,
        content_hash: str | None,
        total_rows: int,
        metadata: dict[str, Any],
    ) -> ImportBatch:
        """Create a batch in `processing` status."""
        ...

    def get_batch(self, batch_id: str, user_id: str) -> ImportBatch | None: ...

    def list_batches(self, user_id: str) -> list[ImportBatch]:
        """The user's batches, newest first."""
        ...

    def find_duplicate_batch(self, user_id: str, content_hash: str) -> ImportBatch | None:
        """Most recent earlier batch of this user with the same file content."""
        ...

    def increment_batch_count(self, batch_id: str, user_id: str, counter: str) -> None:
        """Atomically add one to matched_count, created_count, skipped_count or error_count."""
        ...

    def finish_batch(
        self,
        batch_id: str,
        user_id: str,
        status: BatchStatus,
        metadata_updates: dict[str, Any] | None = None,
    ) -> ImportBatch:
        """Move the batch to a terminal status and stamp completed_at."""
        ...

    # Rows

    def create_row(
        self, batch_id: str, row_number: int, raw_data: dict[str, Any], parsed_data: dict[str, Any]
    ) -> ImportRow:
        """Create a row in `pending` status."""
        ...

    def get_row(self, row_id: str) -> ImportRow | None: ...

    def list_rows(self, batch_id: str, status: RowStatus | None = None) -> list[ImportRow]:
        """Rows of a batch in row_number order, optionally filtered by status."""
        ...

    def mark_row_processed(self, row_id: str, transaction_id: str, status: RowStatus) -> ImportRow: ...

    def mark_row_error(self, row_id: str, message: str) -> ImportRow: ...

    def mark_row_skipped(self, row_id: str, reason: str | None = None) -> ImportRow: ...

    # Matches

    def create_match(
        self,
        batch_id: str,
        transaction_id: str,
        confidence: int,
        matched_amount: int | None,
        matched_date: FinancialDate | None,
        existing_date: FinancialDate | None,
        days_difference: int | None,
        status: MatchStatus,
        csv_data: dict[str, Any],
        merged_fields: list[str] | None = None,
    ) -> TransactionMatch: ...

    def get_match(self, match_id: str) -> TransactionMatch | None: ...

    def list_matches(self, batch_id: str, status: MatchStatus | None = None) -> list[TransactionMatch]: ...

    def find_match_in_batch(self, transaction_id: str, batch_id: str) -> TransactionMatch | None:
        """Any match record pairing this transaction with this batch."""
        ...

    def review_match(
        self, match_id: str, reviewer: str, approved: bool, merged_fields: list[str] | None = None
    ) -> TransactionMatch:
        """
        Record an approve/reject decision.

        Raises:
            RowStateError: The match is not flagged
        """
        ...
