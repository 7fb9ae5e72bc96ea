#!/usr/bin/env python3
"""
In-Memory Stores

Reference implementations of every collaborator protocol. They back the test
suite and, wrapped by JsonWorkspace, the command line.
"""

import itertools
import logging
import re
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..batches.models import (
    BatchStatus,
    ImportBatch,
    ImportRow,
    MatchStatus,
    RowStatus,
    TransactionMatch,
)
from ..core.dates import FinancialDate
from ..core.models import Transaction, TransactionCandidate

logger = logging.getLogger(__name__)

_NON_CODE_RE = re.compile(r"[^a-z0-9]+")


class _IdSequence:
    """Sequential string ids with a prefix, e.g. txn-1, txn-2."""

    def __init__(self, prefix: str, start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def next(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"

    def advance_past(self, existing_ids: list[str]) -> None:
        numbers = [
            int(value.rsplit("-", 1)[1])
            for value in existing_ids
            if value.startswith(f"{self.prefix}-") and value.rsplit("-", 1)[1].isdigit()
        ]
        self._counter = itertools.count(max(numbers, default=0) + 1)


class InMemoryTransactionStore:
    """TransactionStore keeping transactions in a dict."""

    UPDATABLE_FIELDS = frozenset(
        {
            "name",
            "merchant",
            "description",
            "import_reference",
            "files",
            "last_matched_at",
            "note",
            "category_code",
            "project_code",
            "extra",
        }
    )

    def __init__(self) -> None:
        self.transactions: dict[str, Transaction] = {}
        self._ids = _IdSequence("txn")

    def add(self, transaction: Transaction) -> Transaction:
        """Insert a ready-made transaction (fixtures, workspace loading)."""
        self.transactions[transaction.id] = transaction
        self._ids.advance_past(list(self.transactions))
        return transaction

    def create(self, user_id: str, candidate: TransactionCandidate) -> Transaction:
        transaction = Transaction.from_candidate(self._ids.next(), user_id, candidate)
        self.transactions[transaction.id] = transaction
        logger.debug("Created transaction %s for %s", transaction.id, user_id)
        return transaction

    def get(self, transaction_id: str, user_id: str) -> Transaction | None:
        transaction = self.transactions.get(transaction_id)
        if transaction is None or transaction.user_id != user_id:
            return None
        return transaction

    def list_for_user(self, user_id: str) -> list[Transaction]:
        return [t for t in self.transactions.values() if t.user_id == user_id]

    def find_by_exact_reference(self, user_id: str, reference: str) -> Transaction | None:
        for transaction in self.list_for_user(user_id):
            if transaction.import_reference == reference:
                return transaction
        return None

    def find_by_amount_and_date_window(
        self, user_id: str, amount: int, date_from: FinancialDate, date_to: FinancialDate
    ) -> list[Transaction]:
        return [
            t
            for t in self.list_for_user(user_id)
            if t.total == amount and t.issued_at is not None and date_from <= t.issued_at <= date_to
        ]

    def update(self, transaction_id: str, user_id: str, fields: dict[str, Any]) -> Transaction:
        transaction = self.get(transaction_id, user_id)
        if transaction is None:
            raise LookupError(f"Transaction not found: {transaction_id}")

        unknown = set(fields) - self.UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        updated = replace(transaction, **fields, updated_at=datetime.now())
        self.transactions[transaction_id] = updated
        return updated


class InMemoryImportStore:
    """ImportStore keeping batches, rows and matches in dicts."""

    def __init__(self) -> None:
        self.batches: dict[str, ImportBatch] = {}
        self.rows: dict[str, ImportRow] = {}
        self.matches: dict[str, TransactionMatch] = {}
        self._batch_ids = _IdSequence("batch")
        self._row_ids = _IdSequence("row")
        self._match_ids = _IdSequence("match")

    # Batches

    def create_batch(
        self,
        user_id: str,
        filename: str,
        content_hash: str | None,
        total_rows: int,
        metadata: dict[str, Any],
    ) -> ImportBatch:
        batch = ImportBatch(
            id=self._batch_ids.next(),
            user_id=user_id,
            filename=filename,
            content_hash=content_hash,
            total_rows=total_rows,
            metadata=dict(metadata),
        )
        self.batches[batch.id] = batch
        return batch

    def get_batch(self, batch_id: str, user_id: str) -> ImportBatch | None:
        batch = self.batches.get(batch_id)
        if batch is None or batch.user_id != user_id:
            return None
        return batch

    def _require_batch(self, batch_id: str, user_id: str) -> ImportBatch:
        batch = self.get_batch(batch_id, user_id)
        if batch is None:
            raise LookupError(f"Batch not found: {batch_id}")
        return batch

    def list_batches(self, user_id: str) -> list[ImportBatch]:
        batches = [b for b in self.batches.values() if b.user_id == user_id]
        return sorted(batches, key=lambda b: b.created_at, reverse=True)

    def find_duplicate_batch(self, user_id: str, content_hash: str) -> ImportBatch | None:
        for batch in self.list_batches(user_id):
            if batch.content_hash == content_hash:
                return batch
        return None

    def increment_batch_count(self, batch_id: str, user_id: str, counter: str) -> None:
        self._require_batch(batch_id, user_id).increment(counter)

    def finish_batch(
        self,
        batch_id: str,
        user_id: str,
        status: BatchStatus,
        metadata_updates: dict[str, Any] | None = None,
    ) -> ImportBatch:
        batch = self._require_batch(batch_id, user_id)
        batch.finish(status)
        if metadata_updates:
            batch.metadata.update(metadata_updates)
        return batch

    # Rows

    def create_row(
        self, batch_id: str, row_number: int, raw_data: dict[str, Any], parsed_data: dict[str, Any]
    ) -> ImportRow:
        row = ImportRow(
            id=self._row_ids.next(),
            batch_id=batch_id,
            row_number=row_number,
            raw_data=dict(raw_data),
            parsed_data=dict(parsed_data),
        )
        self.rows[row.id] = row
        return row

    def get_row(self, row_id: str) -> ImportRow | None:
        return self.rows.get(row_id)

    def _require_row(self, row_id: str) -> ImportRow:
        row = self.rows.get(row_id)
        if row is None:
            raise LookupError(f"Import row not found: {row_id}")
        return row

    def list_rows(self, batch_id: str, status: RowStatus | None = None) -> list[ImportRow]:
        rows = [r for r in self.rows.values() if r.batch_id == batch_id and (status is None or r.status == status)]
        return sorted(rows, key=lambda r: r.row_number)

    def mark_row_processed(self, row_id: str, transaction_id: str, status: RowStatus) -> ImportRow:
        row = self._require_row(row_id)
        row.mark_processed(transaction_id, status)
        return row

    def mark_row_error(self, row_id: str, message: str) -> ImportRow:
        row = self._require_row(row_id)
        row.mark_error(message)
        return row

    def mark_row_skipped(self, row_id: str, reason: str | None = None) -> ImportRow:
        row = self._require_row(row_id)
        row.mark_skipped(reason)
        return row

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
    ) -> TransactionMatch:
        # Unique (transaction_id, batch_id)
        if self.find_match_in_batch(transaction_id, batch_id) is not None:
            raise ValueError(f"Transaction {transaction_id} already has a match in batch {batch_id}")

        match = TransactionMatch(
            id=self._match_ids.next(),
            batch_id=batch_id,
            transaction_id=transaction_id,
            confidence=confidence,
            matched_amount=matched_amount,
            matched_date=matched_date,
            existing_date=existing_date,
            days_difference=days_difference,
            status=status,
            csv_data=dict(csv_data),
            merged_fields=list(merged_fields or []),
        )
        self.matches[match.id] = match
        return match

    def get_match(self, match_id: str) -> TransactionMatch | None:
        return self.matches.get(match_id)

    def list_matches(self, batch_id: str, status: MatchStatus | None = None) -> list[TransactionMatch]:
        return [
            m for m in self.matches.values() if m.batch_id == batch_id and (status is None or m.status == status)
        ]

    def find_match_in_batch(self, transaction_id: str, batch_id: str) -> TransactionMatch | None:
        for match in self.matches.values():
            if match.transaction_id == transaction_id and match.batch_id == batch_id:
                return match
        return None

    def review_match(
        self, match_id: str, reviewer: str, approved: bool, merged_fields: list[str] | None = None
    ) -> TransactionMatch:
        match = self.matches.get(match_id)
        if match is None:
            raise LookupError(f"Match not found: {match_id}")
        match.review(approved, reviewer, merged_fields)
        return match


def code_from_name(name: str) -> str:
    """Stable lowercase code for a category/project name."""
    code = _NON_CODE_RE.sub("_", name.strip().lower()).strip("_")
    return code or "unnamed"


class InMemoryNameResolver:
    """Category/project resolver creating records on first use."""

    def __init__(self, kind: str = "category") -> None:
        self.kind = kind
        # user_id -> {code: name}
        self.records: dict[str, dict[str, str]] = {}

    def resolve_or_create_by_name(self, user_id: str, name: str) -> str:
        records = self.records.setdefault(user_id, {})
        wanted = name.strip().lower()
        for code, existing_name in records.items():
            if existing_name.lower() == wanted:
                return code

        code = code_from_name(name)
        base, suffix = code, 2
        while code in records:
            code = f"{base}_{suffix}"
            suffix += 1
        records[code] = name.strip()
        logger.info("Created %s %r (%s) for %s", self.kind, name.strip(), code, user_id)
        return code


class RecordingProgressSink:
    """ProgressSink that keeps every snapshot."""

    def __init__(self) -> None:
        self.snapshots: list[tuple[str, str, dict[str, Any]]] = []

    def report(self, user_id: str, progress_id: str, snapshot: dict[str, Any]) -> None:
        self.snapshots.append((user_id, progress_id, snapshot))
        logger.debug("Progress %s: %s/%s", progress_id, snapshot.get("current"), snapshot.get("total"))

    def latest(self, progress_id: str) -> dict[str, Any] | None:
        for _, pid, snapshot in reversed(self.snapshots):
            if pid == progress_id:
                return snapshot
        return None
