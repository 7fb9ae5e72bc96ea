#!/usr/bin/env python3
"""
Batch Orchestrator

Runs one import batch end to end: creates the batch, walks the candidates in
fixed-size chunks, decides per row whether to create, auto-merge, flag or
skip, and reports progress after every chunk.

Rows are processed sequentially, in row_number order. A failure inside one row
is recorded on that row and counted as an error; it never stops the batch.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..core.audit import AuditEmitter, LoggingAuditEmitter, emit_created, emit_csv_merge
from ..core.config import Config
from ..core.datastore import ProgressSink, TransactionStore
from ..core.models import Transaction, TransactionCandidate
from ..formats.detector import StatementFormat
from ..matching.finder import MatchFinder, RankedMatch, is_already_matched_in_batch
from ..matching.merger import MergeValidationError, TransactionMerger
from ..matching.scorer import AUTO_MERGE_THRESHOLD, should_auto_merge
from .datastore import ImportStore
from .models import BatchStatus, ImportBatch, ImportRow, MatchStatus, RowStatus, TransactionMatch

logger = logging.getLogger(__name__)

AUDIT_SOURCE = "csv_import"
ALREADY_MATCHED_REASON = "Already matched in this batch"


@dataclass
class ImportOptions:
    """Explicit settings for one batch run."""

    matching_enabled: bool = True
    auto_merge_threshold: int = AUTO_MERGE_THRESHOLD
    chunk_size: int = 100
    filename: str = "import.csv"
    progress_id: str | None = None
    content_hash: str | None = None
    format: StatementFormat | None = None
    column_mapping: dict[int, str] = field(default_factory=dict)
    original_row_count: int | None = None

    @classmethod
    def from_config(cls, config: Config, **overrides: Any) -> "ImportOptions":
        """Options seeded from the importing section of the app configuration."""
        values: dict[str, Any] = {
            "matching_enabled": config.importing.matching_enabled,
            "auto_merge_threshold": config.importing.auto_merge_threshold,
            "chunk_size": config.importing.chunk_size,
        }
        values.update(overrides)
        return cls(**values)


@dataclass
class BatchResult:
    """Counters of a finished batch run."""

    batch_id: str
    total_rows: int
    matched: int = 0
    created: int = 0
    skipped: int = 0
    errors: int = 0
    duplicate_of: str | None = None

    @property
    def processed(self) -> int:
        return self.matched + self.created + self.skipped + self.errors

    def progress_data(self) -> dict[str, Any]:
        return {
            "batch_id": self.batch_id,
            "matched": self.matched,
            "created": self.created,
            "flagged": self.skipped,
            "errors": self.errors,
        }


# Row outcome -> (batch counter, BatchResult attribute)
_OUTCOME_COUNTERS = {
    RowStatus.MATCHED: ("matched_count", "matched"),
    RowStatus.CREATED: ("created_count", "created"),
    RowStatus.SKIPPED: ("skipped_count", "skipped"),
    RowStatus.ERROR: ("error_count", "errors"),
}


class BatchOrchestrator:
    """Per-row reconciliation loop over the injected stores."""

    def __init__(
        self,
        transactions: TransactionStore,
        imports: ImportStore,
        progress: ProgressSink | None = None,
        audit: AuditEmitter | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.transactions = transactions
        self.imports = imports
        self.progress = progress
        self.audit = audit if audit is not None else LoggingAuditEmitter()
        self.finder = MatchFinder(transactions)
        self.merger = TransactionMerger(transactions, clock=clock)

    def run(
        self, user_id: str, candidates: Sequence[TransactionCandidate], options: ImportOptions | None = None
    ) -> BatchResult:
        """
        Import a list of candidates as one batch.

        Raises:
            Exception: Whatever the store raises while creating the batch (no
                batch exists), or a failure outside row processing (the batch
                is marked failed first)
        """
        options = options or ImportOptions()
        if options.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

        batch, duplicate = self._create_batch(user_id, candidates, options)
        result = BatchResult(
            batch_id=batch.id,
            total_rows=len(candidates),
            duplicate_of=duplicate.id if duplicate else None,
        )
        progress_id = options.progress_id or batch.id

        try:
            self._report(user_id, progress_id, 0, result)

            for start in range(0, len(candidates), options.chunk_size):
                chunk = candidates[start : start + options.chunk_size]
                for offset, candidate in enumerate(chunk):
                    row_number = start + offset + 1
                    outcome = self._process_row_isolated(user_id, batch, row_number, candidate, options)
                    counter, attribute = _OUTCOME_COUNTERS[outcome]
                    self.imports.increment_batch_count(batch.id, user_id, counter)
                    setattr(result, attribute, getattr(result, attribute) + 1)

                self._report(user_id, progress_id, min(start + options.chunk_size, len(candidates)), result)

            self.imports.finish_batch(batch.id, user_id, BatchStatus.COMPLETED)
        except Exception as e:
            logger.error("Import batch %s failed: %s", batch.id, e)
            self.imports.finish_batch(batch.id, user_id, BatchStatus.FAILED, {"error": str(e)})
            raise

        logger.info(
            "Batch %s completed: %d matched, %d created, %d skipped, %d errors (of %d rows)",
            batch.id,
            result.matched,
            result.created,
            result.skipped,
            result.errors,
            result.total_rows,
        )
        return result

    def _create_batch(
        self, user_id: str, candidates: Sequence[TransactionCandidate], options: ImportOptions
    ) -> tuple[ImportBatch, ImportBatch | None]:
        duplicate = None
        if options.content_hash:
            duplicate = self.imports.find_duplicate_batch(user_id, options.content_hash)

        metadata: dict[str, Any] = {
            "format": options.format.value if options.format else None,
            "column_mappings": (
                {str(k): v for k, v in options.column_mapping.items()}
                if options.format == StatementFormat.GENERIC
                else {}
            ),
            "original_row_count": (
                options.original_row_count if options.original_row_count is not None else len(candidates)
            ),
        }
        if duplicate is not None:
            logger.warning(
                "%s has the same content as batch %s imported %s",
                options.filename,
                duplicate.id,
                duplicate.created_at.isoformat(),
            )
            metadata.update(
                {
                    "duplicate_warning": True,
                    "previous_batch_id": duplicate.id,
                    "previous_import_date": duplicate.created_at.isoformat(),
                }
            )

        batch = self.imports.create_batch(
            user_id=user_id,
            filename=options.filename,
            content_hash=options.content_hash,
            total_rows=len(candidates),
            metadata=metadata,
        )
        return batch, duplicate

    def _report(self, user_id: str, progress_id: str, current: int, result: BatchResult) -> None:
        if self.progress is None:
            return
        self.progress.report(
            user_id,
            progress_id,
            {"current": current, "total": result.total_rows, "data": result.progress_data()},
        )

    def _process_row_isolated(
        self,
        user_id: str,
        batch: ImportBatch,
        row_number: int,
        candidate: TransactionCandidate,
        options: ImportOptions,
    ) -> RowStatus:
        """Process one row; any exception turns into an error outcome for that row alone."""
        row: ImportRow | None = None
        try:
            row = self.imports.create_row(batch.id, row_number, candidate.raw_data, candidate.to_dict())
            return self._process_row(user_id, batch, row, candidate, options)
        except Exception as e:
            logger.error("Error processing row %d of batch %s: %s", row_number, batch.id, e)
            if row is not None:
                current = self.imports.get_row(row.id) or row
                if current.status == RowStatus.PENDING:
                    self.imports.mark_row_error(row.id, str(e))
            return RowStatus.ERROR

    def _process_row(
        self,
        user_id: str,
        batch: ImportBatch,
        row: ImportRow,
        candidate: TransactionCandidate,
        options: ImportOptions,
    ) -> RowStatus:
        can_match = candidate.has_reference or candidate.has_amount_and_date
        if not options.matching_enabled or not can_match:
            transaction = self._create_transaction(user_id, batch, candidate, options)
            self.imports.mark_row_processed(row.id, transaction.id, RowStatus.CREATED)
            return RowStatus.CREATED

        best = self.finder.find_best_match(user_id, candidate)
        if best is None:
            transaction = self._create_transaction(user_id, batch, candidate, options)
            self.imports.mark_row_processed(row.id, transaction.id, RowStatus.CREATED)
            return RowStatus.CREATED

        if is_already_matched_in_batch(self.imports, best.transaction.id, batch.id):
            self.imports.mark_row_skipped(row.id, ALREADY_MATCHED_REASON)
            return RowStatus.SKIPPED

        if should_auto_merge(best.confidence, options.auto_merge_threshold):
            return self._auto_merge(user_id, batch, row, candidate, best, options)

        self._record_match(batch, candidate, best, MatchStatus.FLAGGED)
        self.imports.mark_row_skipped(row.id, f"Flagged for review ({best.confidence}% confidence)")
        return RowStatus.SKIPPED

    def _auto_merge(
        self,
        user_id: str,
        batch: ImportBatch,
        row: ImportRow,
        candidate: TransactionCandidate,
        best: RankedMatch,
        options: ImportOptions,
    ) -> RowStatus:
        try:
            merge = self.merger.merge(best.transaction, candidate)
        except MergeValidationError as e:
            logger.warning(
                "Merge into %s rejected for row %d, creating a new transaction: %s",
                best.transaction.id,
                row.row_number,
                e,
            )
            self._create_transaction(user_id, batch, candidate, options)
            self.imports.mark_row_error(row.id, f"Merge failed: {e}")
            return RowStatus.ERROR

        match = self._record_match(batch, candidate, best, MatchStatus.AUTO_MERGED, merge.merged_fields)
        self.imports.mark_row_processed(row.id, merge.transaction.id, RowStatus.MATCHED)
        self._emit_audit(
            emit_csv_merge,
            merge.transaction.id,
            user_id,
            merge.merged_fields,
            match_id=match.id,
            batch_filename=batch.filename,
        )
        return RowStatus.MATCHED

    def _create_transaction(
        self, user_id: str, batch: ImportBatch, candidate: TransactionCandidate, options: ImportOptions
    ) -> Transaction:
        transaction = self.transactions.create(user_id, candidate)
        self._emit_audit(
            emit_created,
            transaction.id,
            user_id,
            source=AUDIT_SOURCE,
            batch_id=batch.id,
            batch_filename=batch.filename,
            format=options.format.value if options.format else None,
        )
        return transaction

    def _emit_audit(self, emit: Callable[..., Any], transaction_id: str, *args: Any, **kwargs: Any) -> None:
        """Send an audit event; a failing emitter is logged and never changes the row outcome."""
        try:
            emit(self.audit, transaction_id, *args, **kwargs)
        except Exception as e:
            logger.error("Audit event for %s could not be emitted: %s", transaction_id, e)

    def _record_match(
        self,
        batch: ImportBatch,
        candidate: TransactionCandidate,
        best: RankedMatch,
        status: MatchStatus,
        merged_fields: list[str] | None = None,
    ) -> TransactionMatch:
        existing = best.transaction
        matched_date = candidate.issued_at or existing.issued_at
        existing_date = existing.issued_at or matched_date
        days = matched_date.days_between(existing_date) if matched_date and existing_date else None

        return self.imports.create_match(
            batch_id=batch.id,
            transaction_id=existing.id,
            confidence=best.confidence,
            matched_amount=candidate.total if candidate.total is not None else existing.total,
            matched_date=matched_date,
            existing_date=existing_date,
            days_difference=days,
            status=status,
            csv_data=candidate.to_dict(),
            merged_fields=merged_fields,
        )


def run_import_batch(
    user_id: str,
    candidates: Sequence[TransactionCandidate],
    options: ImportOptions | None = None,
    *,
    transactions: TransactionStore,
    imports: ImportStore,
    progress: ProgressSink | None = None,
    audit: AuditEmitter | None = None,
) -> BatchResult:
    """
    Run one import batch over already parsed candidates.

    Args:
        user_id: Owner of the batch and of every transaction touched
        candidates: Output of parse_rows(), in file order
        options: Matching switch, threshold, chunk size and batch metadata
        transactions: Transaction store
        imports: Batch/row/match persistence
        progress: Optional sink for per-chunk progress snapshots
        audit: Audit emitter (defaults to a LoggingAuditEmitter)

    Returns:
        BatchResult with the batch id and the four outcome counters
    """
    orchestrator = BatchOrchestrator(transactions, imports, progress=progress, audit=audit)
    return orchestrator.run(user_id, candidates, options)
