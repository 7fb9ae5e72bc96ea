#!/usr/bin/env python3
"""
Import Batch Domain Models

ImportBatch, ImportRow and TransactionMatch records with their one-way state
machines:

- batch: processing -> completed | completed_with_errors | failed
- row:   pending -> created | matched | error | skipped
- match: auto_merged | flagged, then flagged -> reviewed_merged | reviewed_rejected

Illegal transitions raise RowStateError.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from ..core.dates import FinancialDate
from ..core.json_utils import to_jsonable


class RowStateError(ValueError):
    """A record was asked to leave a terminal state or skip a transition."""


class BatchStatus(Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self != BatchStatus.PROCESSING


class RowStatus(Enum):
    PENDING = "pending"
    CREATED = "created"
    MATCHED = "matched"
    ERROR = "error"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self != RowStatus.PENDING


class MatchStatus(Enum):
    AUTO_MERGED = "auto_merged"
    FLAGGED = "flagged"
    REVIEWED_MERGED = "reviewed_merged"
    REVIEWED_REJECTED = "reviewed_rejected"


# Batch counter names, in summary order
BATCH_COUNTERS = ("matched_count", "created_count", "skipped_count", "error_count")


@dataclass
class ImportBatch:
    """
    One run of the pipeline over one uploaded file.

    Counters only ever go up, and their sum never exceeds total_rows.
    """

    id: str
    user_id: str
    filename: str
    content_hash: str | None
    total_rows: int
    status: BatchStatus = BatchStatus.PROCESSING
    matched_count: int = 0
    created_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None

    @property
    def processed_count(self) -> int:
        return self.matched_count + self.created_count + self.skipped_count + self.error_count

    def increment(self, counter: str) -> None:
        """
        Add one to a counter.

        Raises:
            RowStateError: Unknown counter, finished batch, or no rows left to count
        """
        if counter not in BATCH_COUNTERS:
            raise RowStateError(f"Unknown batch counter: {counter}")
        if self.status.is_terminal:
            raise RowStateError(f"Batch {self.id} is {self.status.value}; counters are frozen")
        if self.processed_count >= self.total_rows:
            raise RowStateError(f"Batch {self.id} already accounts for all {self.total_rows} rows")
        setattr(self, counter, getattr(self, counter) + 1)

    def finish(self, status: BatchStatus, at: datetime | None = None) -> None:
        """Move a processing batch to a terminal status."""
        if not status.is_terminal:
            raise RowStateError("A batch can only finish in a terminal status")
        if self.status.is_terminal:
            raise RowStateError(f"Batch {self.id} already finished as {self.status.value}")
        self.status = status
        self.completed_at = at or datetime.now()

    def summary(self) -> dict[str, int]:
        """The four outcome counters plus the row total."""
        return {
            "total_rows": self.total_rows,
            **{counter: getattr(self, counter) for counter in BATCH_COUNTERS},
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "filename": self.filename,
            "content_hash": self.content_hash,
            "total_rows": self.total_rows,
            "status": self.status.value,
            "matched_count": self.matched_count,
            "created_count": self.created_count,
            "skipped_count": self.skipped_count,
            "error_count": self.error_count,
            "metadata": to_jsonable(self.metadata),
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImportBatch":
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            filename=data["filename"],
            content_hash=data.get("content_hash"),
            total_rows=data["total_rows"],
            status=BatchStatus(data.get("status", "processing")),
            matched_count=data.get("matched_count", 0),
            created_count=data.get("created_count", 0),
            skipped_count=data.get("skipped_count", 0),
            error_count=data.get("error_count", 0),
            metadata=dict(data.get("metadata") or {}),
            created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else datetime.now(),
            completed_at=datetime.fromisoformat(data["completed_at"]) if data.get("completed_at") else None,
        )


@dataclass
class ImportRow:
    """One input row (or aggregated order) within a batch."""

    id: str
    batch_id: str
    row_number: int
    raw_data: dict[str, Any] = field(default_factory=dict)
    parsed_data: dict[str, Any] = field(default_factory=dict)
    status: RowStatus = RowStatus.PENDING
    error_message: str | None = None
    transaction_id: str | None = None

    def _leave_pending(self, status: RowStatus) -> None:
        if self.status.is_terminal:
            raise RowStateError(
                f"Row {self.row_number} of batch {self.batch_id} is already {self.status.value}"
            )
        self.status = status

    def mark_processed(self, transaction_id: str, status: RowStatus) -> None:
        """Resolve the row to a created or matched transaction."""
        if status not in (RowStatus.CREATED, RowStatus.MATCHED):
            raise RowStateError(f"Processed rows are created or matched, not {status.value}")
        self._leave_pending(status)
        self.transaction_id = transaction_id

    def mark_error(self, message: str) -> None:
        self._leave_pending(RowStatus.ERROR)
        self.error_message = message

    def mark_skipped(self, reason: str | None = None) -> None:
        self._leave_pending(RowStatus.SKIPPED)
        self.error_message = reason

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "batch_id": self.batch_id,
            "row_number": self.row_number,
            "raw_data": to_jsonable(self.raw_data),
            "parsed_data": to_jsonable(self.parsed_data),
            "status": self.status.value,
            "error_message": self.error_message,
            "transaction_id": self.transaction_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImportRow":
        return cls(
            id=data["id"],
            batch_id=data["batch_id"],
            row_number=data["row_number"],
            raw_data=dict(data.get("raw_data") or {}),
            parsed_data=dict(data.get("parsed_data") or {}),
            status=RowStatus(data.get("status", "pending")),
            error_message=data.get("error_message"),
            transaction_id=data.get("transaction_id"),
        )


@dataclass
class TransactionMatch:
    """A pairing decision between a statement candidate and a stored transaction."""

    id: str
    batch_id: str
    transaction_id: str
    confidence: int
    matched_amount: int | None
    matched_date: FinancialDate | None
    existing_date: FinancialDate | None
    days_difference: int | None
    status: MatchStatus
    csv_data: dict[str, Any] = field(default_factory=dict)
    merged_fields: list[str] = field(default_factory=list)
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_pending_review(self) -> bool:
        return self.status == MatchStatus.FLAGGED

    def review(
        self, approved: bool, reviewer: str, merged_fields: list[str] | None = None, at: datetime | None = None
    ) -> None:
        """
        Record a human decision on a flagged match.

        Raises:
            RowStateError: The match is not awaiting review
        """
        if not self.is_pending_review:
            raise RowStateError(f"Match {self.id} is {self.status.value}, not flagged")
        self.status = MatchStatus.REVIEWED_MERGED if approved else MatchStatus.REVIEWED_REJECTED
        self.merged_fields = list(merged_fields or []) if approved else []
        self.reviewed_by = reviewer
        self.reviewed_at = at or datetime.now()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "batch_id": self.batch_id,
            "transaction_id": self.transaction_id,
            "confidence": self.confidence,
            "matched_amount": self.matched_amount,
            "matched_date": self.matched_date.to_iso_string() if self.matched_date else None,
            "existing_date": self.existing_date.to_iso_string() if self.existing_date else None,
            "days_difference": self.days_difference,
            "status": self.status.value,
            "csv_data": to_jsonable(self.csv_data),
            "merged_fields": list(self.merged_fields),
            "reviewed_by": self.reviewed_by,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransactionMatch":
        return cls(
            id=data["id"],
            batch_id=data["batch_id"],
            transaction_id=data["transaction_id"],
            confidence=data["confidence"],
            matched_amount=data.get("matched_amount"),
            matched_date=FinancialDate.from_value(data.get("matched_date")),
            existing_date=FinancialDate.from_value(data.get("existing_date")),
            days_difference=data.get("days_difference"),
            status=MatchStatus(data["status"]),
            csv_data=dict(data.get("csv_data") or {}),
            merged_fields=list(data.get("merged_fields") or []),
            reviewed_by=data.get("reviewed_by"),
            reviewed_at=datetime.fromisoformat(data["reviewed_at"]) if data.get("reviewed_at") else None,
            created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else datetime.now(),
        )
