#!/usr/bin/env python3
"""
Flagged Match Review

Approve or reject matches the orchestrator flagged for a human decision.
Approval merges the statement snapshot stored on the match into the
transaction; rejection only records the decision.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..core.audit import AuditEmitter, LoggingAuditEmitter, emit_csv_merge, emit_match_reviewed
from ..core.datastore import TransactionStore
from ..core.models import Transaction, TransactionCandidate
from ..matching.merger import TransactionMerger
from .datastore import ImportStore
from .models import ImportBatch, RowStateError, TransactionMatch

logger = logging.getLogger(__name__)


class MatchNotFoundError(LookupError):
    """No match with this id is visible to the user."""


class TransactionNotFoundError(LookupError):
    """The match points at a transaction the user does not have."""


@dataclass
class ReviewOutcome:
    """Per-match result of a bulk review."""

    match_id: str
    success: bool
    error: str | None = None
    merged_fields: list[str] = field(default_factory=list)


def _load_match(imports: ImportStore, match_id: str, user_id: str) -> tuple[TransactionMatch, ImportBatch]:
    match = imports.get_match(match_id)
    if match is None:
        raise MatchNotFoundError(f"Match not found: {match_id}")
    batch = imports.get_batch(match.batch_id, user_id)
    if batch is None:
        # Another user's batch reads as missing
        raise MatchNotFoundError(f"Match not found: {match_id}")
    return match, batch


def _load_transaction(transactions: TransactionStore, match: TransactionMatch, user_id: str) -> Transaction:
    transaction = transactions.get(match.transaction_id, user_id)
    if transaction is None:
        raise TransactionNotFoundError(f"Transaction not found: {match.transaction_id}")
    return transaction


def approve_match(
    match_id: str,
    user_id: str,
    *,
    transactions: TransactionStore,
    imports: ImportStore,
    audit: AuditEmitter | None = None,
) -> list[str]:
    """
    Approve a flagged match and merge its statement data.

    Returns:
        Names of the transaction fields the merge changed

    Raises:
        MatchNotFoundError: Unknown match, or not the user's
        TransactionNotFoundError: Matched transaction no longer exists
        RowStateError: Match is not flagged
        MergeValidationError: Amounts or currencies no longer agree (nothing written)
    """
    audit = audit if audit is not None else LoggingAuditEmitter()
    match, batch = _load_match(imports, match_id, user_id)
    transaction = _load_transaction(transactions, match, user_id)

    if not match.is_pending_review:
        raise RowStateError(f"Match {match_id} is {match.status.value}, not flagged")

    candidate = TransactionCandidate.from_dict(match.csv_data)
    merge = TransactionMerger(transactions).merge(transaction, candidate)
    imports.review_match(match_id, user_id, approved=True, merged_fields=merge.merged_fields)

    emit_csv_merge(
        audit, transaction.id, user_id, merge.merged_fields, match_id=match_id, batch_filename=batch.filename
    )
    emit_match_reviewed(
        audit, transaction.id, user_id, match_id=match_id, decision="approved", batch_filename=batch.filename
    )
    logger.info("Approved match %s for transaction %s", match_id, transaction.id)
    return merge.merged_fields


def reject_match(
    match_id: str,
    user_id: str,
    *,
    imports: ImportStore,
    audit: AuditEmitter | None = None,
) -> None:
    """
    Reject a flagged match; the transaction is left untouched.

    Raises:
        MatchNotFoundError: Unknown match, or not the user's
        RowStateError: Match is not flagged
    """
    audit = audit if audit is not None else LoggingAuditEmitter()
    match, batch = _load_match(imports, match_id, user_id)
    imports.review_match(match_id, user_id, approved=False)

    emit_match_reviewed(
        audit, match.transaction_id, user_id, match_id=match_id, decision="rejected", batch_filename=batch.filename
    )
    logger.info("Rejected match %s", match_id)


def approve_matches(
    match_ids: Iterable[str],
    user_id: str,
    *,
    transactions: TransactionStore,
    imports: ImportStore,
    audit: AuditEmitter | None = None,
) -> list[ReviewOutcome]:
    """Approve several matches; a failure is reported and the rest continue."""
    outcomes = []
    for match_id in match_ids:
        try:
            merged = approve_match(match_id, user_id, transactions=transactions, imports=imports, audit=audit)
            outcomes.append(ReviewOutcome(match_id=match_id, success=True, merged_fields=merged))
        except Exception as e:
            logger.warning("Could not approve match %s: %s", match_id, e)
            outcomes.append(ReviewOutcome(match_id=match_id, success=False, error=str(e)))
    return outcomes


def reject_matches(
    match_ids: Iterable[str],
    user_id: str,
    *,
    imports: ImportStore,
    audit: AuditEmitter | None = None,
) -> list[ReviewOutcome]:
    """Reject several matches; a failure is reported and the rest continue."""
    outcomes = []
    for match_id in match_ids:
        try:
            reject_match(match_id, user_id, imports=imports, audit=audit)
            outcomes.append(ReviewOutcome(match_id=match_id, success=True))
        except Exception as e:
            logger.warning("Could not reject match %s: %s", match_id, e)
            outcomes.append(ReviewOutcome(match_id=match_id, success=False, error=str(e)))
    return outcomes
