#!/usr/bin/env python3
"""
Match Finder

Looks up stored transactions that a statement candidate could reconcile
against. An exact import reference wins outright; otherwise transactions with
the same amount within the scoring window are scored and ranked.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from ..core.datastore import TransactionStore
from ..core.models import Transaction, TransactionCandidate
from .scorer import MAX_DAYS_DIFFERENCE, MatchScorer

logger = logging.getLogger(__name__)

REFERENCE_CONFIDENCE = 100


class BatchMatchLookup(Protocol):
    """Anything that can find a match record by (transaction, batch)."""

    def find_match_in_batch(self, transaction_id: str, batch_id: str) -> Any: ...


@dataclass(frozen=True)
class RankedMatch:
    """A stored transaction paired with its match confidence."""

    transaction: Transaction
    confidence: int
    by_reference: bool = False


class MatchFinder:
    """User-scoped match lookup over a TransactionStore"""

    def __init__(self, store: TransactionStore):
        self.store = store

    def find_matches(self, user_id: str, candidate: TransactionCandidate) -> list[RankedMatch]:
        """
        Rank the user's transactions that could match a candidate.

        Returns:
            A single confidence-100 entry for an exact reference match,
            otherwise scored matches sorted by confidence then newest first
        """
        if candidate.import_reference:
            existing = self.store.find_by_exact_reference(user_id, candidate.import_reference)
            if existing is not None:
                logger.debug("Reference match %s -> %s", candidate.import_reference, existing.id)
                return [RankedMatch(transaction=existing, confidence=REFERENCE_CONFIDENCE, by_reference=True)]

        if candidate.total is None or candidate.issued_at is None:
            return []

        window = self.store.find_by_amount_and_date_window(
            user_id,
            candidate.total,
            candidate.issued_at.shift(-MAX_DAYS_DIFFERENCE),
            candidate.issued_at.shift(MAX_DAYS_DIFFERENCE),
        )

        ranked = []
        for transaction in window:
            confidence = MatchScorer.calculate_confidence(
                candidate.total, candidate.issued_at, transaction.total, transaction.issued_at
            )
            if confidence > 0:
                ranked.append(RankedMatch(transaction=transaction, confidence=confidence))

        # Two stable passes: newest first, then confidence descending
        ranked.sort(key=lambda match: match.transaction.created_at, reverse=True)
        ranked.sort(key=lambda match: match.confidence, reverse=True)

        logger.debug(
            "Found %d candidate matches for %s on %s", len(ranked), candidate.total, candidate.issued_at
        )
        return ranked

    def find_best_match(self, user_id: str, candidate: TransactionCandidate) -> RankedMatch | None:
        """Top-ranked match, or None."""
        matches = self.find_matches(user_id, candidate)
        return matches[0] if matches else None


def is_already_matched_in_batch(matches: BatchMatchLookup, transaction_id: str, batch_id: str) -> bool:
    """
    True when the transaction already has a match record in this batch.

    Consulted before accepting a match so duplicate statement rows cannot
    merge into (or flag) the same transaction twice in one run.
    """
    return matches.find_match_in_batch(transaction_id, batch_id) is not None
