#!/usr/bin/env python3
"""
Transaction Merger

Folds statement details into an already stored transaction without
overwriting anything a person curated. Category, project, note and the free
form `extra` metadata are never touched; other fields only ever gain detail.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..core.currency import format_cents
from ..core.datastore import TransactionStore
from ..core.models import Transaction, TransactionCandidate

logger = logging.getLogger(__name__)

# Never written by a merge
PROTECTED_FIELDS = frozenset({"category_code", "project_code", "note", "extra"})


class MergeValidationError(ValueError):
    """Candidate and transaction are not the same money movement."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("\n".join(problems))


@dataclass
class MergeResult:
    """Outcome of one merge."""

    transaction: Transaction
    merged_fields: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.merged_fields)


def validate_merge_compatibility(transaction: Transaction, candidate: TransactionCandidate) -> None:
    """
    Reject a merge between records that cannot describe the same payment.

    Raises:
        MergeValidationError: Amounts differ, or both sides carry different
            currency codes
    """
    problems = []
    if transaction.total != candidate.total:
        problems.append(
            "Amount mismatch: transaction has "
            f"{format_cents(transaction.total) if transaction.total is not None else 'no amount'}, "
            f"statement has {format_cents(candidate.total) if candidate.total is not None else 'no amount'}"
        )
    if (
        transaction.currency_code
        and candidate.currency_code
        and transaction.currency_code.upper() != candidate.currency_code.upper()
    ):
        problems.append(
            f"Currency mismatch: transaction is {transaction.currency_code}, statement is {candidate.currency_code}"
        )
    if problems:
        raise MergeValidationError(problems)


def plan_merge(transaction: Transaction, candidate: TransactionCandidate) -> dict[str, Any]:
    """
    Field updates a merge would apply, keyed by field name.

    Does not include the last-matched timestamp.
    """
    updates: dict[str, Any] = {}

    if candidate.description and len(candidate.description) > len(transaction.description or ""):
        updates["description"] = candidate.description

    if not transaction.merchant and candidate.merchant:
        updates["merchant"] = candidate.merchant

    if not transaction.name and candidate.name:
        updates["name"] = candidate.name

    if not transaction.import_reference and candidate.import_reference:
        updates["import_reference"] = candidate.import_reference

    new_files = []
    for file_id in candidate.files:
        if file_id not in transaction.files and file_id not in new_files:
            new_files.append(file_id)
    if new_files:
        updates["files"] = list(transaction.files) + new_files

    return updates


def preview_merge_changes(transaction: Transaction, candidate: TransactionCandidate) -> list[str]:
    """Names of the fields merge() would change, without writing anything."""
    return list(plan_merge(transaction, candidate))


class TransactionMerger:
    """Applies merge plans through the transaction store"""

    def __init__(self, store: TransactionStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock

    def merge(self, transaction: Transaction, candidate: TransactionCandidate) -> MergeResult:
        """
        Validate, then merge a candidate into a stored transaction.

        The last-matched timestamp is always stamped; it is not reported as a
        merged field.

        Raises:
            MergeValidationError: Records are incompatible (nothing is written)
        """
        validate_merge_compatibility(transaction, candidate)

        updates = plan_merge(transaction, candidate)
        merged_fields = list(updates)
        updates["last_matched_at"] = self.clock()

        updated = self.store.update(transaction.id, transaction.user_id, updates)
        if merged_fields:
            logger.info("Merged %s into transaction %s", ", ".join(merged_fields), transaction.id)
        else:
            logger.debug("Transaction %s matched with no field changes", transaction.id)
        return MergeResult(transaction=updated, merged_fields=merged_fields)
