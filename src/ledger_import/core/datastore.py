#!/usr/bin/env python3
"""
Collaborator Protocols - interfaces the import pipeline consumes.

The pipeline never talks to a database directly. Every durable effect goes
through one of these protocols, and every query/write is scoped by user id.
Reference implementations live in ledger_import.stores.
"""

from typing import Any, Protocol

from .dates import FinancialDate
from .models import Transaction, TransactionCandidate


class TransactionStore(Protocol):
    """User-scoped store of financial transactions."""

    def create(self, user_id: str, candidate: TransactionCandidate) -> Transaction:
        """
        Persist a new transaction built from a candidate.

        Returns:
            The stored Transaction (with id and created_at assigned)
        """
        ...

    def get(self, transaction_id: str, user_id: str) -> Transaction | None:
        """Fetch one transaction owned by the user, or None."""
        ...

    def find_by_exact_reference(self, user_id: str, reference: str) -> Transaction | None:
        """Return the user's transaction whose import_reference equals `reference`."""
        ...

    def find_by_amount_and_date_window(
        self, user_id: str, amount: int, date_from: FinancialDate, date_to: FinancialDate
    ) -> list[Transaction]:
        """
        Return the user's transactions with total == amount and issued_at in
        the inclusive range [date_from, date_to].
        """
        ...

    def update(self, transaction_id: str, user_id: str, fields: dict[str, Any]) -> Transaction:
        """
        Apply a partial update and return the updated transaction.

        Raises:
            LookupError: If the transaction does not exist for this user
        """
        ...


class NameResolver(Protocol):
    """Look up a category or project by name, creating it if missing."""

    def resolve_or_create_by_name(self, user_id: str, name: str) -> str:
        """
        Returns:
            The code of the existing or newly created record
        """
        ...


class ProgressSink(Protocol):
    """Receives incremental progress snapshots during a batch run."""

    def report(self, user_id: str, progress_id: str, snapshot: dict[str, Any]) -> None:
        """
        Args:
            snapshot: {"current": int, "total": int, "data": {...counters}}
        """
        ...
