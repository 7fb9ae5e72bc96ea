"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from ledger_import.core import config as config_module
from ledger_import.core.audit import LoggingAuditEmitter
from ledger_import.core.dates import FinancialDate
from ledger_import.core.models import Transaction, TransactionCandidate
from ledger_import.formats.context import ParseContext
from ledger_import.stores.memory import (
    InMemoryImportStore,
    InMemoryNameResolver,
    InMemoryTransactionStore,
    RecordingProgressSink,
)
from tests.fixtures.statements import AMAZON_HEADER, sample_amazon_rows

USER_ID = "user-1"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_path:
        yield Path(temp_path)


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Set up test environment variables."""
    # Ensure tests don't use real data
    monkeypatch.setenv("LEDGER_IMPORT_ENV", "test")
    monkeypatch.setenv("LEDGER_IMPORT_DATA_DIR", str(tmp_path / "ledger_data"))
    for name in (
        "LEDGER_IMPORT_MATCHING_ENABLED",
        "LEDGER_IMPORT_AUTO_MERGE_THRESHOLD",
        "LEDGER_IMPORT_CHUNK_SIZE",
        "LEDGER_IMPORT_DEFAULT_CURRENCY",
        "LOG_LEVEL",
        "DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)

    # Drop any configuration cached by a previous test
    monkeypatch.setattr(config_module, "_config", None)


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def transaction_store() -> InMemoryTransactionStore:
    return InMemoryTransactionStore()


@pytest.fixture
def import_store() -> InMemoryImportStore:
    return InMemoryImportStore()


@pytest.fixture
def categories() -> InMemoryNameResolver:
    return InMemoryNameResolver("category")


@pytest.fixture
def projects() -> InMemoryNameResolver:
    return InMemoryNameResolver("project")


@pytest.fixture
def progress_sink() -> RecordingProgressSink:
    return RecordingProgressSink()


@pytest.fixture
def audit() -> LoggingAuditEmitter:
    return LoggingAuditEmitter()


@pytest.fixture
def parse_context(categories, projects) -> ParseContext:
    return ParseContext(user_id=USER_ID, category_resolver=categories, project_resolver=projects)


@pytest.fixture
def make_transaction(transaction_store):
    """Factory adding a stored transaction for USER_ID."""

    def _make(
        transaction_id: str,
        total: int | None,
        issued_at: str | None,
        created_at: datetime | None = None,
        **fields: Any,
    ) -> Transaction:
        fields.setdefault("currency_code", "USD")
        transaction = Transaction(
            id=transaction_id,
            user_id=fields.pop("user_id", USER_ID),
            total=total,
            issued_at=FinancialDate.from_value(issued_at),
            created_at=created_at or datetime(2024, 1, 1, 12, 0),
            **fields,
        )
        return transaction_store.add(transaction)

    return _make


@pytest.fixture
def make_candidate():
    """Factory for candidates with an ISO issued date."""

    def _make(total: int | None = 5000, issued_at: str | None = "2024-01-10", **fields: Any) -> TransactionCandidate:
        fields.setdefault("currency_code", "USD")
        return TransactionCandidate(total=total, issued_at=FinancialDate.from_value(issued_at), **fields)

    return _make


@pytest.fixture
def amazon_header() -> list[str]:
    return list(AMAZON_HEADER)


@pytest.fixture
def amazon_rows() -> list[list[str]]:
    """Six item rows: order A (4 items, one charge) and order B (2 items, one charge)."""
    return sample_amazon_rows()


@pytest.fixture
def amazon_records(amazon_header, amazon_rows) -> list[dict[str, str]]:
    return [dict(zip(amazon_header, row)) for row in amazon_rows]


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for complete workflows")
    config.addinivalue_line("markers", "currency: Tests for currency handling and precision")
    config.addinivalue_line("markers", "amazon: Tests for Amazon order aggregation")
    config.addinivalue_line("markers", "formats: Tests for statement reading and dialect parsing")
    config.addinivalue_line("markers", "matching: Tests for match scoring, lookup and merging")
    config.addinivalue_line("markers", "batches: Tests for batch orchestration and review")
