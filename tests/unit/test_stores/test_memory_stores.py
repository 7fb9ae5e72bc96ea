#!/usr/bin/env python3
"""Tests for the in-memory collaborator stores."""

from datetime import datetime

import pytest

from ledger_import.batches.models import BatchStatus, MatchStatus, RowStatus
from ledger_import.core.dates import FinancialDate
from ledger_import.stores.memory import InMemoryNameResolver, RecordingProgressSink, code_from_name


@pytest.mark.unit
class TestInMemoryTransactionStore:
    def test_create_assigns_sequential_ids(self, transaction_store, make_candidate, user_id):
        first = transaction_store.create(user_id, make_candidate(name="A"))
        second = transaction_store.create(user_id, make_candidate(name="B"))

        assert (first.id, second.id) == ("txn-1", "txn-2")
        assert transaction_store.get("txn-2", user_id).name == "B"

    def test_ids_continue_after_added_transactions(self, transaction_store, make_transaction, make_candidate, user_id):
        make_transaction("txn-7", 100, "2024-01-10")

        assert transaction_store.create(user_id, make_candidate()).id == "txn-8"

    def test_get_is_user_scoped(self, transaction_store, make_transaction, user_id):
        make_transaction("txn-1", 100, "2024-01-10", user_id="user-2")

        assert transaction_store.get("txn-1", user_id) is None
        assert transaction_store.get("txn-1", "user-2") is not None

    def test_find_by_exact_reference(self, transaction_store, make_transaction, user_id):
        make_transaction("txn-1", 100, "2024-01-10", import_reference="REF-1")

        assert transaction_store.find_by_exact_reference(user_id, "REF-1").id == "txn-1"
        assert transaction_store.find_by_exact_reference(user_id, "ref-1") is None

    def test_window_is_inclusive(self, transaction_store, make_transaction, user_id):
        make_transaction("txn-start", 100, "2024-01-07")
        make_transaction("txn-end", 100, "2024-01-13")
        make_transaction("txn-out", 100, "2024-01-14")

        found = transaction_store.find_by_amount_and_date_window(
            user_id, 100, FinancialDate.from_string("2024-01-07"), FinancialDate.from_string("2024-01-13")
        )

        assert {t.id for t in found} == {"txn-start", "txn-end"}

    def test_update(self, transaction_store, make_transaction, user_id):
        make_transaction("txn-1", 100, "2024-01-10")

        updated = transaction_store.update("txn-1", user_id, {"merchant": "Cafe"})

        assert updated.merchant == "Cafe"
        assert updated.updated_at is not None
        assert transaction_store.get("txn-1", user_id) is updated

    def test_update_rejects_amount_changes(self, transaction_store, make_transaction, user_id):
        make_transaction("txn-1", 100, "2024-01-10")

        with pytest.raises(ValueError, match="Cannot update fields: total"):
            transaction_store.update("txn-1", user_id, {"total": 200})

    def test_update_missing_transaction(self, transaction_store, user_id):
        with pytest.raises(LookupError):
            transaction_store.update("txn-404", user_id, {"merchant": "Cafe"})


@pytest.mark.unit
class TestInMemoryImportStore:
    def test_batch_lifecycle(self, import_store, user_id):
        batch = import_store.create_batch(user_id, "a.csv", "hash", 1, {"format": "chase"})

        import_store.increment_batch_count(batch.id, user_id, "created_count")
        finished = import_store.finish_batch(batch.id, user_id, BatchStatus.COMPLETED, {"note": "ok"})

        assert finished.created_count == 1
        assert finished.status == BatchStatus.COMPLETED
        assert finished.metadata == {"format": "chase", "note": "ok"}

    def test_batches_are_user_scoped(self, import_store, user_id):
        batch = import_store.create_batch(user_id, "a.csv", None, 0, {})

        assert import_store.get_batch(batch.id, "user-2") is None
        assert import_store.list_batches("user-2") == []
        with pytest.raises(LookupError):
            import_store.increment_batch_count(batch.id, "user-2", "created_count")

    def test_duplicate_lookup_returns_newest(self, import_store, user_id):
        older = import_store.create_batch(user_id, "a.csv", "same", 0, {})
        newer = import_store.create_batch(user_id, "b.csv", "same", 0, {})
        older.created_at = datetime(2024, 1, 1)
        newer.created_at = datetime(2024, 2, 1)

        assert [b.id for b in import_store.list_batches(user_id)] == [newer.id, older.id]
        assert import_store.find_duplicate_batch(user_id, "same") is newer
        assert import_store.find_duplicate_batch(user_id, "other") is None

    def test_rows(self, import_store):
        second = import_store.create_row("batch-1", 2, {}, {})
        first = import_store.create_row("batch-1", 1, {}, {})
        import_store.create_row("batch-2", 1, {}, {})

        import_store.mark_row_processed(first.id, "txn-1", RowStatus.CREATED)
        import_store.mark_row_skipped(second.id, "dup")

        assert [r.id for r in import_store.list_rows("batch-1")] == [first.id, second.id]
        assert import_store.list_rows("batch-1", RowStatus.SKIPPED) == [second]
        with pytest.raises(LookupError):
            import_store.mark_row_error("row-404", "boom")

    def test_one_match_per_transaction_and_batch(self, import_store):
        kwargs = dict(
            batch_id="batch-1",
            transaction_id="txn-1",
            confidence=90,
            matched_amount=100,
            matched_date=None,
            existing_date=None,
            days_difference=None,
            status=MatchStatus.AUTO_MERGED,
            csv_data={},
        )
        match = import_store.create_match(**kwargs)

        with pytest.raises(ValueError, match="already has a match"):
            import_store.create_match(**kwargs)
        assert import_store.find_match_in_batch("txn-1", "batch-1") is match
        assert import_store.find_match_in_batch("txn-1", "batch-2") is None
        assert import_store.create_match(**{**kwargs, "batch_id": "batch-2"}).id == "match-2"

    def test_review_missing_match(self, import_store):
        with pytest.raises(LookupError):
            import_store.review_match("match-404", "user-1", approved=True)


@pytest.mark.unit
class TestNameResolver:
    def test_resolve_reuses_case_insensitively(self, user_id):
        resolver = InMemoryNameResolver("category")

        code = resolver.resolve_or_create_by_name(user_id, "Food & Drink")

        assert code == "food_drink"
        assert resolver.resolve_or_create_by_name(user_id, " food & drink ") == "food_drink"
        assert resolver.records == {user_id: {"food_drink": "Food & Drink"}}

    def test_code_collisions_get_suffixes(self, user_id):
        resolver = InMemoryNameResolver("project")

        assert resolver.resolve_or_create_by_name(user_id, "Client-X") == "client_x"
        assert resolver.resolve_or_create_by_name(user_id, "Client X") == "client_x_2"

    def test_records_are_per_user(self, user_id):
        resolver = InMemoryNameResolver()
        resolver.resolve_or_create_by_name(user_id, "Travel")
        resolver.resolve_or_create_by_name("user-2", "Travel")

        assert set(resolver.records) == {user_id, "user-2"}

    def test_code_from_name(self):
        assert code_from_name("  Office Fit-out 2024 ") == "office_fit_out_2024"
        assert code_from_name("!!!") == "unnamed"


@pytest.mark.unit
def test_progress_sink_latest():
    sink = RecordingProgressSink()
    sink.report("user-1", "p1", {"current": 0, "total": 2})
    sink.report("user-1", "p2", {"current": 0, "total": 9})
    sink.report("user-1", "p1", {"current": 2, "total": 2})

    assert sink.latest("p1") == {"current": 2, "total": 2}
    assert sink.latest("p3") is None
