#!/usr/bin/env python3
"""
Tests for merging statement details into stored transactions.

A merge only adds detail: it never overwrites curated fields and never
changes the amount.
"""

from datetime import datetime

import pytest

from ledger_import.matching.merger import (
    PROTECTED_FIELDS,
    MergeValidationError,
    TransactionMerger,
    plan_merge,
    preview_merge_changes,
    validate_merge_compatibility,
)

MATCHED_AT = datetime(2024, 2, 1, 9, 30)


@pytest.fixture
def merger(transaction_store) -> TransactionMerger:
    return TransactionMerger(transaction_store, clock=lambda: MATCHED_AT)


@pytest.mark.matching
class TestPlanMerge:
    def test_longer_description_wins(self, make_transaction, make_candidate):
        txn = make_transaction("txn-1", 5000, "2024-01-10", description="Coffee")

        assert plan_merge(txn, make_candidate(description="Coffee beans, 1kg")) == {
            "description": "Coffee beans, 1kg"
        }
        assert plan_merge(txn, make_candidate(description="Tea")) == {}
        assert plan_merge(txn, make_candidate(description="Coffe!")) == {}

    def test_merchant_name_and_reference_only_fill_gaps(self, make_transaction, make_candidate):
        empty = make_transaction("txn-1", 5000, "2024-01-10")
        filled = make_transaction(
            "txn-2", 5000, "2024-01-10", merchant="Cafe", name="Coffee", import_reference="OLD"
        )
        candidate = make_candidate(merchant="CAFE INC", name="CAFE INC 123", import_reference="NEW")

        assert plan_merge(empty, candidate) == {
            "merchant": "CAFE INC",
            "name": "CAFE INC 123",
            "import_reference": "NEW",
        }
        assert plan_merge(filled, candidate) == {}

    def test_files_are_appended_without_duplicates(self, make_transaction, make_candidate):
        txn = make_transaction("txn-1", 5000, "2024-01-10", files=["a.pdf"])

        updates = plan_merge(txn, make_candidate(files=["a.pdf", "b.pdf", "b.pdf", "c.pdf"]))

        assert updates == {"files": ["a.pdf", "b.pdf", "c.pdf"]}

    def test_protected_fields_are_never_planned(self, make_transaction, make_candidate):
        txn = make_transaction("txn-1", 5000, "2024-01-10")
        candidate = make_candidate(
            category_code="groceries", project_code="home", note="from statement", extra={"memo": "x"}
        )

        assert PROTECTED_FIELDS.isdisjoint(plan_merge(txn, candidate))

    def test_preview_lists_field_names(self, make_transaction, make_candidate):
        txn = make_transaction("txn-1", 5000, "2024-01-10")

        assert preview_merge_changes(txn, make_candidate(merchant="Cafe", files=["a.pdf"])) == ["merchant", "files"]
        assert preview_merge_changes(txn, make_candidate()) == []


@pytest.mark.matching
class TestValidateMergeCompatibility:
    def test_matching_amounts_pass(self, make_transaction, make_candidate):
        txn = make_transaction("txn-1", 5000, "2024-01-10")

        validate_merge_compatibility(txn, make_candidate(5000))

    def test_amount_mismatch(self, make_transaction, make_candidate):
        txn = make_transaction("txn-1", 5000, "2024-01-10")

        with pytest.raises(MergeValidationError) as exc_info:
            validate_merge_compatibility(txn, make_candidate(5001))

        assert exc_info.value.problems == ["Amount mismatch: transaction has $50.00, statement has $50.01"]

    def test_currency_mismatch_is_case_insensitive(self, make_transaction, make_candidate):
        txn = make_transaction("txn-1", 5000, "2024-01-10", currency_code="usd")

        validate_merge_compatibility(txn, make_candidate(5000, currency_code="USD"))
        with pytest.raises(MergeValidationError, match="Currency mismatch"):
            validate_merge_compatibility(txn, make_candidate(5000, currency_code="EUR"))

    def test_missing_currency_is_not_a_mismatch(self, make_transaction, make_candidate):
        txn = make_transaction("txn-1", 5000, "2024-01-10", currency_code=None)

        validate_merge_compatibility(txn, make_candidate(5000, currency_code="EUR"))

    def test_all_problems_are_reported(self, make_transaction, make_candidate):
        txn = make_transaction("txn-1", 5000, "2024-01-10")

        with pytest.raises(MergeValidationError) as exc_info:
            validate_merge_compatibility(txn, make_candidate(None, currency_code="EUR"))

        assert len(exc_info.value.problems) == 2
        assert str(exc_info.value) == "\n".join(exc_info.value.problems)
        assert "statement has no amount" in exc_info.value.problems[0]


@pytest.mark.matching
class TestTransactionMerger:
    def test_merge_updates_store(self, merger, transaction_store, make_transaction, make_candidate, user_id):
        make_transaction("txn-1", 5000, "2024-01-10", description="Coffee", category_code="food", note="mine")

        result = merger.merge(
            transaction_store.get("txn-1", user_id),
            make_candidate(description="Coffee beans, 1kg", merchant="Roaster", category_code="other", note="csv"),
        )

        assert result.merged_fields == ["description", "merchant"]
        assert result.changed
        stored = transaction_store.get("txn-1", user_id)
        assert stored.description == "Coffee beans, 1kg"
        assert stored.merchant == "Roaster"
        assert stored.category_code == "food"
        assert stored.note == "mine"
        assert stored.last_matched_at == MATCHED_AT
        assert result.transaction == stored

    def test_no_changes_still_stamps_last_matched(self, merger, transaction_store, make_transaction, make_candidate):
        txn = make_transaction("txn-1", 5000, "2024-01-10", merchant="Cafe")

        result = merger.merge(txn, make_candidate(merchant="Other"))

        assert result.merged_fields == []
        assert not result.changed
        assert result.transaction.last_matched_at == MATCHED_AT
        assert "last_matched_at" not in result.merged_fields

    def test_invalid_merge_writes_nothing(self, merger, transaction_store, make_transaction, make_candidate, user_id):
        txn = make_transaction("txn-1", 5000, "2024-01-10")

        with pytest.raises(MergeValidationError):
            merger.merge(txn, make_candidate(4000, merchant="Cafe"))

        stored = transaction_store.get("txn-1", user_id)
        assert stored.merchant is None
        assert stored.last_matched_at is None
