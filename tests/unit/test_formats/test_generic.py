#!/usr/bin/env python3
"""Tests for the generic column-mapped dialect."""

import pytest

from ledger_import.core.models import TransactionType
from ledger_import.formats.generic import map_generic_row, normalize_column_mapping
from ledger_import.formats.reader import ImportInputError

HEADER = ["When", "What", "How Much", "Cur", "Kind", "Bucket", "Job", "Ref"]


@pytest.mark.formats
class TestNormalizeColumnMapping:
    def test_canonical_and_alias_names(self):
        mapping = normalize_column_mapping({"0": "date", 1: "name", 2: "amount", 3: "currencyCode"})

        assert mapping == {0: "issued_at", 1: "name", 2: "total", 3: "currency_code"}

    def test_blank_targets_are_ignored(self):
        assert normalize_column_mapping({0: "name", 1: ""}) == {0: "name"}

    @pytest.mark.parametrize("mapping", [None, {}, {0: ""}])
    def test_nothing_mapped(self, mapping):
        with pytest.raises(ImportInputError, match="at least one mapped column"):
            normalize_column_mapping(mapping)

    def test_unknown_field(self):
        with pytest.raises(ImportInputError, match="Unknown target field 'colour'"):
            normalize_column_mapping({0: "colour"})

    def test_non_integer_index(self):
        with pytest.raises(ImportInputError, match="Column index must be an integer"):
            normalize_column_mapping({"first": "name"})


@pytest.mark.formats
class TestMapGenericRow:
    MAPPING = {
        0: "issued_at",
        1: "name",
        2: "total",
        3: "currency_code",
        4: "type",
        5: "category",
        6: "project",
        7: "import_reference",
    }

    def test_maps_every_field(self, parse_context, projects, user_id):
        row = ["2024-01-10", "Lunch", "(12.50)", "eur", "income", "Meals", "Client X", '="R-1"']

        candidate = map_generic_row(HEADER, row, self.MAPPING, parse_context)

        assert candidate.issued_at.to_iso_string() == "2024-01-10"
        assert candidate.name == "Lunch"
        assert candidate.total == 1250
        assert candidate.currency_code == "EUR"
        assert candidate.type == TransactionType.INCOME
        assert candidate.category_code == "meals"
        assert candidate.project_code == "client_x"
        assert projects.records[user_id] == {"client_x": "Client X"}
        assert candidate.import_reference == "R-1"
        assert candidate.raw_data["How Much"] == "(12.50)"

    def test_unmapped_and_missing_columns(self, parse_context):
        candidate = map_generic_row(HEADER[:2], ["01/10/2024", "Lunch"], {0: "issued_at", 5: "note"}, parse_context)

        assert candidate.issued_at.to_iso_string() == "2024-01-10"
        assert candidate.name is None
        assert candidate.note is None
        assert candidate.currency_code == "USD"
        assert candidate.type == TransactionType.EXPENSE

    def test_bad_values_leave_fields_empty(self, parse_context):
        candidate = map_generic_row(
            HEADER[:3], ["someday", "Lunch", "lots"], {0: "issued_at", 2: "total"}, parse_context
        )

        assert candidate.issued_at is None
        assert candidate.total is None
        assert not candidate.has_amount_and_date

    def test_extra_cells_keyed_by_position(self, parse_context):
        candidate = map_generic_row(["A"], ["x", "y"], {0: "name"}, parse_context)

        assert candidate.raw_data == {"A": "x", "1": "y"}
