"""
Tests for the sheet row/record mapper.

These tests verify:
- Header zipping, short rows and empty header cells
- Synthesized ids for rows without an id
- Column union in order of first appearance
- Cell serialization (None, booleans, lists, mappings, numbers)
"""

import json

from app.environments.google.sheets.mapper import (
    collect_columns,
    new_record_id,
    records_to_rows,
    rows_to_records,
    serialize_cell,
)


# ---------------------------------------------------------------------------
# READ: ROWS -> RECORDS
# ---------------------------------------------------------------------------

class TestRowsToRecords:
    """Tests for rows_to_records()."""

    def test_empty_grid_gives_no_records(self):
        assert rows_to_records([]) == []

    def test_header_only_gives_no_records(self):
        assert rows_to_records([["id", "name"]]) == []

    def test_zips_header_onto_rows(self, project_rows):
        records = rows_to_records(project_rows, sheet_name="projects")

        assert len(records) == 2
        assert records[0]["id"] == "p-1"
        assert records[0]["name"] == "信義區三房翻修案"
        assert records[1]["clientName"] == "Acme"

    def test_short_rows_are_padded_with_empty_strings(self):
        records = rows_to_records([["id", "name", "status"], ["p-1"]])

        assert records == [{"id": "p-1", "name": "", "status": ""}]

    def test_empty_header_cells_are_skipped(self):
        records = rows_to_records([["id", "", "name"], ["p-1", "ignored", "Loft"]])

        assert records == [{"id": "p-1", "name": "Loft"}]

    def test_rows_without_id_get_one_unique_id_each(self):
        grid = [["name"], ["A"], ["B"], ["C"]]

        records = rows_to_records(grid, sheet_name="projects")
        ids = [r["id"] for r in records]

        assert all(ids)
        assert len(set(ids)) == 3
        assert all(i.startswith("projects-") for i in ids)

    def test_existing_ids_are_kept(self):
        records = rows_to_records([["id", "name"], ["p-9", "X"], ["", "Y"]])

        assert records[0]["id"] == "p-9"
        assert records[1]["id"] and records[1]["id"] != "p-9"


# ---------------------------------------------------------------------------
# WRITE: RECORDS -> ROWS
# ---------------------------------------------------------------------------

class TestRecordsToRows:
    """Tests for records_to_rows() and collect_columns()."""

    def test_empty_collection_gives_no_rows(self):
        assert records_to_rows([]) == []

    def test_columns_in_order_of_first_appearance(self):
        records = [{"id": "1", "name": "A"}, {"id": "2", "budget": 5, "name": "B"}]

        assert collect_columns(records) == ["id", "name", "budget"]

    def test_missing_keys_become_empty_cells(self):
        rows = records_to_rows([{"id": "1", "name": "A"}, {"id": "2", "extra": "x"}])

        assert rows[0] == ["id", "name", "extra"]
        assert rows[1] == ["1", "A", ""]
        assert rows[2] == ["2", "", "x"]

    def test_written_rows_read_back_to_same_primitive_values(self):
        records = [
            {"id": "p-1", "name": "Loft", "budget": 800000, "tags": ["a", "b"]},
            {"id": "p-2", "name": "Villa", "budget": 1.5, "tags": []},
        ]

        read_back = rows_to_records(records_to_rows(records))

        assert read_back == [
            {"id": "p-1", "name": "Loft", "budget": "800000", "tags": '["a", "b"]'},
            {"id": "p-2", "name": "Villa", "budget": "1.5", "tags": "[]"},
        ]


class TestSerializeCell:
    """Tests for serialize_cell()."""

    def test_none_is_empty(self):
        assert serialize_cell(None) == ""

    def test_booleans_are_json_style(self):
        assert serialize_cell(True) == "true"
        assert serialize_cell(False) == "false"

    def test_mappings_keep_non_ascii_text(self):
        text = serialize_cell({"type": "翻修"})

        assert json.loads(text) == {"type": "翻修"}
        assert "翻修" in text

    def test_integral_float_has_no_decimal(self):
        assert serialize_cell(1200000.0) == "1200000"

    def test_other_scalars_use_str(self):
        assert serialize_cell(42) == "42"
        assert serialize_cell("設計中") == "設計中"


def test_new_record_id_is_random_and_prefixed():
    first = new_record_id("p-")
    second = new_record_id("p-")

    assert first.startswith("p-")
    assert first != second
