"""
Row/record mapping for sheet-backed collections.

A sheet is treated as a table: row 0 holds the column names, each later
row is one record. Reading zips the header onto each row; writing takes
the union of keys across all records (in order of first appearance) as
the header and serializes every value to text.

    [["id", "name"], ["p-1", "Loft"]]  <->  [{"id": "p-1", "name": "Loft"}]
"""

import json
import uuid
from typing import Any, Dict, Iterable, List, Sequence


Record = Dict[str, Any]


def new_record_id(prefix: str = "") -> str:
    """Opaque random identifier, optionally prefixed (e.g. "p-")."""
    return f"{prefix}{uuid.uuid4().hex}"


def rows_to_records(
    values: Sequence[Sequence[Any]],
    sheet_name: str = "",
    id_field: str = "id",
) -> List[Record]:
    """
    Convert a raw cell grid into records.

    Missing trailing cells become "" and columns with an empty header are
    skipped. Records without an id get a random one, unique within the read.
    """
    if not values:
        return []

    header = [str(h).strip() if h is not None else "" for h in values[0]]
    records: List[Record] = []

    for row in values[1:]:
        record: Record = {}
        for index, column in enumerate(header):
            if not column:
                continue
            record[column] = row[index] if index < len(row) else ""
        if not record.get(id_field):
            record[id_field] = new_record_id(f"{sheet_name}-" if sheet_name else "")
        records.append(record)

    return records


def collect_columns(records: Iterable[Record]) -> List[str]:
    """Union of record keys in order of first appearance."""
    columns: List[str] = []
    seen = set()
    for record in records:
        for key in record:
            if key not in seen:
                seen.add(key)
                columns.append(key)
    return columns


def serialize_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def records_to_rows(records: Sequence[Record]) -> List[List[str]]:
    """Header row plus one row per record; empty input gives no rows."""
    if not records:
        return []

    columns = collect_columns(records)
    rows = [columns]
    for record in records:
        rows.append([serialize_cell(record.get(column)) for column in columns])
    return rows
