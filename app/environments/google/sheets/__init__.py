"""
Google Sheets Module - Spreadsheet-backed record storage.

The client talks to the Sheets API; the mapper converts between the raw
cell grid and records (dicts keyed by column name).
"""

from app.environments.google.sheets.client import GoogleSheetsClient
from app.environments.google.sheets.mapper import (
    collect_columns,
    new_record_id,
    records_to_rows,
    rows_to_records,
    serialize_cell,
)

__all__ = [
    "GoogleSheetsClient",
    "collect_columns",
    "new_record_id",
    "records_to_rows",
    "rows_to_records",
    "serialize_cell",
]
