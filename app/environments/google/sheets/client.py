"""
Google Sheets API Client - The spreadsheet used as the project database.

Each collection (e.g. "projects") is one sheet tab. Data lives in the
columns A:Z; reads return the raw grid and writes replace the whole tab.

Write Model:
============
sync_records() clears {sheet}!A:Z and then writes header + rows at
{sheet}!A1 with valueInputOption=RAW. There is no concurrency check, so
at most one writer per sheet is assumed; concurrent writers overwrite
each other.

API Reference:
==============
- values.get:    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/get
- values.clear:  https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/clear
- values.update: https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/update
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from app.core.config import settings
from app.environments.base import ConfigurationError, SpreadsheetClient
from app.environments.google.auth.schemas import SHEETS_SCOPES
from app.environments.google.bootstrap import GoogleClientBootstrap
from app.environments.google.sheets.mapper import (
    Record,
    records_to_rows,
    rows_to_records,
)


logger = logging.getLogger("studio.environments.google.sheets")


# Column span read and cleared for every sheet
DATA_COLUMNS = "A:Z"


class GoogleSheetsClient(SpreadsheetClient):
    """
    Google Sheets client bound to one spreadsheet.

    Example:
        sheets = GoogleSheetsClient(bootstrap)
        projects = await sheets.fetch_records("projects")
        await sheets.sync_records("projects", projects)
    """

    service_name = "sheets"
    required_scopes = SHEETS_SCOPES

    def __init__(self, bootstrap: GoogleClientBootstrap, spreadsheet_id: Optional[str] = None):
        self.bootstrap = bootstrap
        self.spreadsheet_id = spreadsheet_id if spreadsheet_id is not None else settings.GOOGLE_SPREADSHEET_ID

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
    ) -> dict:
        if not self.spreadsheet_id:
            raise ConfigurationError("Missing configuration: GOOGLE_SPREADSHEET_ID")
        return await self.bootstrap.request(
            "sheets",
            method,
            f"v4/spreadsheets/{self.spreadsheet_id}/values/{endpoint}",
            params=params,
            json_body=json_body,
        )

    @staticmethod
    def _data_range(sheet_name: str) -> str:
        return quote(f"{sheet_name}!{DATA_COLUMNS}", safe="")

    # -------------------------------------------------------------------------
    # RAW VALUES
    # -------------------------------------------------------------------------

    async def get_values(self, sheet_name: str) -> List[List[Any]]:
        data = await self._make_request("GET", self._data_range(sheet_name))
        values = data.get("values", [])
        logger.info(f"Read {len(values)} rows from sheet '{sheet_name}'")
        return values

    async def clear_values(self, sheet_name: str) -> None:
        await self._make_request("POST", f"{self._data_range(sheet_name)}:clear", json_body={})
        logger.info(f"Cleared sheet '{sheet_name}'")

    async def update_values(self, sheet_name: str, rows: List[List[str]]) -> Dict[str, Any]:
        target = quote(f"{sheet_name}!A1", safe="")
        result = await self._make_request(
            "PUT",
            target,
            params={"valueInputOption": "RAW"},
            json_body={"values": rows},
        )
        logger.info(
            f"Wrote {len(rows)} rows to sheet '{sheet_name}'",
            extra={"updated_cells": result.get("updatedCells")}
        )
        return result

    # -------------------------------------------------------------------------
    # RECORDS
    # -------------------------------------------------------------------------

    async def fetch_records(self, sheet_name: str) -> List[Record]:
        """Read a sheet as records (see mapper.rows_to_records)."""
        values = await self.get_values(sheet_name)
        return rows_to_records(values, sheet_name=sheet_name)

    async def sync_records(self, sheet_name: str, records: List[Record]) -> bool:
        """
        Replace the sheet's contents with the given records.

        An empty collection clears the range and writes nothing.
        """
        await self.clear_values(sheet_name)

        rows = records_to_rows(records)
        if not rows:
            logger.info(f"No records for sheet '{sheet_name}', left empty")
            return True

        await self.update_values(sheet_name, rows)
        return True
