"""
Google Sheets Service
Mirrors rows into a spreadsheet tab using the Google integration's OAuth token
"""

import logging
from typing import Any, List, Optional, Sequence
from urllib.parse import quote

from ..models_integration import Integration
from ..shared.validators import extract_spreadsheet_id
from .google_calendar_service import GoogleAPIError, GoogleCalendarService

logger = logging.getLogger(__name__)

GOOGLE_SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"


def _cell(value: Any) -> Any:
    return "" if value is None else value


class GoogleSheetsService:
    """Shares token handling (and the HTTP transport) with the calendar client"""

    def __init__(self, calendar: GoogleCalendarService):
        self.calendar = calendar

    def _values_url(self, sheet_url: Optional[str], range_: str, suffix: str = "") -> str:
        spreadsheet_id = extract_spreadsheet_id(sheet_url)
        if not spreadsheet_id:
            raise GoogleAPIError("Invalid Google Sheets URL")
        return f"{GOOGLE_SHEETS_API}/{spreadsheet_id}/values/{quote(range_, safe='')}{suffix}"

    async def append_row(self, integration: Integration, sheet_url: str, tab: str, values: Sequence[Any]):
        url = self._values_url(sheet_url, f"{tab}!A:Z", ":append")
        await self.calendar.request(
            integration,
            "POST",
            url,
            "append row",
            params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
            json={"values": [[_cell(v) for v in values]]},
        )

    async def read_rows(self, integration: Integration, sheet_url: str, tab: str) -> List[List[Any]]:
        url = self._values_url(sheet_url, f"{tab}!A:Z")
        response = await self.calendar.request(integration, "GET", url, "read rows")
        return response.json().get("values", [])

    async def upsert_row_by_key(
        self, integration: Integration, sheet_url: str, tab: str, key: str, values: Sequence[Any]
    ) -> int:
        """
        Update the row whose column A equals ``key``, or append a new one.

        Returns:
            The 1-based row number written, or 0 when the row was appended
        """
        rows = await self.read_rows(integration, sheet_url, tab)

        row_number = 0
        for index, row in enumerate(rows):
            if row and str(row[0]) == key:
                row_number = index + 1
                break

        if not row_number:
            await self.append_row(integration, sheet_url, tab, values)
            logger.debug(f"📄 Appended sheet row for {key}")
            return 0

        url = self._values_url(sheet_url, f"{tab}!A{row_number}:Z{row_number}")
        await self.calendar.request(
            integration,
            "PUT",
            url,
            "update row",
            params={"valueInputOption": "USER_ENTERED"},
            json={"values": [[_cell(v) for v in values]]},
        )
        logger.debug(f"📄 Updated sheet row {row_number} for {key}")
        return row_number
