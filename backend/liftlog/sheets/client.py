# liftlog/sheets/client.py
"""
Thin wrapper over the Sheets v4 values API.

One client per request, built from the signed-in user's access token. All
calls are synchronous and unretried; failures surface as `Unauthorized` or
`BackendFailure`.
"""
from __future__ import annotations
import json
import logging
from typing import Any, Iterable, Optional, Sequence

from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from liftlog.errors import BackendFailure, Misconfigured, Unauthorized
from liftlog.sheets.codec import column_letter, quote_tab

log = logging.getLogger(__name__)

# Widest range read from a tab
READ_COLUMNS = "ZZ"

Rows = list[list[str]]


class SheetsClient:
    def __init__(self, access_token: str, spreadsheet_id: str, service: Any = None):
        if not spreadsheet_id:
            raise Misconfigured(["SPREADSHEET_ID"])
        if not access_token:
            raise Unauthorized()
        self.spreadsheet_id = spreadsheet_id
        if service is None:
            creds = Credentials(token=access_token)
            service = build("sheets", "v4", credentials=creds, cache_discovery=False)
        self._values = service.spreadsheets().values()
        self._spreadsheets = service.spreadsheets()

    def _execute(self, request, operation: str) -> dict:
        try:
            return request.execute() or {}
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            status = int(status) if status is not None else None
            payload = _error_payload(e)
            log.warning("sheets %s failed: status=%s", operation, status)
            if status == 401:
                raise Unauthorized("Google rejected the access token", status=status) from e
            raise BackendFailure(operation, status, payload) from e
        except RefreshError as e:
            raise Unauthorized("Google access token expired") from e

    # READS
    def read_tab(self, tab: str) -> Rows:
        result = self._execute(
            self._values.get(
                spreadsheetId=self.spreadsheet_id,
                range=f"{quote_tab(tab)}!A1:{READ_COLUMNS}",
                valueRenderOption="FORMATTED_VALUE",
            ),
            f"read {tab}",
        )
        return _rows(result.get("values"))

    def read_tabs(self, tabs: Sequence[str]) -> dict[str, Rows]:
        """Several tabs in one round trip."""
        if not tabs:
            return {}
        result = self._execute(
            self._values.batchGet(
                spreadsheetId=self.spreadsheet_id,
                ranges=[f"{quote_tab(t)}!A1:{READ_COLUMNS}" for t in tabs],
                valueRenderOption="FORMATTED_VALUE",
            ),
            "batch read " + ", ".join(tabs),
        )
        ranges = result.get("valueRanges") or []
        out = {tab: [] for tab in tabs}
        for tab, value_range in zip(tabs, ranges):
            out[tab] = _rows(value_range.get("values"))
        return out

    def list_tabs(self) -> list[str]:
        result = self._execute(
            self._spreadsheets.get(
                spreadsheetId=self.spreadsheet_id,
                fields="sheets(properties(title))",
            ),
            "list tabs",
        )
        return [s["properties"]["title"] for s in result.get("sheets", [])]

    # WRITES
    def append_rows(self, tab: str, rows: Sequence[Sequence[str]]) -> dict:
        if not rows:
            return {}
        return self._execute(
            self._values.append(
                spreadsheetId=self.spreadsheet_id,
                range=f"{quote_tab(tab)}!A1",
                valueInputOption="USER_ENTERED",
                insertDataOption="INSERT_ROWS",
                body={"values": [list(r) for r in rows]},
            ),
            f"append {tab}",
        )

    def update_row(self, tab: str, row_number: int, values: Sequence[str]) -> dict:
        last = column_letter(max(len(values), 1))
        return self._execute(
            self._values.update(
                spreadsheetId=self.spreadsheet_id,
                range=f"{quote_tab(tab)}!A{row_number}:{last}{row_number}",
                valueInputOption="USER_ENTERED",
                body={"values": [list(values)]},
            ),
            f"update {tab} row {row_number}",
        )

    def update_cells(self, tab: str, cells: Iterable[tuple[int, int, str]]) -> dict:
        """cells: (1-based row, 0-based column, value)"""
        data = [
            {"range": f"{quote_tab(tab)}!{column_letter(col + 1)}{row}", "values": [[value]]}
            for row, col, value in cells
        ]
        if not data:
            return {}
        return self._execute(
            self._values.batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={"valueInputOption": "USER_ENTERED", "data": data},
            ),
            f"batch update {tab}",
        )


def _rows(values: Optional[list]) -> Rows:
    return [[("" if c is None else str(c)) for c in row] for row in (values or [])]


def _error_payload(e: HttpError) -> Any:
    try:
        return json.loads(e.content.decode("utf-8"))
    except (AttributeError, UnicodeDecodeError, ValueError):
        return {"reason": str(e)}
