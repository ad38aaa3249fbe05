"""
Google Sheets Document Store

DESIGN DECISION: Google Sheets is used as the hosted backend because:
1. Users can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (read-modify-write is last-write-wins)
- Limited query capabilities (we filter in Python via `run_query`)

Each collection lives in its own worksheet. Row 1 is the header; each
following row is one document. Columns are typed so numbers, booleans
and JSON lists survive the round trip through cell strings.
"""

import json
from typing import Any, Optional
from uuid import uuid4

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from finance_tracker.config import GoogleSheetsSettings, get_settings
from finance_tracker.services.storage.interface import (
    Document,
    DocumentNotFoundError,
    DocumentStore,
    FieldFilter,
    PageCursor,
    StorageConnectionError,
    StorageError,
    run_query,
)


# Column layout per collection: (field, kind)
# kinds: str, opt (string, empty cell = None), int, float, bool, json
COLLECTION_COLUMNS: dict[str, list[tuple[str, str]]] = {
    "categories": [
        ("id", "str"),
        ("user_id", "str"),
        ("category_key", "str"),
        ("name", "str"),
        ("type", "str"),
        ("status", "str"),
        ("created_at", "str"),
        ("updated_at", "str"),
    ],
    "transactions": [
        ("id", "str"),
        ("user_id", "str"),
        ("type", "str"),
        ("category_id", "str"),
        ("amount", "float"),
        ("description", "str"),
        ("date", "str"),
        ("created_at", "int"),
        ("updated_at", "str"),
    ],
    "todos": [
        ("id", "str"),
        ("user_id", "str"),
        ("text", "str"),
        ("completed", "bool"),
        ("status", "str"),
        ("prev_status", "opt"),
        ("due_date", "opt"),
        ("notes", "str"),
        ("history", "json"),
        ("created_at", "str"),
        ("updated_at", "str"),
    ],
    "users": [
        ("id", "str"),
        ("email", "str"),
        ("display_name", "opt"),
        ("password_hash", "str"),
        ("created_at", "str"),
    ],
    "audit_log": [
        ("id", "str"),
        ("timestamp", "str"),
        ("event_type", "str"),
        ("severity", "str"),
        ("user_id", "opt"),
        ("entity_type", "opt"),
        ("entity_id", "opt"),
        ("description", "str"),
        ("details", "json"),
        ("error_message", "opt"),
    ],
}


def columns_for(collection: str) -> list[tuple[str, str]]:
    try:
        return COLLECTION_COLUMNS[collection]
    except KeyError:
        raise StorageError(f"Unknown collection: {collection}")


def _encode_cell(value: Any, kind: str) -> Any:
    if value is None:
        return ""
    if kind == "json":
        return json.dumps(value)
    if kind == "bool":
        return "TRUE" if value else "FALSE"
    if kind in ("int", "float"):
        return value
    return str(value)


def _decode_cell(raw: Any, kind: str) -> Any:
    if raw == "" or raw is None:
        if kind == "bool":
            return False
        if kind == "str":
            return ""
        return None
    if kind == "json":
        return json.loads(raw)
    if kind == "bool":
        return str(raw).strip().lower() == "true"
    if kind == "int":
        return int(float(raw))
    if kind == "float":
        return float(raw)
    return str(raw)


def document_to_row(collection: str, doc: Document) -> list:
    """Convert a document to a spreadsheet row."""
    return [_encode_cell(doc.get(field), kind) for field, kind in columns_for(collection)]


def row_to_document(collection: str, row: list) -> Document:
    """Convert a spreadsheet row to a document."""
    # Handle missing trailing columns gracefully
    def safe_get(index: int) -> Any:
        try:
            return row[index]
        except IndexError:
            return ""

    return {
        field: _decode_cell(safe_get(idx), kind)
        for idx, (field, kind) in enumerate(columns_for(collection))
    }


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_collection_sheet(self, collection: str) -> gspread.Worksheet:
        """Get or create the worksheet that holds a collection."""
        columns = columns_for(collection)
        title = self._settings.sheet_name_for(collection)
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row([field for field, _ in columns])
        return sheet


class GoogleSheetsDocumentStore(DocumentStore):
    """
    Google Sheets implementation of the document store.

    Every operation reads the whole worksheet and filters in Python;
    fine for one person's finances, not for bulk data.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _read_rows(self, collection: str) -> tuple[gspread.Worksheet, list[list]]:
        sheet = self._client.get_collection_sheet(collection)
        # Skip header
        return sheet, sheet.get_all_values()[1:]

    def _find_row(self, rows: list[list], doc_id: str) -> Optional[int]:
        """Return the 1-based sheet row number holding `doc_id`."""
        for idx, row in enumerate(rows, start=2):  # Row 1 is header
            if row and row[0] == doc_id:
                return idx
        return None

    async def add(self, collection: str, data: Document) -> str:
        try:
            sheet = self._client.get_collection_sheet(collection)
            doc_id = uuid4().hex
            row = document_to_row(collection, {**data, "id": doc_id})
            sheet.append_row(row, value_input_option="RAW")
            return doc_id
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to add {collection} document: {e}")

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            _, rows = self._read_rows(collection)
            for row in rows:
                if row and row[0] == doc_id:
                    return row_to_document(collection, row)
            return None
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to get {collection}/{doc_id}: {e}")

    async def update(self, collection: str, doc_id: str, fields: Document) -> Document:
        try:
            sheet, rows = self._read_rows(collection)
            row_number = self._find_row(rows, doc_id)
            if row_number is None:
                raise DocumentNotFoundError(f"{collection}/{doc_id} not found")

            current = row_to_document(collection, rows[row_number - 2])
            updated = {**current, **fields, "id": doc_id}
            sheet.update(
                range_name=f"A{row_number}",
                values=[document_to_row(collection, updated)],
                value_input_option="RAW",
            )
            return updated
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update {collection}/{doc_id}: {e}")

    async def delete(self, collection: str, doc_id: str) -> bool:
        try:
            sheet, rows = self._read_rows(collection)
            row_number = self._find_row(rows, doc_id)
            if row_number is None:
                return False
            sheet.delete_rows(row_number)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete {collection}/{doc_id}: {e}")

    async def query(
        self,
        collection: str,
        filters: Optional[list[FieldFilter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        start_after: Optional[PageCursor] = None,
    ) -> list[Document]:
        try:
            _, rows = self._read_rows(collection)
            docs = []
            for row in rows:
                if not row or not row[0]:  # Skip empty rows
                    continue
                try:
                    docs.append(row_to_document(collection, row))
                except (ValueError, TypeError):
                    continue  # Skip malformed rows

            return run_query(
                docs,
                filters=filters,
                order_by=order_by,
                descending=descending,
                limit=limit,
                start_after=start_after,
            )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to query {collection}: {e}")
