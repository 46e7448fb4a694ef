"""Google Sheets table store using gspread."""

from __future__ import annotations

from typing import List, Optional, Sequence

import gspread
from google.oauth2 import service_account
from gspread.utils import rowcol_to_a1

from .errors import StoreError, TableNotFoundError
from .logging_utils import get_logger

logger = get_logger(__name__)

Row = List[str]


class GoogleSheetsTableStore:
    """Each table is a worksheet; header in sheet row 1, data row ``i`` in sheet row ``i + 2``."""

    SCOPES = [
        "https://www.googleapis.com/auth/spreadsheets",
        "https://www.googleapis.com/auth/drive",
    ]

    def __init__(
        self,
        spreadsheet_id: Optional[str] = None,
        service_account_path: Optional[str] = None,
        spreadsheet: Optional["gspread.Spreadsheet"] = None,
    ):
        self.spreadsheet_id = spreadsheet_id
        self.service_account_path = service_account_path
        self.spreadsheet = spreadsheet

    def connect(self) -> "gspread.Spreadsheet":
        if self.spreadsheet is not None:
            return self.spreadsheet
        if not self.spreadsheet_id or not self.service_account_path:
            raise StoreError(
                "Google Sheets backend needs sheets.spreadsheet_id and sheets.service_account_path"
            )
        try:
            creds = service_account.Credentials.from_service_account_file(
                self.service_account_path, scopes=self.SCOPES
            )
            client = gspread.authorize(creds)
            self.spreadsheet = client.open_by_key(self.spreadsheet_id)
        except Exception as exc:
            raise StoreError(f"Failed to connect to Google Sheets: {exc}") from exc
        return self.spreadsheet

    def _worksheet(self, table_name: str) -> "gspread.Worksheet":
        try:
            return self.connect().worksheet(table_name)
        except gspread.exceptions.WorksheetNotFound as exc:
            raise TableNotFoundError(table_name) from exc

    def has_table(self, table_name: str) -> bool:
        try:
            self._worksheet(table_name)
        except TableNotFoundError:
            return False
        return True

    def read_all(self, table_name: str) -> List[Row]:
        values = self._worksheet(table_name).get_all_values()
        return [list(row) for row in values[1:]]

    def append_row(self, table_name: str, row: Sequence[object]) -> None:
        sheet = self._worksheet(table_name)
        next_index = len(sheet.get_all_values()) - 1
        self.write_row(table_name, max(next_index, 0), row)

    def write_row(self, table_name: str, row_index: int, row: Sequence[object]) -> None:
        if row_index < 0:
            raise StoreError(f"Invalid row index {row_index} for {table_name}")
        cells = ["" if value is None else str(value) for value in row]
        sheet = self._worksheet(table_name)
        start = rowcol_to_a1(row_index + 2, 1)
        sheet.update(range_name=start, values=[cells], value_input_option="USER_ENTERED")

    def write_cell(self, table_name: str, row_index: int, col_index: int, value: object) -> None:
        """Update one cell; neighbouring formulas are left untouched."""
        if row_index < 0 or col_index < 0:
            raise StoreError(f"Invalid cell {row_index},{col_index} for {table_name}")
        sheet = self._worksheet(table_name)
        sheet.update_cell(row_index + 2, col_index + 1, "" if value is None else str(value))

    def create_table(self, table_name: str, header_row: Sequence[str]) -> None:
        if self.has_table(table_name):
            return
        sheet = self.connect().add_worksheet(title=table_name, rows=1000, cols=max(len(header_row), 1))
        sheet.update(range_name="A1", values=[list(header_row)])
        logger.info("Created sheet '%s'", table_name)

    def clear(self, table_name: str) -> None:
        sheet = self._worksheet(table_name)
        if sheet.row_count > 1:
            sheet.batch_clear([f"A2:{rowcol_to_a1(sheet.row_count, sheet.col_count)}"])
