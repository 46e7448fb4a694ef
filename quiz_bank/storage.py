"""Row-oriented table storage: protocol, in-memory and SQLite backends."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Protocol, Sequence

from .errors import StoreError, TableNotFoundError

if TYPE_CHECKING:
    from .config import AppConfig

Row = List[str]


class TableStore(Protocol):
    """Minimal spreadsheet-like contract. Row index 0 is the first row under the header."""

    def read_all(self, table_name: str) -> List[Row]:
        ...

    def append_row(self, table_name: str, row: Sequence[object]) -> None:
        ...

    def write_row(self, table_name: str, row_index: int, row: Sequence[object]) -> None:
        ...

    def write_cell(self, table_name: str, row_index: int, col_index: int, value: object) -> None:
        ...

    def create_table(self, table_name: str, header_row: Sequence[str]) -> None:
        ...

    def has_table(self, table_name: str) -> bool:
        ...

    def clear(self, table_name: str) -> None:
        ...


def _cells(row: Sequence[object]) -> Row:
    return ["" if value is None else str(value) for value in row]


class InMemoryTableStore:
    """Dict-of-lists store used for tests and dry runs."""

    def __init__(self):
        self.headers: Dict[str, Row] = {}
        self.tables: Dict[str, List[Row]] = {}

    def _rows(self, table_name: str) -> List[Row]:
        if table_name not in self.tables:
            raise TableNotFoundError(table_name)
        return self.tables[table_name]

    def read_all(self, table_name: str) -> List[Row]:
        return [list(row) for row in self._rows(table_name)]

    def append_row(self, table_name: str, row: Sequence[object]) -> None:
        self._rows(table_name).append(_cells(row))

    def write_row(self, table_name: str, row_index: int, row: Sequence[object]) -> None:
        rows = self._rows(table_name)
        if row_index < 0:
            raise StoreError(f"Invalid row index {row_index} for {table_name}")
        while len(rows) <= row_index:
            rows.append([])
        rows[row_index] = _cells(row)

    def write_cell(self, table_name: str, row_index: int, col_index: int, value: object) -> None:
        rows = self._rows(table_name)
        if row_index < 0 or col_index < 0:
            raise StoreError(f"Invalid cell {row_index},{col_index} for {table_name}")
        while len(rows) <= row_index:
            rows.append([])
        row = rows[row_index]
        while len(row) <= col_index:
            row.append("")
        row[col_index] = _cells([value])[0]

    def create_table(self, table_name: str, header_row: Sequence[str]) -> None:
        if table_name in self.tables:
            return
        self.headers[table_name] = _cells(header_row)
        self.tables[table_name] = []

    def has_table(self, table_name: str) -> bool:
        return table_name in self.tables

    def clear(self, table_name: str) -> None:
        self._rows(table_name).clear()


class SQLiteTableStore:
    """Persists table rows in a local SQLite file."""

    def __init__(self, db_path: str):
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS table_headers (
                table_name TEXT PRIMARY KEY,
                header TEXT NOT NULL,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
            """
        )
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS table_rows (
                table_name TEXT NOT NULL,
                row_index INTEGER NOT NULL,
                cells TEXT NOT NULL,
                PRIMARY KEY (table_name, row_index)
            )
            """
        )
        self.conn.commit()

    def _require(self, table_name: str) -> None:
        if not self.has_table(table_name):
            raise TableNotFoundError(table_name)

    def has_table(self, table_name: str) -> bool:
        row = self.conn.execute(
            "SELECT 1 FROM table_headers WHERE table_name = ?", (table_name,)
        ).fetchone()
        return row is not None

    def header(self, table_name: str) -> Row:
        self._require(table_name)
        row = self.conn.execute(
            "SELECT header FROM table_headers WHERE table_name = ?", (table_name,)
        ).fetchone()
        return json.loads(row["header"])

    def read_all(self, table_name: str) -> List[Row]:
        self._require(table_name)
        rows = self.conn.execute(
            "SELECT row_index, cells FROM table_rows WHERE table_name = ? ORDER BY row_index",
            (table_name,),
        ).fetchall()
        out: List[Row] = []
        for row in rows:
            # Fill gaps left by sparse writes so indexes stay positional.
            while len(out) < row["row_index"]:
                out.append([])
            out.append(json.loads(row["cells"]))
        return out

    def _row_count(self, table_name: str) -> int:
        row = self.conn.execute(
            "SELECT COALESCE(MAX(row_index) + 1, 0) AS n FROM table_rows WHERE table_name = ?",
            (table_name,),
        ).fetchone()
        return int(row["n"]) if row else 0

    def append_row(self, table_name: str, row: Sequence[object]) -> None:
        self._require(table_name)
        self.write_row(table_name, self._row_count(table_name), row)

    def write_row(self, table_name: str, row_index: int, row: Sequence[object]) -> None:
        self._require(table_name)
        if row_index < 0:
            raise StoreError(f"Invalid row index {row_index} for {table_name}")
        self.conn.execute(
            """
            INSERT INTO table_rows (table_name, row_index, cells) VALUES (?, ?, ?)
            ON CONFLICT(table_name, row_index) DO UPDATE SET cells=excluded.cells
            """,
            (table_name, row_index, json.dumps(_cells(row), ensure_ascii=False)),
        )
        self.conn.commit()

    def write_cell(self, table_name: str, row_index: int, col_index: int, value: object) -> None:
        self._require(table_name)
        if row_index < 0 or col_index < 0:
            raise StoreError(f"Invalid cell {row_index},{col_index} for {table_name}")
        found = self.conn.execute(
            "SELECT cells FROM table_rows WHERE table_name = ? AND row_index = ?",
            (table_name, row_index),
        ).fetchone()
        cells = json.loads(found["cells"]) if found else []
        cells.extend([""] * (col_index + 1 - len(cells)))
        cells[col_index] = value
        self.write_row(table_name, row_index, cells)

    def create_table(self, table_name: str, header_row: Sequence[str]) -> None:
        self.conn.execute(
            "INSERT OR IGNORE INTO table_headers (table_name, header) VALUES (?, ?)",
            (table_name, json.dumps(_cells(header_row), ensure_ascii=False)),
        )
        self.conn.commit()

    def clear(self, table_name: str) -> None:
        self._require(table_name)
        self.conn.execute("DELETE FROM table_rows WHERE table_name = ?", (table_name,))
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()


def build_store(config: "AppConfig", spreadsheet: Optional[object] = None) -> TableStore:
    """Instantiate the backend named by ``config.storage.backend``."""
    backend = config.storage.backend.lower()
    if backend == "memory":
        return InMemoryTableStore()
    if backend == "sqlite":
        return SQLiteTableStore(config.paths.sqlite_path)
    if backend == "sheets":
        from .sheets import GoogleSheetsTableStore

        return GoogleSheetsTableStore(
            spreadsheet_id=config.sheets.spreadsheet_id,
            service_account_path=config.sheets.service_account_path,
            spreadsheet=spreadsheet,
        )
    raise ValueError(f"Unknown storage backend: {config.storage.backend}")
