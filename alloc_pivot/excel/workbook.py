from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.theme import ThemeRow
from .reader import TableData, normalize_table, normalize_theme_table, read_excel_file

"""Workbook-backed table store.

Every table is a sheet of a single .xlsx workbook. Writes replace the whole
sheet (last writer wins); other sheets are left untouched.
"""

__all__ = [
    "TableNotFoundError",
    "WorkbookStore",
]

logger = logging.getLogger(__name__)


class TableNotFoundError(Exception):
    """Raised when a named sheet does not exist in the workbook."""


class WorkbookStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def sheet_names(self) -> list[str]:
        with pd.ExcelFile(self.path, engine="openpyxl") as xls:
            return [str(n) for n in xls.sheet_names]

    def has_table(self, name: str) -> bool:
        return name in self.sheet_names()

    def _read_raw(self, name: str) -> pd.DataFrame:
        raw = read_excel_file(self.path, target_sheets={name})
        if name not in raw:
            raise TableNotFoundError(f"sheet '{name}' not found in {self.path.name}")
        return raw[name]

    def read_table(self, name: str, header_row: int = 0) -> TableData:
        table = normalize_table(self._read_raw(name), name, header_row=header_row)
        logger.debug(f"read '{name}': {len(table.header)} columns, {len(table.rows)} rows")
        return table

    def read_themes(self, name: str, skip_rows: int = 2) -> list[ThemeRow]:
        themes = normalize_theme_table(self._read_raw(name), skip_rows=skip_rows)
        logger.debug(f"read theme table '{name}': {len(themes)} entries")
        return themes

    def write_table(self, name: str, header: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
        """Replace sheet `name` with header + rows in one bulk write."""
        df = pd.DataFrame([list(r) for r in rows], columns=list(header))
        self.write_frame(name, df)
        logger.debug(f"wrote '{name}': {len(rows)} rows")

    def write_frame(self, name: str, df: pd.DataFrame, *, hidden: bool = False) -> None:
        with pd.ExcelWriter(
            self.path, engine="openpyxl", mode="a", if_sheet_exists="replace"
        ) as writer:
            df.to_excel(writer, sheet_name=name, index=False)
            if hidden:
                writer.book[name].sheet_state = "hidden"
