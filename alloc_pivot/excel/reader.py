from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.theme import ThemeRow

"""Excel reader.

Sheets are read without a header (header=None) and normalized afterwards, so the
header row position stays configurable per table:
- source tables: header at `header_row` (default: first row), data below it
- theme tables: first `skip_rows` rows skipped, columns 0/1 = project/theme

pandas' default NA strings ("NA", "None", "null", ...) are NOT converted, since
they are legitimate project or role names; only empty cells become NaN.
"""


class SheetHeaderError(Exception):
    """Raised when the header row is missing."""


@dataclass
class TableData:
    name: str
    header: list[str]
    rows: list[list[Any]]  # header と同じ並び。空セルは None
    row_numbers: list[int] = field(default_factory=list)  # 1 始まりのシート行番号


def read_excel_file(
    path: Path, target_sheets: Iterable[str] | None = None
) -> dict[str, pd.DataFrame]:
    """Read an Excel file returning raw DataFrames keyed by sheet name.

    Parameters
    ----------
    path: Excel ファイルパス
    target_sheets: 対象シート制限 (None なら全シート)
    """
    wanted = set(target_sheets) if target_sheets is not None else None
    dfs: dict[str, pd.DataFrame] = {}
    with pd.ExcelFile(path, engine="openpyxl") as xls:
        for name in xls.sheet_names:
            if wanted is not None and str(name) not in wanted:
                continue
            df = xls.parse(name, header=None, keep_default_na=False, na_values=[""])
            dfs[str(name)] = df
    return dfs


def _clean(value: Any) -> Any:
    if pd.isna(value):
        return None
    return value


def normalize_table(df: pd.DataFrame, name: str, header_row: int = 0) -> TableData:
    """Split a raw DataFrame into header labels and data rows.

    Steps:
    1. Validate the header row exists
    2. Header labels are stripped strings (blank header cell -> "")
    3. Rows below the header become data rows; fully blank rows are skipped
    4. Each data row keeps its 1-based sheet row number for error reporting
    """
    if df.shape[0] <= header_row:
        raise SheetHeaderError(f"sheet '{name}' lacks header row {header_row + 1}")
    header = ["" if pd.isna(c) else str(c).strip() for c in df.iloc[header_row].tolist()]
    rows: list[list[Any]] = []
    row_numbers: list[int] = []
    for position in range(header_row + 1, df.shape[0]):
        raw = df.iloc[position]
        if raw.isna().all():
            continue
        rows.append([_clean(v) for v in raw.tolist()])
        row_numbers.append(position + 1)
    return TableData(name=name, header=header, rows=rows, row_numbers=row_numbers)


def normalize_theme_table(df: pd.DataFrame, skip_rows: int = 2) -> list[ThemeRow]:
    """Two-column (project name, theme name) lookup table.

    Rows without a project name are ignored; order is preserved so that the
    first matching row wins on lookup.
    """
    themes: list[ThemeRow] = []
    if df.shape[1] < 2:
        return themes
    for _, raw in df.iloc[skip_rows:].iterrows():
        project, theme = _clean(raw.iloc[0]), _clean(raw.iloc[1])
        if project is None or str(project).strip() == "":
            continue
        theme_name = None if theme is None or str(theme).strip() == "" else str(theme).strip()
        themes.append(ThemeRow(project_name=str(project).strip(), theme_name=theme_name))
    return themes
