from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the allocation pivot tool.

These are the typed forms of config/pivot.yml after schema validation in
alloc_pivot.config.loader.
"""

# Cross-tab view is only built for 3+ column specs (row groups + column group + value)
MIN_SPECS_FOR_CROSSTAB = 3


@dataclass(frozen=True)
class PivotJobConfig:
    """One normalization + cross-tab job.

    `name` is the output view name; the normalized rows go to `<name>-raw`.
    """
    name: str  # outputViewName
    source_table: str  # sourceTableName
    column_specs: list[str]  # "Project Allocation*" 形式のワイルドカード可
    theme_table: str | None = None  # themeTableName (任意)

    @property
    def raw_table(self) -> str:
        return f"{self.name}-raw"

    @property
    def builds_crosstab(self) -> bool:
        return len(self.column_specs) >= MIN_SPECS_FOR_CROSSTAB


@dataclass(frozen=True)
class RunConfig:
    """Root configuration object for a run."""
    workbook: str  # Path to the .xlsx workbook holding all tables
    pivots: list[PivotJobConfig]
    source_header_row: int = 0  # 0-based header row in source tables
    theme_skip_rows: int = 2  # Theme tables: leading header rows to skip
