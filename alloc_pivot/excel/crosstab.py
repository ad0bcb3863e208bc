from __future__ import annotations

import logging

import pandas as pd

from ..models.crosstab import CrossTabConfig
from .workbook import WorkbookStore

"""Workbook implementation of the cross-tab service.

View configurations are kept as JSON in a hidden `_crosstabs` sheet
(columns: view, config). Creating or updating a view re-renders the view sheet
from the first `row_count` rows of its source range: row groups x column group,
summed value, plus a Grand Total column and row.
"""

__all__ = [
    "CONFIG_SHEET",
    "GRAND_TOTAL",
    "build_crosstab_frame",
    "WorkbookCrossTabService",
]

logger = logging.getLogger(__name__)

CONFIG_SHEET = "_crosstabs"
GRAND_TOTAL = "Grand Total"
_CONFIG_HEADER = ["view", "config"]


def build_crosstab_frame(df: pd.DataFrame, config: CrossTabConfig) -> pd.DataFrame:
    """Aggregate `df` into a flat cross-tab frame (row groups as leading columns)."""
    keys = [*config.row_groups, config.column_group]
    if df.empty:
        return pd.DataFrame(columns=[*config.row_groups, GRAND_TOTAL])

    frame = df[[*keys, config.value_column]].copy()
    frame[keys] = frame[keys].astype(str)
    frame[config.value_column] = pd.to_numeric(frame[config.value_column], errors="coerce").fillna(0.0)

    grouped = frame.groupby(keys, sort=True)[config.value_column].sum()
    table = grouped.unstack(config.column_group, fill_value=0.0)
    table.columns = [str(c) for c in table.columns]
    table[GRAND_TOTAL] = table.sum(axis=1)
    table = table.reset_index()

    totals: dict[str, object] = {c: "" for c in config.row_groups}
    totals[config.row_groups[0]] = GRAND_TOTAL
    for column in table.columns[len(config.row_groups):]:
        totals[column] = table[column].sum()
    table = pd.concat([table, pd.DataFrame([totals])], ignore_index=True)

    value_columns = table.columns[len(config.row_groups):]
    table[value_columns] = table[value_columns].astype(float).round(4)
    return table


class WorkbookCrossTabService:
    def __init__(self, store: WorkbookStore) -> None:
        self.store = store

    def _load_configs(self) -> dict[str, CrossTabConfig]:
        if not self.store.has_table(CONFIG_SHEET):
            return {}
        table = self.store.read_table(CONFIG_SHEET)
        configs: dict[str, CrossTabConfig] = {}
        for row in table.rows:
            if len(row) < 2 or row[0] is None or row[1] is None:
                continue
            configs[str(row[0])] = CrossTabConfig.from_json(str(row[1]))
        return configs

    def _save_config(self, view_name: str, config: CrossTabConfig) -> None:
        configs = self._load_configs()
        configs[view_name] = config
        df = pd.DataFrame(
            [[name, cfg.to_json()] for name, cfg in configs.items()], columns=_CONFIG_HEADER
        )
        self.store.write_frame(CONFIG_SHEET, df, hidden=True)

    def render(self, view_name: str, config: CrossTabConfig) -> pd.DataFrame:
        source = self.store.read_table(config.source_table)
        data_rows = source.rows[: max(config.row_count - 1, 0)]
        df = pd.DataFrame(data_rows, columns=source.header)
        frame = build_crosstab_frame(df, config)
        self.store.write_frame(view_name, frame)
        logger.debug(f"rendered cross-tab '{view_name}' ({len(frame)} rows)")
        return frame

    def get_config(self, view_name: str) -> CrossTabConfig | None:
        return self._load_configs().get(view_name)

    def create(self, view_name: str, config: CrossTabConfig) -> None:
        self._save_config(view_name, config)
        self.render(view_name, config)

    def update(self, view_name: str, config: CrossTabConfig) -> None:
        self._save_config(view_name, config)
        self.render(view_name, config)
