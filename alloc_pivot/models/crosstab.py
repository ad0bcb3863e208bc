from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field

"""Cross-tab (pivot) view configuration model.

The configuration describes which sheet range feeds the view and how the
columns of that range are grouped. `row_count` is the only field patched when
an existing view is refreshed after a new materialization.
"""

__all__ = [
    "CrossTabConfig",
]


@dataclass(frozen=True)
class CrossTabConfig:
    """Aggregation view definition over a source range.

    Attributes:
        source_table: Sheet holding the normalized rows (``<view>-raw``)
        row_count: Rows in the source range, header row included
        column_count: Columns in the source range
        row_groups: Header labels used as row groupings (order preserved)
        column_group: Header label used as the column grouping
        value_column: Header label summed in each cell
    """
    source_table: str
    row_count: int
    column_count: int
    row_groups: list[str] = field(default_factory=list)
    column_group: str = ""
    value_column: str = ""

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)

    @staticmethod
    def from_json(text: str) -> CrossTabConfig:
        data = json.loads(text)
        return CrossTabConfig(
            source_table=data["source_table"],
            row_count=int(data["row_count"]),
            column_count=int(data["column_count"]),
            row_groups=list(data.get("row_groups", [])),
            column_group=data.get("column_group", ""),
            value_column=data.get("value_column", ""),
        )
