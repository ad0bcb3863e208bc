from __future__ import annotations

from dataclasses import dataclass

"""Column resolution domain models.

ColumnSlot / ResolvedColumn / Action are derived once per run from the configured
column specs and the live header row of the source table. They never persist.
"""

__all__ = [
    "ColumnSlot",
    "ResolvedColumn",
    "Action",
]


@dataclass(frozen=True)
class ColumnSlot:
    """One matched header column plus its optional companion percentage column."""
    value_index: int  # header position of the value column
    percent_index: int | None = None  # header position of "<label> %" (None = なし)


@dataclass(frozen=True)
class ResolvedColumn:
    """Result of matching a single column spec against the header row.

    `slots` follows header left-to-right order. More than one slot only happens
    for wildcard specs matching several header columns (e.g. "Project Allocation 1",
    "Project Allocation 2", ...).
    """
    label: str  # spec label with wildcard marker stripped
    slots: tuple[ColumnSlot, ...]
    wildcard: bool = False

    @property
    def is_repeated(self) -> bool:
        return len(self.slots) > 1

    @property
    def ratio_label(self) -> str:
        return f"{self.label}%"


# One slot choice per column spec, in spec order.
Action = tuple[ColumnSlot, ...]
