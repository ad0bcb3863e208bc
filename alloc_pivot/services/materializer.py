from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..models.columns import Action, ResolvedColumn
from ..models.theme import ThemeRow, lookup_theme
from .allocation import compute_allocations
from .strings import is_blank

"""Row materializer.

Combines source rows, actions and allocations (plus an optional theme table)
into the normalized output rows. No I/O happens here; the caller performs the
single bulk write once every row has been materialized, so an allocation error
leaves the output table untouched.
"""

__all__ = [
    "THEME_HEADER",
    "MaterializeResult",
    "build_output_header",
    "row_identifier",
    "materialize",
]

THEME_HEADER = "Theme"


@dataclass
class MaterializeResult:
    header: list[str]
    rows: list[list[Any]] = field(default_factory=list)
    candidate_rows: int = 0  # source rows x actions
    dropped_rows: int = 0  # candidates with a blank cell


def build_output_header(resolved: Sequence[ResolvedColumn], with_theme: bool) -> list[str]:
    header: list[str] = [THEME_HEADER] if with_theme else []
    for column in resolved:
        if column.is_repeated:
            header.append(column.ratio_label)
        header.append(column.label)
    return header


def row_identifier(row: Sequence[Any], resolved: Sequence[ResolvedColumn]) -> Any:
    """First non-blank single-slot value of the row (e.g. the person's name)."""
    for column in resolved:
        if len(column.slots) != 1:
            continue
        index = column.slots[0].value_index
        value = row[index] if index < len(row) else None
        if not is_blank(value):
            return value
    return None


def materialize(
    source_rows: Sequence[Sequence[Any]],
    resolved: Sequence[ResolvedColumn],
    actions: Sequence[Action],
    theme_table: Sequence[ThemeRow] | None = None,
    *,
    row_numbers: Sequence[int] | None = None,
    on_progress: Callable[[], None] | None = None,
) -> MaterializeResult:
    """Build output rows in (source row, action) order, dropping incomplete ones.

    `row_numbers` are the sheet row numbers of `source_rows`, used in error
    messages; without them rows are numbered from 1.

    Raises:
        AllocationError: propagated from compute_allocations; no rows are returned
    """
    with_theme = theme_table is not None
    result = MaterializeResult(header=build_output_header(resolved, with_theme))

    numbers = row_numbers if row_numbers is not None else range(1, len(source_rows) + 1)
    for row_number, row in zip(numbers, source_rows, strict=True):
        allocations = compute_allocations(
            row,
            resolved,
            actions,
            row_number=row_number,
            row_label=row_identifier(row, resolved),
        )
        for action, ratios in zip(actions, allocations, strict=True):
            candidate: list[Any] = []
            if with_theme:
                first = action[0].value_index
                candidate.append(lookup_theme(theme_table, row[first] if first < len(row) else None))
            for position, slot in enumerate(action):
                if position in ratios:
                    candidate.append(ratios[position])
                candidate.append(row[slot.value_index] if slot.value_index < len(row) else None)
            result.candidate_rows += 1
            if any(is_blank(cell) for cell in candidate):
                result.dropped_rows += 1
                continue
            result.rows.append(candidate)
        if on_progress is not None:
            on_progress()
    return result
