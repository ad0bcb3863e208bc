from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..models.columns import Action, ColumnSlot, ResolvedColumn
from .strings import is_blank

"""Allocation calculator.

For one source row, computes the fractional allocation (0.0 - 1.0) of every
slot of every repeated column group:

1. Slots whose "<label> %" cell holds a value are *assigned*; their sum must
   not exceed 1.0.
2. Slots whose value cell is non-blank are *in play*.
3. An assigned slot keeps its explicit value. The remainder (1 - assigned sum)
   is split evenly over the in-play slots that are not assigned. Without any
   assignment every in-play slot gets 1 / in-play count.

Computed ratios are rounded to RATIO_PRECISION decimals (display only);
explicit percentages are echoed as entered.
"""

__all__ = [
    "AllocationError",
    "OverAllocationError",
    "InvalidPercentageError",
    "RATIO_PRECISION",
    "parse_percentage",
    "slot_ratios",
    "compute_allocations",
]

RATIO_PRECISION = 2
_SUM_TOLERANCE = 1e-9


class AllocationError(Exception):
    """Base class for per-row allocation failures."""

    def __init__(self, message: str, row_number: int | None = None, row_label: Any = None) -> None:
        super().__init__(message)
        self.row_number = row_number
        self.row_label = row_label


class OverAllocationError(AllocationError):
    """Explicit percentages of one slot group add up to more than 1.0."""


class InvalidPercentageError(AllocationError):
    """A percentage cell holds something that is not a non-negative number."""


def _describe_row(row_number: int | None, row_label: Any) -> str:
    parts = []
    if row_label is not None:
        parts.append(f"'{row_label}'")
    if row_number is not None:
        parts.append(f"row {row_number}")
    return " ".join(parts) if parts else "row"


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if index < len(row) else None


def parse_percentage(value: Any) -> float:
    """Convert a percentage cell to a fraction.

    0.8 -> 0.8, "0.8" -> 0.8, "80%" -> 0.8. Raises ValueError on anything else.
    """
    if isinstance(value, bool):
        raise ValueError(f"not a percentage: {value!r}")
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        text = str(value).strip()
        if text.endswith("%"):
            result = float(text[:-1].strip()) / 100.0
        else:
            result = float(text)
    if result < 0:
        raise ValueError(f"negative percentage: {value!r}")
    return result


def slot_ratios(
    row: Sequence[Any],
    column: ResolvedColumn,
    *,
    row_number: int | None = None,
    row_label: Any = None,
) -> dict[ColumnSlot, float]:
    """Ratio of each slot of one repeated column group for one row."""
    assigned: dict[ColumnSlot, float] = {}
    assigned_sum = 0.0
    for slot in column.slots:
        if slot.percent_index is None:
            continue
        raw = _cell(row, slot.percent_index)
        if is_blank(raw):
            continue
        try:
            value = parse_percentage(raw)
        except ValueError as e:
            raise InvalidPercentageError(
                f"invalid percentage for {_describe_row(row_number, row_label)} "
                f"in '{column.label}': {e}",
                row_number=row_number,
                row_label=row_label,
            ) from e
        assigned[slot] = value
        assigned_sum += value
        if assigned_sum > 1.0 + _SUM_TOLERANCE:
            raise OverAllocationError(
                f"over-allocation for {_describe_row(row_number, row_label)}: "
                f"'{column.label}' percentages sum to {assigned_sum:.2f}",
                row_number=row_number,
                row_label=row_label,
            )

    in_play = [s for s in column.slots if not is_blank(_cell(row, s.value_index))]
    total_count = len(in_play)
    unassigned_count = sum(1 for s in in_play if s not in assigned)

    ratios: dict[ColumnSlot, float] = {}
    for slot in column.slots:
        if slot in assigned:
            ratios[slot] = assigned[slot]
        elif assigned:
            # 全スロットが明示割当済みの場合は残りを配る先がない -> 0
            share = (1.0 - assigned_sum) / unassigned_count if unassigned_count else 0.0
            ratios[slot] = round(share, RATIO_PRECISION)
        else:
            share = 1.0 / total_count if total_count else 0.0
            ratios[slot] = round(share, RATIO_PRECISION)
    return ratios


def compute_allocations(
    row: Sequence[Any],
    resolved: Sequence[ResolvedColumn],
    actions: Sequence[Action],
    *,
    row_number: int | None = None,
    row_label: Any = None,
) -> list[dict[int, float]]:
    """Per action, map each repeated column position to the ratio of its slot.

    Raises:
        OverAllocationError: explicit percentages of a group exceed 1.0
        InvalidPercentageError: a percentage cell cannot be parsed
    """
    per_position: dict[int, dict[ColumnSlot, float]] = {}
    for position, column in enumerate(resolved):
        if column.is_repeated:
            per_position[position] = slot_ratios(
                row, column, row_number=row_number, row_label=row_label
            )
    return [
        {position: ratios[action[position]] for position, ratios in per_position.items()}
        for action in actions
    ]
