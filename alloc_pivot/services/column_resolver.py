from __future__ import annotations

from collections.abc import Sequence

from ..models.columns import ColumnSlot, ResolvedColumn
from .strings import has_prefix, has_suffix

"""Column resolver.

Maps the configured column specs onto the header row of the source table.

- "Project Allocation*" (wildcard) matches every header label starting with
  "Project Allocation", e.g. "Project Allocation 1", "Project Allocation 2".
- A spec without the wildcard marker matches one header label exactly.
- "<label> %" columns are never candidates themselves; they are attached to
  "<label>" as its percentage column.
"""

__all__ = [
    "WILDCARD",
    "PERCENT_SUFFIX",
    "parse_spec",
    "resolve_columns",
]

WILDCARD = "*"
PERCENT_SUFFIX = " %"


def parse_spec(spec: str) -> tuple[str, bool]:
    """Split a column spec into (label, is_wildcard)."""
    text = spec.strip()
    wildcard = has_suffix(text, WILDCARD)
    if wildcard:
        text = text[: -len(WILDCARD)]
    return text.strip(), wildcard


def resolve_columns(specs: Sequence[str], header: Sequence[str]) -> list[ResolvedColumn]:
    """Resolve each spec to its header slots.

    Zero matches gives an empty slots tuple; no error is raised here.
    """
    labels = [str(h) for h in header]
    resolved: list[ResolvedColumn] = []
    for spec in specs:
        label, wildcard = parse_spec(spec)
        slots: list[ColumnSlot] = []
        for index, candidate in enumerate(labels):
            if has_suffix(candidate, PERCENT_SUFFIX):
                continue
            matched = has_prefix(candidate, label) if wildcard else candidate == label
            if not matched:
                continue
            percent_label = candidate + PERCENT_SUFFIX
            percent_index = labels.index(percent_label) if percent_label in labels else None
            slots.append(ColumnSlot(value_index=index, percent_index=percent_index))
        resolved.append(ResolvedColumn(label=label, slots=tuple(slots), wildcard=wildcard))
    return resolved
