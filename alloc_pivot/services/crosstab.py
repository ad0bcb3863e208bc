from __future__ import annotations

import dataclasses
import logging
import re
from collections.abc import Sequence
from typing import Protocol

from ..models.crosstab import CrossTabConfig

"""Cross-tab driver.

Creates the aggregation view for a freshly written `<view>-raw` table, or, when
the view already exists, patches only its source row count and writes the
configuration back.

Layout (output header of the normalized table):
- value column: column 0, or column 1 when a Theme column leads
- column grouping: the last column
- row groupings: every other column, in header order
"""

__all__ = [
    "CrossTabService",
    "QuotaExceededError",
    "CrossTabLayoutError",
    "is_quota_failure",
    "layout_problem",
    "build_crosstab_config",
    "upsert_crosstab",
]

logger = logging.getLogger(__name__)

_QUOTA_MARKERS = (
    "quota",
    "rate limit",
    "ratelimit",
    "too many requests",
    "limit exceeded",
    "internal error",
)
_HTTP_429 = re.compile(r"\b429\b")


class QuotaExceededError(Exception):
    """The cross-tab backend reported a quota / transient internal failure."""


class CrossTabLayoutError(Exception):
    """The normalized table cannot be summarized as a cross-tab."""


class CrossTabService(Protocol):
    def get_config(self, view_name: str) -> CrossTabConfig | None: ...

    def create(self, view_name: str, config: CrossTabConfig) -> None: ...

    def update(self, view_name: str, config: CrossTabConfig) -> None: ...


def is_quota_failure(exc: BaseException) -> bool:
    status = getattr(exc, "status_code", None) or getattr(exc, "status", None)
    if status == 429:
        return True
    text = str(exc).lower()
    return any(marker in text for marker in _QUOTA_MARKERS) or bool(_HTTP_429.search(text))


def layout_problem(header: Sequence[str], *, has_theme: bool) -> str | None:
    """Why `header` cannot feed a cross-tab view, or None when it can."""
    value_index = 1 if has_theme else 0
    if len(header) < value_index + 3:
        return f"cross-tab needs at least {value_index + 3} columns, got {list(header)}"
    value_column = header[value_index]
    if not value_column.endswith("%"):
        return (
            f"cross-tab value column '{value_column}' is not an allocation ratio column "
            "(the wildcard spec must come first and match more than one column)"
        )
    return None


def build_crosstab_config(
    source_table: str,
    header: Sequence[str],
    row_count: int,
    *,
    has_theme: bool,
) -> CrossTabConfig:
    problem = layout_problem(header, has_theme=has_theme)
    if problem is not None:
        raise CrossTabLayoutError(problem)
    value_index = 1 if has_theme else 0
    value_column = header[value_index]
    last = len(header) - 1
    row_groups = [h for i, h in enumerate(header) if i not in (value_index, last)]
    return CrossTabConfig(
        source_table=source_table,
        row_count=row_count,
        column_count=len(header),
        row_groups=row_groups,
        column_group=header[last],
        value_column=value_column,
    )


def upsert_crosstab(
    service: CrossTabService,
    view_name: str,
    source_table: str,
    header: Sequence[str],
    row_count: int,
    *,
    has_theme: bool,
) -> str:
    """Create or refresh the cross-tab view. Returns "created" or "updated".

    Raises:
        QuotaExceededError: configuration retrieval hit a backend limit
        CrossTabLayoutError: header has no usable value/grouping columns
    """
    try:
        existing = service.get_config(view_name)
    except Exception as e:
        if is_quota_failure(e):
            raise QuotaExceededError(
                f"cross-tab '{view_name}': backend limit reached while reading configuration: {e}"
            ) from e
        raise

    if existing is not None:
        patched = dataclasses.replace(existing, row_count=row_count)
        service.update(view_name, patched)
        logger.info(f"cross-tab '{view_name}' updated (rows={row_count})")
        return "updated"

    config = build_crosstab_config(source_table, header, row_count, has_theme=has_theme)
    service.create(view_name, config)
    logger.info(
        f"cross-tab '{view_name}' created rows={config.row_groups} "
        f"column={config.column_group} value={config.value_column}"
    )
    return "created"
