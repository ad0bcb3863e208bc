from __future__ import annotations

import itertools
from collections.abc import Sequence

from ..models.columns import Action, ResolvedColumn

"""Action expander: Cartesian product of the resolved slots."""

__all__ = [
    "expand_actions",
]


def expand_actions(resolved: Sequence[ResolvedColumn]) -> list[Action]:
    """Return every way to pick one slot per resolved column, in spec order.

    Any column without slots makes the product empty (nothing to emit).
    """
    if not resolved:
        return []
    return [tuple(choice) for choice in itertools.product(*(r.slots for r in resolved))]
