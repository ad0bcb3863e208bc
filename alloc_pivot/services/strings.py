from __future__ import annotations

import math
from typing import Any

"""Small cell/label helpers shared by the normalization services."""

__all__ = [
    "has_prefix",
    "has_suffix",
    "is_blank",
]


def has_prefix(text: str, prefix: str) -> bool:
    return str(text).startswith(prefix)


def has_suffix(text: str, suffix: str) -> bool:
    return str(text).endswith(suffix)


def is_blank(value: Any) -> bool:
    """True for None, NaN and empty / whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False
