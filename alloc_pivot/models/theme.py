from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

"""Theme lookup table model (project name -> overarching theme)."""

__all__ = [
    "ThemeRow",
    "lookup_theme",
]


@dataclass(frozen=True)
class ThemeRow:
    project_name: str
    theme_name: str | None


def lookup_theme(themes: Sequence[ThemeRow], project_name: object) -> str | None:
    """Return the theme of the first row whose project name matches, else None."""
    if project_name is None:
        return None
    key = str(project_name).strip()
    for row in themes:
        if row.project_name == key:
            return row.theme_name
    return None
