"""Domain models for the allocation pivot tool.

This package contains the dataclasses shared by the normalization services,
the workbook backend and the CLI.
"""

from .columns import Action, ColumnSlot, ResolvedColumn
from .config_models import PivotJobConfig, RunConfig
from .crosstab import CrossTabConfig
from .run_result import JobResult, RunResult
from .theme import ThemeRow, lookup_theme

__all__ = [
    # Configuration models
    "PivotJobConfig",
    "RunConfig",
    # Column resolution
    "Action",
    "ColumnSlot",
    "ResolvedColumn",
    # Lookup / views
    "CrossTabConfig",
    "ThemeRow",
    "lookup_theme",
    # Results
    "JobResult",
    "RunResult",
]
