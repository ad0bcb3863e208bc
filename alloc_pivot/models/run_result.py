from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Run result models.

JobResult captures what a single pivot job produced; RunResult aggregates all
jobs of one invocation and feeds the SUMMARY line.
"""


@dataclass(frozen=True)
class JobResult:
    """Per-job processing statistics."""
    name: str  # output view name
    status: str  # success/failed
    source_rows: int = 0  # data rows read from the source table
    actions: int = 0  # slot combinations per source row
    output_rows: int = 0  # rows written to <name>-raw
    dropped_rows: int = 0  # candidates discarded for blank cells
    crosstab: str = "skipped"  # created/updated/skipped
    elapsed_seconds: float = 0.0
    error: str | None = None  # failure reason summary


@dataclass(frozen=True)
class RunResult:
    """Aggregated results of one invocation."""
    success_jobs: int
    failed_jobs: int
    total_output_rows: int
    total_dropped_rows: int
    crosstabs: int  # created + updated views
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    job_results: list[JobResult] | None = None
