from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import ConfigurationError, validate_job
from ..excel.crosstab import WorkbookCrossTabService
from ..excel.reader import SheetHeaderError
from ..excel.workbook import TableNotFoundError, WorkbookStore
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.columns import Action, ResolvedColumn
from ..models.config_models import PivotJobConfig, RunConfig
from ..models.run_result import JobResult, RunResult
from .action_expander import expand_actions
from .allocation import AllocationError, InvalidPercentageError, OverAllocationError
from .column_resolver import resolve_columns
from .crosstab import (
    CrossTabLayoutError,
    CrossTabService,
    QuotaExceededError,
    layout_problem,
    upsert_crosstab,
)
from .materializer import build_output_header, materialize
from .progress import ProgressTracker

"""Service orchestration.

run_job() drives one pivot job through the pipeline:

    read source (+ theme) table -> resolve columns -> expand actions
    -> materialize rows (allocations validated for every row)
    -> bulk write <name>-raw -> upsert cross-tab <name>

run_job() lets every error propagate. process_all() runs all configured jobs,
isolating failures per job: the error is logged, buffered as an ErrorRecord,
and the next job runs.
"""

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal run-level error (nothing could be processed)."""
    pass


@dataclass(frozen=True)
class JobPlan:
    """Column layout of a job against the live header (used by --inspect-data)."""
    job: PivotJobConfig
    resolved: list[ResolvedColumn]
    actions: list[Action]
    output_header: list[str]
    source_rows: int


_ERROR_TYPES: list[tuple[type[BaseException], str]] = [
    (OverAllocationError, "OVER_ALLOCATION"),
    (InvalidPercentageError, "INVALID_PERCENTAGE"),
    (QuotaExceededError, "QUOTA_EXCEEDED"),
    (ConfigurationError, "CONFIGURATION"),
    (TableNotFoundError, "TABLE_NOT_FOUND"),
    (SheetHeaderError, "MISSING_HEADER"),
    (CrossTabLayoutError, "CROSSTAB_LAYOUT"),
]


def classify_error(exc: BaseException) -> str:
    for exc_type, label in _ERROR_TYPES:
        if isinstance(exc, exc_type):
            return label
    return "UNEXPECTED_ERROR"


def plan_job(
    job: PivotJobConfig, store: WorkbookStore, *, source_header_row: int = 0
) -> JobPlan:
    validate_job(job)
    table = store.read_table(job.source_table, header_row=source_header_row)
    resolved = resolve_columns(job.column_specs, table.header)
    actions = expand_actions(resolved)
    return JobPlan(
        job=job,
        resolved=resolved,
        actions=actions,
        output_header=build_output_header(resolved, with_theme=job.theme_table is not None),
        source_rows=len(table.rows),
    )


def run_job(
    job: PivotJobConfig,
    store: WorkbookStore,
    crosstab_service: CrossTabService,
    *,
    source_header_row: int = 0,
    theme_skip_rows: int = 2,
    dry_run: bool = False,
) -> JobResult:
    """Normalize one source table and refresh its cross-tab view.

    Raises:
        ConfigurationError: job fields invalid (before any I/O)
        AllocationError: a row over-allocates or has an invalid percentage;
            nothing is written
        QuotaExceededError: cross-tab configuration could not be read due to a
            backend limit (the normalized table is already written)
    """
    validate_job(job)
    start = datetime.now(UTC)

    table = store.read_table(job.source_table, header_row=source_header_row)
    themes = (
        store.read_themes(job.theme_table, skip_rows=theme_skip_rows)
        if job.theme_table is not None
        else None
    )

    resolved = resolve_columns(job.column_specs, table.header)
    for column in resolved:
        if not column.slots:
            logger.warning(f"job '{job.name}': no header column matches '{column.label}'")
    actions = expand_actions(resolved)
    logger.debug(
        f"job '{job.name}': slots={[len(c.slots) for c in resolved]} actions={len(actions)}"
    )

    with ProgressTracker(len(table.rows), description=job.name) as progress:
        materialized = materialize(
            table.rows,
            resolved,
            actions,
            themes,
            row_numbers=table.row_numbers,
            on_progress=progress.advance,
        )

    has_theme = themes is not None
    problem = layout_problem(materialized.header, has_theme=has_theme)

    crosstab = "skipped"
    if dry_run:
        logger.info(f"job '{job.name}': dry-run, {len(materialized.rows)} rows not written")
    else:
        store.write_table(job.raw_table, materialized.header, materialized.rows)
        if job.builds_crosstab and problem is not None:
            logger.warning(f"job '{job.name}': cross-tab not built: {problem}")
        elif job.builds_crosstab:
            crosstab = upsert_crosstab(
                crosstab_service,
                job.name,
                job.raw_table,
                materialized.header,
                len(materialized.rows) + 1,
                has_theme=has_theme,
            )
        else:
            logger.info(f"job '{job.name}': fewer than 3 column specs, cross-tab not built")

    if materialized.dropped_rows:
        logger.info(f"job '{job.name}': dropped {materialized.dropped_rows} incomplete rows")

    elapsed = (datetime.now(UTC) - start).total_seconds()
    return JobResult(
        name=job.name,
        status="success",
        source_rows=len(table.rows),
        actions=len(actions),
        output_rows=len(materialized.rows),
        dropped_rows=materialized.dropped_rows,
        crosstab=crosstab,
        elapsed_seconds=elapsed,
    )


def process_all(
    config: RunConfig,
    *,
    store: WorkbookStore | None = None,
    crosstab_service: CrossTabService | None = None,
    dry_run: bool = False,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Run every configured pivot job against the workbook.

    Raises:
        ProcessingError: workbook missing (fatal, no job runs)
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()

    if store is None:
        path = Path(config.workbook)
        if not path.is_file():
            raise ProcessingError(f"Workbook not found: {path}")
        store = WorkbookStore(path)
    if crosstab_service is None:
        crosstab_service = WorkbookCrossTabService(store)

    job_results: list[JobResult] = []
    for job in config.pivots:
        logger.info(f"job '{job.name}': source='{job.source_table}' specs={job.column_specs}")
        try:
            result = run_job(
                job,
                store,
                crosstab_service,
                source_header_row=config.source_header_row,
                theme_skip_rows=config.theme_skip_rows,
                dry_run=dry_run,
            )
        except Exception as e:
            error_type = classify_error(e)
            logger.error(f"job '{job.name}': {error_type} {e}")
            row = e.row_number if isinstance(e, AllocationError) and e.row_number else -1
            error_log.append(
                ErrorRecord.create(
                    job=job.name,
                    table=job.source_table,
                    row=row,
                    error_type=error_type,
                    message=str(e),
                )
            )
            result = JobResult(name=job.name, status="failed", error=str(e))
        job_results.append(result)

    try:
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log written: {log_path}")
    except OSError as e:
        logger.warning(f"failed to write error log: {e}")

    end_time = datetime.now(UTC)
    succeeded = [r for r in job_results if r.status == "success"]
    return RunResult(
        success_jobs=len(succeeded),
        failed_jobs=len(job_results) - len(succeeded),
        total_output_rows=sum(r.output_rows for r in succeeded),
        total_dropped_rows=sum(r.dropped_rows for r in succeeded),
        crosstabs=sum(1 for r in succeeded if r.crosstab in ("created", "updated")),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        job_results=job_results,
    )
