from __future__ import annotations

from ..models.run_result import RunResult

"""Summary line rendering service.

Format:
SUMMARY jobs={total}/{total} success={success} failed={failed} rows={rows}
dropped={dropped} crosstabs={crosstabs} elapsed_sec={elapsed}
"""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記回避
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def render_summary_line(total_jobs: int, result: RunResult) -> str:
    """Render a SUMMARY line from RunResult.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2023, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2023, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     success_jobs=1, failed_jobs=0, total_output_rows=12,
        ...     total_dropped_rows=3, crosstabs=1, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(1, result)
        'SUMMARY jobs=1/1 success=1 failed=0 rows=12 dropped=3 crosstabs=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY jobs={total_jobs}/{total_jobs} "
        f"success={result.success_jobs} "
        f"failed={result.failed_jobs} "
        f"rows={result.total_output_rows} "
        f"dropped={result.total_dropped_rows} "
        f"crosstabs={result.crosstabs} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)}"
    )
