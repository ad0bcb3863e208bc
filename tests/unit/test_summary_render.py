from __future__ import annotations

import re
from datetime import datetime, timezone

from alloc_pivot.models.run_result import JobResult, RunResult
from alloc_pivot.services.summary import render_summary_line

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+jobs=([0-9]+)/(\1)\s+success=([0-9]+)\s+failed=([0-9]+)\s+"
    r"rows=([0-9]+)\s+dropped=([0-9]+)\s+crosstabs=([0-9]+)\s+elapsed_sec=([0-9]+\.?[0-9]*)$"
)


def _result(**overrides) -> RunResult:
    start = datetime(2023, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
    end = datetime(2023, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
    values = dict(
        success_jobs=2,
        failed_jobs=0,
        total_output_rows=120,
        total_dropped_rows=7,
        crosstabs=1,
        start_time=start,
        end_time=end,
        elapsed_seconds=2.0,
    )
    values.update(overrides)
    return RunResult(**values)


def test_render_summary_line_all_success():
    line = render_summary_line(2, _result())
    match = SUMMARY_PATTERN.match(line)
    assert match, line
    assert match.group(1) == "2"
    assert match.group(3) == "2"
    assert match.group(4) == "0"
    assert match.group(5) == "120"
    assert match.group(6) == "7"
    assert match.group(7) == "1"
    assert match.group(8) == "2"


def test_render_summary_line_partial_failure():
    result = _result(
        success_jobs=1,
        failed_jobs=1,
        elapsed_seconds=1.25,
        job_results=[JobResult(name="A", status="success"), JobResult(name="B", status="failed")],
    )
    line = render_summary_line(2, result)
    assert SUMMARY_PATTERN.match(line), line
    assert "failed=1" in line
    assert line.endswith("elapsed_sec=1.25")


def test_render_summary_line_tiny_elapsed_has_no_exponent():
    line = render_summary_line(1, _result(elapsed_seconds=0.000012))
    assert "e-" not in line
    assert line.endswith("elapsed_sec=0.000012")


def test_render_summary_line_zero_elapsed():
    line = render_summary_line(0, _result(success_jobs=0, elapsed_seconds=0.0))
    assert line.endswith("elapsed_sec=0")
