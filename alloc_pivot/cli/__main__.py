from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigurationError, load_config
from ..excel.workbook import WorkbookStore
from ..logging.init import log_summary, setup_logging
from ..services.orchestrator import ProcessingError, plan_job, process_all
from ..services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (python-dotenv), then the YAML config
- Run every pivot job against the configured workbook
- Print the SUMMARY line and return the exit code
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

CONFIG_ENV_VAR = "ALLOC_PIVOT_CONFIG"


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv (values override the process environment)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="allocation-pivot",
        description="Normalize project allocation sheets and refresh their cross-tab views",
    )
    p.add_argument("--config", type=Path, default=None, help="Path to config YAML")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--inspect-data",
        action="store_true",
        help="Print resolved columns and output layout per job then exit",
    )
    p.add_argument("--dry-run", action="store_true", help="Compute everything, write nothing")
    return p.parse_args(argv)


def _inspect_data(cfg) -> int:
    store = WorkbookStore(Path(cfg.workbook))
    for job in cfg.pivots:
        print(f"JOB: {job.name} source={job.source_table}")
        try:
            plan = plan_job(job, store, source_header_row=cfg.source_header_row)
        except Exception as e:  # pragma: no cover
            print(f"  error={e}")
            continue
        for column in plan.resolved:
            slots = [(s.value_index, s.percent_index) for s in column.slots]
            print(f"  COLUMN: {column.label} wildcard={column.wildcard} slots={slots}")
        print(f"  source_rows={plan.source_rows} actions={len(plan.actions)}")
        print(f"  output_header={plan.output_header}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # 空リスト [] 指定時に sys.argv[1:] を読まないよう None のときのみ参照
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        for h in logger.handlers:
            h.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        logger.debug("debug mode enabled")

    config_path = args.config or Path(os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
    try:
        cfg = load_config(config_path)
    except ConfigurationError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    workbook = Path(cfg.workbook)
    if not workbook.is_file():
        logger.error(f"workbook not found: {workbook}")
        return EXIT_FATAL

    logger.info(f"Processing workbook: {workbook}")

    if args.inspect_data:
        return _inspect_data(cfg)

    try:
        result = process_all(cfg, dry_run=args.dry_run)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    total_jobs = result.success_jobs + result.failed_jobs
    summary_line = render_summary_line(total_jobs, result)
    # log_summary が "SUMMARY " を付与するので除去
    log_summary(summary_line[len("SUMMARY "):])

    if result.failed_jobs > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
