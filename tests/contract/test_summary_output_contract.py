from __future__ import annotations

import re
from pathlib import Path

from alloc_pivot.cli import main as cli_main
from alloc_pivot.logging.init import reset_logging

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY jobs=\d+/\d+ success=\d+ failed=\d+ rows=\d+ dropped=\d+ crosstabs=\d+ elapsed_sec=[0-9.]+$"
)


def test_summary_is_last_line_and_matches_contract(workbook: Path, write_config: Path, capsys):
    reset_logging()
    cli_main([])
    lines = capsys.readouterr().out.strip().splitlines()
    assert SUMMARY_PATTERN.match(lines[-1]), lines[-1]
    assert sum(1 for line in lines if line.startswith("SUMMARY")) == 1
