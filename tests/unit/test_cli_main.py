from __future__ import annotations

from pathlib import Path

from alloc_pivot.cli import main as cli_main
from alloc_pivot.logging.init import reset_logging


def test_cli_inspect_data(workbook: Path, write_config: Path, capsys):
    reset_logging()
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out

    assert code == 0
    assert "JOB: Summary source=Form Responses" in out
    assert "COLUMN: Project Allocation wildcard=True slots=[(2, 3), (4, 5), (6, None)]" in out
    assert "actions=3" in out
    # inspect は書き込みしない
    from alloc_pivot.excel.workbook import WorkbookStore
    assert not WorkbookStore(workbook).has_table("Summary-raw")


def test_cli_config_option_and_env(workbook: Path, write_config: Path, temp_workdir: Path, monkeypatch, capsys):
    moved = temp_workdir / "custom.yml"
    write_config.rename(moved)
    # .env の上書きを teardown で元に戻すため先に登録
    monkeypatch.setenv("ALLOC_PIVOT_CONFIG", "unused.yml")

    reset_logging()
    assert cli_main(["--config", str(moved), "--dry-run"]) == 0
    assert "SUMMARY jobs=2/2 success=2 failed=0" in capsys.readouterr().out

    reset_logging()
    (temp_workdir / ".env").write_text(f"ALLOC_PIVOT_CONFIG={moved}\n", encoding="utf-8")
    assert cli_main(["--dry-run"]) == 0
    assert "SUMMARY jobs=2/2" in capsys.readouterr().out


def test_cli_debug_mode(workbook: Path, write_config: Path, capsys):
    reset_logging()
    code = cli_main(["--debug", "--dry-run"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG job 'Summary': slots=[3, 1, 1] actions=3" in out


def test_cli_missing_workbook(write_config: Path, capsys):
    reset_logging()
    code = cli_main([])
    assert code == 1
    assert "ERROR workbook not found" in capsys.readouterr().out
