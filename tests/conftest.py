# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pandas as pd
import pytest

SOURCE_HEADER = [
    "Name",
    "Role",
    "Project Allocation 1",
    "Project Allocation 1 %",
    "Project Allocation 2",
    "Project Allocation 2 %",
    "Project Allocation 3",
]


def make_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            df = pd.DataFrame(rows)
            df.to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("ALLOC_PIVOT_CONFIG", raising=False)
        yield p


@pytest.fixture()
def source_rows() -> list[list[object]]:
    return [
        SOURCE_HEADER,
        ["ann", "Dev", "Java", 0.5, "Python", None, "Go"],
        ["bob", "QA", "Python", None, None, None, None],
        ["cat", "Dev", "Java", None, "Python", None, None],
    ]


@pytest.fixture()
def theme_rows() -> list[list[object]]:
    return [
        ["Project themes"],
        ["Project", "Theme"],
        ["Java", "Backend"],
        ["Python", "Data"],
        ["Java", "Ignored duplicate"],
    ]


@pytest.fixture()
def workbook(temp_workdir: Path, source_rows, theme_rows) -> Path:
    return make_workbook(
        temp_workdir / "data" / "allocations.xlsx",
        {"Form Responses": source_rows, "Themes": theme_rows},
    )


@pytest.fixture()
def sample_config_yaml() -> str:
    return """workbook: ./data/allocations.xlsx
pivots:
  - name: Summary
    source_table: Form Responses
    theme_table: Themes
    column_specs: ["Project Allocation*", "Role", "Name"]
  - name: People
    source_table: Form Responses
    column_specs: ["Project Allocation*", "Name"]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "pivot.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def workbook_factory():
    return make_workbook
