from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from alloc_pivot.models.crosstab import CrossTabConfig
from alloc_pivot.services.crosstab import (
    CrossTabLayoutError,
    QuotaExceededError,
    build_crosstab_config,
    is_quota_failure,
    upsert_crosstab,
)

HEADER = ["Alloc%", "Alloc", "User", "Role"]
THEMED = ["Theme", "P%", "P", "Role", "Name"]


def test_build_config_without_theme():
    cfg = build_crosstab_config("View-raw", HEADER, 11, has_theme=False)
    assert cfg.value_column == "Alloc%"
    assert cfg.column_group == "Role"
    assert cfg.row_groups == ["Alloc", "User"]
    assert cfg.row_count == 11
    assert cfg.column_count == 4
    assert cfg.source_table == "View-raw"


def test_build_config_with_theme():
    cfg = build_crosstab_config("View-raw", THEMED, 3, has_theme=True)
    assert cfg.value_column == "P%"
    assert cfg.row_groups == ["Theme", "P", "Role"]
    assert cfg.column_group == "Name"


def test_build_config_rejects_non_ratio_value_column():
    with pytest.raises(CrossTabLayoutError):
        build_crosstab_config("View-raw", ["User", "Alloc%", "Alloc", "Role"], 3, has_theme=False)


def test_build_config_rejects_too_few_columns():
    with pytest.raises(CrossTabLayoutError):
        build_crosstab_config("View-raw", ["Alloc%", "Alloc"], 3, has_theme=False)


def test_upsert_creates_when_missing():
    service = MagicMock()
    service.get_config.return_value = None

    outcome = upsert_crosstab(service, "View", "View-raw", HEADER, 5, has_theme=False)

    assert outcome == "created"
    service.create.assert_called_once()
    name, cfg = service.create.call_args.args
    assert name == "View"
    assert cfg.row_count == 5
    service.update.assert_not_called()


def test_upsert_patches_only_row_count_when_existing():
    existing = CrossTabConfig(
        source_table="View-raw",
        row_count=5,
        column_count=4,
        row_groups=["Custom"],
        column_group="Role",
        value_column="Alloc%",
    )
    service = MagicMock()
    service.get_config.return_value = existing

    outcome = upsert_crosstab(service, "View", "View-raw", HEADER, 42, has_theme=False)

    assert outcome == "updated"
    service.create.assert_not_called()
    name, cfg = service.update.call_args.args
    assert name == "View"
    assert cfg.row_count == 42
    # 既存設定の他項目は保持
    assert cfg.row_groups == ["Custom"]
    assert cfg.column_count == 4


def test_quota_failure_is_surfaced_distinctly():
    service = MagicMock()
    cause = RuntimeError("Service invoked too many times: quota exceeded")
    service.get_config.side_effect = cause

    with pytest.raises(QuotaExceededError) as e:
        upsert_crosstab(service, "View", "View-raw", HEADER, 5, has_theme=False)
    assert e.value.__cause__ is cause
    service.create.assert_not_called()


def test_other_failures_propagate_unchanged():
    service = MagicMock()
    service.get_config.side_effect = PermissionError("workbook locked")

    with pytest.raises(PermissionError):
        upsert_crosstab(service, "View", "View-raw", HEADER, 5, has_theme=False)


@pytest.mark.parametrize(
    "message, expected",
    [
        ("User rate limit exceeded", True),
        ("Internal error encountered.", True),
        ("HTTP 429 Too Many Requests", True),
        ("Quota exceeded for quota metric", True),
        ("file not found", False),
        ("invalid value in row 1429", False),
    ],
)
def test_is_quota_failure_messages(message, expected):
    assert is_quota_failure(RuntimeError(message)) is expected


def test_is_quota_failure_status_code():
    exc = RuntimeError("boom")
    exc.status_code = 429
    assert is_quota_failure(exc)


def test_config_json_round_trip():
    cfg = build_crosstab_config("View-raw", THEMED, 3, has_theme=True)
    assert CrossTabConfig.from_json(cfg.to_json()) == cfg
