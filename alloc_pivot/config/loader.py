from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import PivotJobConfig, RunConfig

"""Config loader.

Responsibilities:
- Load YAML config (config/pivot.yml by default)
- Validate against config_schema.json (jsonschema)
- Apply defaults (source_header_row=0, theme_skip_rows=2)
- Re-validate programmatically built jobs before any workbook I/O
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/pivot.yml")

# Excel のシート名制約 (<name> と <name>-raw の両方に適用)
SHEET_TITLE_MAX_LENGTH = 31
MAX_PIVOT_NAME_LENGTH = SHEET_TITLE_MAX_LENGTH - len("-raw")
FORBIDDEN_SHEET_CHARS = frozenset("[]:*?/\\")


class ConfigurationError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigurationError: If the schema file is missing or unreadable, or the
            config data fails schema validation (missing required keys, empty
            strings, wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigurationError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigurationError(f"config validation failed: {e.message}") from e


def validate_job(job: PivotJobConfig) -> None:
    """Check the required job fields of a PivotJobConfig.

    The YAML path is already covered by the schema; this guards jobs that are
    constructed in code.
    """
    if not isinstance(job.name, str) or not job.name.strip():
        raise ConfigurationError("invalid configuration: name must be a non-empty string")
    if len(job.name) > MAX_PIVOT_NAME_LENGTH:
        raise ConfigurationError(
            f"invalid configuration: name '{job.name}' is longer than "
            f"{MAX_PIVOT_NAME_LENGTH} characters (sheet titles are limited to {SHEET_TITLE_MAX_LENGTH})"
        )
    bad = sorted(FORBIDDEN_SHEET_CHARS.intersection(job.name))
    if bad:
        raise ConfigurationError(
            f"invalid configuration: name '{job.name}' contains characters not allowed "
            f"in sheet titles: {''.join(bad)}"
        )
    if not isinstance(job.source_table, str) or not job.source_table.strip():
        raise ConfigurationError(
            f"invalid configuration: job '{job.name}' source_table must be a non-empty string"
        )
    if not isinstance(job.column_specs, (list, tuple)) or not job.column_specs:
        raise ConfigurationError(
            f"invalid configuration: job '{job.name}' column_specs must be a non-empty list"
        )
    for spec in job.column_specs:
        if not isinstance(spec, str) or not spec.strip().rstrip("*").strip():
            raise ConfigurationError(
                f"invalid configuration: job '{job.name}' has an empty column spec: {spec!r}"
            )
    if job.theme_table is not None and (
        not isinstance(job.theme_table, str) or not job.theme_table.strip()
    ):
        raise ConfigurationError(
            f"invalid configuration: job '{job.name}' theme_table must be a non-empty string"
        )


def load_config(path: Path) -> RunConfig:
    if not path.exists():
        raise ConfigurationError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    pivots = [
        PivotJobConfig(
            name=p["name"].strip(),
            source_table=p["source_table"].strip(),
            column_specs=list(p["column_specs"]),
            theme_table=(p.get("theme_table") or None),
        )
        for p in data["pivots"]
    ]
    names = [p.name for p in pivots]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigurationError(f"config validation failed: duplicate pivot names {duplicates}")

    return RunConfig(
        workbook=data["workbook"],
        pivots=pivots,
        source_header_row=data.get("source_header_row", 0),
        theme_skip_rows=data.get("theme_skip_rows", 2),
    )
