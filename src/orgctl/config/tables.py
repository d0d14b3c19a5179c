"""Static lookup tables: unit Type Rules and dashboard thresholds.

Both are loaded once per process. With no file configured the code-baked
defaults apply; a configured file that is missing or fails schema
validation aborts startup instead of silently falling back.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click
import pydantic

from orgctl.domain.rules import TypeRules
from orgctl.domain.thresholds import DEFAULT_THRESHOLDS, ThresholdRule, parse_thresholds


def _read_table(path: Path, label: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        msg = f"Cannot read {label} file {path}: {exc}"
        raise click.ClickException(msg) from exc
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {label} file {path}: {exc}"
        raise click.ClickException(msg) from exc
    if not isinstance(data, dict) or not data:
        msg = f"{label} file {path} must contain a non-empty JSON object"
        raise click.ClickException(msg)
    return data


def load_type_rules(path: Path | None) -> TypeRules:
    """Load Type Rules from *path*, or the built-in table when *path* is None."""
    if path is None:
        return TypeRules.default()
    data = _read_table(path, "unit types")
    try:
        return TypeRules.from_mapping(data)
    except (pydantic.ValidationError, ValueError) as exc:
        msg = f"Invalid unit types in {path}: {exc}"
        raise click.ClickException(msg) from exc


def load_thresholds(path: Path | None) -> dict[str, ThresholdRule]:
    """Load threshold bands from *path*, or the built-in table when *path* is None."""
    if path is None:
        return parse_thresholds(DEFAULT_THRESHOLDS)
    data = _read_table(path, "thresholds")
    try:
        return parse_thresholds(data)
    except pydantic.ValidationError as exc:
        msg = f"Invalid thresholds in {path}: {exc}"
        raise click.ClickException(msg) from exc
