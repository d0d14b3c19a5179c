"""Tests for loading the Type Rules and threshold tables."""

import json
from pathlib import Path

import click
import pytest

from orgctl.config.tables import load_thresholds, load_type_rules


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadTypeRules:
    def test_defaults_without_file(self) -> None:
        rules = load_type_rules(None)
        assert "koncern" in rules
        assert len(rules) == 6

    def test_file_replaces_defaults(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "types.json",
            {
                "bolag": {"label": "Bolag", "allowedChildren": ["team"], "allowedAtDepth": [0]},
                "team": {"label": "Team", "allowedAtDepth": [1]},
            },
        )
        rules = load_type_rules(path)
        assert list(rules) == ["bolag", "team"]
        assert "koncern" not in rules

    def test_missing_file_aborts(self, tmp_path: Path) -> None:
        with pytest.raises(click.ClickException, match="Cannot read unit types file"):
            load_type_rules(tmp_path / "missing.json")

    def test_invalid_json_aborts(self, tmp_path: Path) -> None:
        path = tmp_path / "types.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(click.ClickException, match="Invalid JSON"):
            load_type_rules(path)

    def test_empty_table_aborts(self, tmp_path: Path) -> None:
        with pytest.raises(click.ClickException, match="non-empty JSON object"):
            load_type_rules(_write(tmp_path / "types.json", {}))

    def test_schema_error_aborts(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "types.json", {"bolag": {"label": "Bolag"}})
        with pytest.raises(click.ClickException, match="Invalid unit types"):
            load_type_rules(path)

    def test_unknown_child_reference_aborts(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "types.json",
            {"bolag": {"label": "Bolag", "allowedChildren": ["x"], "allowedAtDepth": [0]}},
        )
        with pytest.raises(click.ClickException, match="unknown types"):
            load_type_rules(path)


class TestLoadThresholds:
    def test_defaults_without_file(self) -> None:
        thresholds = load_thresholds(None)
        assert thresholds["kundnojdhet"].higher_is_better is True

    def test_file_replaces_defaults(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "thresholds.json", {"sjukfranvaro": {"good": 2, "warning": 4}})
        thresholds = load_thresholds(path)
        assert set(thresholds) == {"sjukfranvaro"}
        assert thresholds["sjukfranvaro"].good == 2

    def test_schema_error_aborts(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "thresholds.json", {"sjukfranvaro": {"good": "low"}})
        with pytest.raises(click.ClickException, match="Invalid thresholds"):
            load_thresholds(path)
