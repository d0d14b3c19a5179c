"""Tests for Workspace — settings, store and lazily loaded tables."""

import json
from pathlib import Path

import click
import pytest

from orgctl.config.settings import OrgSettings
from orgctl.infrastructure.storage import PersistenceError
from orgctl.infrastructure.workspace import Workspace


class TestWorkspace:
    def test_store_paths(self, workspace: Workspace, workspace_root: Path) -> None:
        assert workspace.store.path == workspace_root / "data" / "organization.json"
        assert workspace.store.backup_dir == workspace_root / "backups"
        assert workspace.store.max_backups == 10

    def test_root_id(self, workspace: Workspace) -> None:
        assert workspace.root_id == "koncernen"

    def test_default_tables(self, workspace: Workspace) -> None:
        assert "division" in workspace.type_rules
        assert "kundnojdhet" in workspace.thresholds

    def test_tables_cached(self, workspace: Workspace) -> None:
        assert workspace.type_rules is workspace.type_rules

    def test_custom_types_file(self, workspace_root: Path) -> None:
        (workspace_root / "types.json").write_text(
            json.dumps({"bolag": {"label": "Bolag", "allowedAtDepth": [0]}}), encoding="utf-8"
        )
        (workspace_root / "orgctl.toml").write_text(
            '[organization]\ntypes_file = "types.json"\n', encoding="utf-8"
        )
        workspace = Workspace(OrgSettings.from_cli(workspace_root=workspace_root))
        assert list(workspace.type_rules) == ["bolag"]

    def test_missing_types_file_aborts(self, workspace_root: Path) -> None:
        (workspace_root / "orgctl.toml").write_text(
            '[organization]\ntypes_file = "missing.json"\n', encoding="utf-8"
        )
        workspace = Workspace(OrgSettings.from_cli(workspace_root=workspace_root))
        with pytest.raises(click.ClickException):
            _ = workspace.type_rules


class TestDataValues:
    def test_loads_metrics(self, workspace: Workspace) -> None:
        data = workspace.data_values
        assert data.year == "2026"
        assert set(data.values) == {"0011", "0021", "0101"}

    def test_missing_metrics_means_no_figures(self, workspace: Workspace) -> None:
        workspace.settings.metrics_path.unlink()
        assert workspace.data_values.values == {}

    def test_invalid_metrics(self, workspace: Workspace) -> None:
        workspace.settings.metrics_path.write_text(
            json.dumps({"values": {"0011": {"personal": {"antal_anstallda": "many"}}}}),
            encoding="utf-8",
        )
        with pytest.raises(PersistenceError, match="Invalid metrics document"):
            _ = workspace.data_values
