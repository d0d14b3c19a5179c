"""Shared pytest fixtures and test helpers for orgctl tests."""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from orgctl.config.settings import OrgSettings
from orgctl.domain.metrics import DataValues
from orgctl.domain.models import OrgUnit
from orgctl.domain.rules import TypeRules
from orgctl.domain.validation import TreeValidator
from orgctl.infrastructure.workspace import Workspace
from orgctl.services.telemetry import disable_telemetry

# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------
#
# koncernen (koncern, 0001)
# ├── operations (division, 0002)
# │   ├── ops-stab (stab, 0010)
# │   │   └── ops-support (enhet, 0011)          leaf
# │   └── ops-avd (avdelning, 0020)
# │       └── ops-sektion (sektion, 0021)        leaf
# └── it-division (division, 0100)
#     ├── it-support (enhet, 0101)               leaf
#     └── it-infrastruktur (avdelning, 0110)
#         └── it-drift (enhet, 0111)
#             └── it-natverk (sektion, 0112)     leaf, no metrics record

SAMPLE_ORGANIZATION: dict[str, Any] = {
    "id": "koncernen",
    "name": "Koncernen",
    "type": "koncern",
    "costCenter": "0001",
    "manager": "Vera VD",
    "children": [
        {
            "id": "operations",
            "name": "Operations",
            "type": "division",
            "costCenter": "0002",
            "manager": "Karin Ek",
            "children": [
                {
                    "id": "ops-stab",
                    "name": "Ops Stab",
                    "type": "stab",
                    "costCenter": "0010",
                    "children": [
                        {
                            "id": "ops-support",
                            "name": "Ops Support",
                            "type": "enhet",
                            "costCenter": "0011",
                        }
                    ],
                },
                {
                    "id": "ops-avd",
                    "name": "Ops Avdelning",
                    "type": "avdelning",
                    "costCenter": "0020",
                    "children": [
                        {
                            "id": "ops-sektion",
                            "name": "Ops Sektion",
                            "type": "sektion",
                            "costCenter": "0021",
                        }
                    ],
                },
            ],
        },
        {
            "id": "it-division",
            "name": "IT",
            "type": "division",
            "costCenter": "0100",
            "children": [
                {
                    "id": "it-support",
                    "name": "IT Support",
                    "type": "enhet",
                    "costCenter": "0101",
                },
                {
                    "id": "it-infrastruktur",
                    "name": "IT Infrastruktur",
                    "type": "avdelning",
                    "costCenter": "0110",
                    "children": [
                        {
                            "id": "it-drift",
                            "name": "IT Drift",
                            "type": "enhet",
                            "costCenter": "0111",
                            "children": [
                                {
                                    "id": "it-natverk",
                                    "name": "IT Nätverk",
                                    "type": "sektion",
                                    "costCenter": "0112",
                                }
                            ],
                        }
                    ],
                },
            ],
        },
    ],
}

SAMPLE_UNIT_COUNT = 11


def series(yearly: float) -> dict[str, Any]:
    """A MonthlyValue spread evenly over twelve months."""
    return {"yearly": yearly, "monthly": [yearly / 12] * 12}


def make_record(
    *,
    headcount: float,
    turnover: float = 0,
    sick_leave: float = 0,
    revenue: tuple[float, float] = (0, 0),
    personnel: tuple[float, float] = (0, 0),
    premises: tuple[float, float] = (0, 0),
    production: dict[str, float | None] | None = None,
) -> dict[str, Any]:
    """Build a raw UnitData record. Tuples are ``(budget, utfall)`` yearly totals."""

    def group(pair: tuple[float, float]) -> dict[str, Any]:
        return {"budget": series(pair[0]), "utfall": series(pair[1])}

    return {
        "ekonomi": {
            "intakter": group(revenue),
            "personal": group(personnel),
            "lokaler": group(premises),
        },
        "personal": {
            "antal_anstallda": headcount,
            "personalomsattning": turnover,
            "sjukfranvaro": sick_leave,
        },
        "produktion": production or {},
    }


SAMPLE_DATA: dict[str, Any] = {
    "year": "2026",
    "values": {
        "0011": make_record(
            headcount=10,
            turnover=20,
            sick_leave=4.0,
            revenue=(1200, 1200),
            personnel=(600, 720),
            premises=(120, 120),
            production={"arenden": 100, "leveranstid": 2.0, "kundnojdhet": 90, "kvalitetsindex": None},
        ),
        "0021": make_record(
            headcount=30,
            turnover=10,
            sick_leave=2.0,
            revenue=(2400, 2400),
            personnel=(1200, 1200),
            premises=(240, 240),
            production={"arenden": 50, "leveranstid": 4.0, "kundnojdhet": 70, "kvalitetsindex": None},
        ),
        "0101": make_record(
            headcount=5,
            sick_leave=1.0,
            personnel=(480, 480),
            production={
                "arenden": None,
                "leveranstid": None,
                "kundnojdhet": None,
                "kvalitetsindex": 80,
            },
        ),
    },
}


def sample_tree() -> OrgUnit:
    """A fresh, independently mutable copy of the sample organization."""
    return OrgUnit.from_document(copy.deepcopy(SAMPLE_ORGANIZATION))


def sample_data() -> DataValues:
    return DataValues.model_validate(copy.deepcopy(SAMPLE_DATA))


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Iterator[None]:
    """AppContext enables telemetry on --verbose; keep it from leaking."""
    yield
    disable_telemetry()


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """AppContext reconfigures the root logger; restore it after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    org = logging.getLogger("orgctl")
    org_level = org.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    org.setLevel(org_level)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ORGCTL_CONFIG", "ORGCTL_DATA_DIR", "ORGCTL_QUIET", "ORGCTL_JSON_OUTPUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Temporary workspace with the sample organization and metrics.

    Single source of truth for the on-disk layout: ``data/organization.json``,
    ``data/data.json`` and an (initially absent) ``backups/`` directory.
    """
    write_json(tmp_path / "data" / "organization.json", SAMPLE_ORGANIZATION)
    write_json(tmp_path / "data" / "data.json", SAMPLE_DATA)
    return tmp_path


@pytest.fixture
def document_path(workspace_root: Path) -> Path:
    return workspace_root / "data" / "organization.json"


@pytest.fixture
def backup_dir(workspace_root: Path) -> Path:
    return workspace_root / "backups"


@pytest.fixture
def settings(workspace_root: Path) -> OrgSettings:
    return OrgSettings.from_cli(workspace_root=workspace_root)


@pytest.fixture
def workspace(settings: OrgSettings) -> Workspace:
    return Workspace(settings)


@pytest.fixture
def rules() -> TypeRules:
    return TypeRules.default()


@pytest.fixture
def validator(rules: TypeRules) -> TreeValidator:
    return TreeValidator(rules, root_id="koncernen")


@pytest.fixture
def tree() -> OrgUnit:
    return sample_tree()


@pytest.fixture
def _isolated_workspace(workspace_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp workspace so the CLI resolves ``data/`` there.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes. Tests that need the path can request ``workspace_root``.
    """
    monkeypatch.chdir(workspace_root)
