"""Tests for operation-specific Rich renderers."""

from orgctl.output.console import create_console, get_output
from orgctl.output.renderers import render_org_tree, render_quiet, render_result
from orgctl.services.result import ServiceError, ServiceResult
from tests.conftest import SAMPLE_ORGANIZATION

# ── Helpers ───────────────────────────────────────────────────────────


def _ok(op: str, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str, code: str, message: str, **detail: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=dict(detail)),
    )


def _unit(**overrides: object) -> dict[str, object]:
    unit: dict[str, object] = {
        "id": "ops-1",
        "name": "Ops One",
        "type": "enhet",
        "cost_center": "0003",
        "manager": None,
        "child_count": 0,
    }
    unit.update(overrides)
    return unit


# ── Error rendering ──────────────────────────────────────────────────


class TestErrorRenderer:
    def test_basic_error(self) -> None:
        output = render_result(_err("get_unit", "NOT_FOUND", "Unit nope not found", id="nope"))
        assert "ERROR" in output
        assert "get_unit" in output
        assert "[NOT_FOUND]" in output
        assert "Unit nope not found" in output

    def test_issues_listed(self) -> None:
        result = _err(
            "create_unit",
            "VALIDATION_ERROR",
            "a; b",
            issues=["ID ops-1 already exists", "Cost center 0003 already exists"],
        )
        output = render_result(result)
        assert "  - ID ops-1 already exists" in output
        assert "  - Cost center 0003 already exists" in output

    def test_verbose_shows_detail(self) -> None:
        output = render_result(_err("get_unit", "NOT_FOUND", "gone", id="nope"), verbose=True)
        assert "detail" in output
        assert "id: nope" in output

    def test_no_error_object(self) -> None:
        assert "Unknown error" in render_result(ServiceResult(ok=False, op="test"))


# ── Tree rendering ───────────────────────────────────────────────────


class TestTreeRenderer:
    def test_whole_tree(self) -> None:
        output = render_result(_ok("get_tree", tree=SAMPLE_ORGANIZATION, count=11))
        for name in ("Koncernen", "Operations", "Ops Sektion", "IT Nätverk"):
            assert name in output
        assert "(Vera VD)" in output
        assert "0112" in output
        assert output.endswith("11 units")

    def test_nesting_order(self) -> None:
        output = render_result(_ok("get_tree", tree=SAMPLE_ORGANIZATION, count=11))
        assert output.index("Operations") < output.index("Ops Stab") < output.index("IT Support")

    def test_subtree(self) -> None:
        node = SAMPLE_ORGANIZATION["children"][1]
        output = render_result(_ok("get_unit", unit=node, count=5))
        assert "IT Drift" in output
        assert "Koncernen" not in output
        assert output.endswith("5 units")

    def test_render_org_tree_directly(self) -> None:
        console = create_console()
        console.print(render_org_tree({"id": "x", "name": "Solo", "type": "enhet", "costCenter": "0009"}))
        assert "Solo" in get_output(console)

    def test_breadcrumbs(self) -> None:
        path = [
            {"id": "koncernen", "name": "Koncernen", "type": "koncern"},
            {"id": "it-division", "name": "IT", "type": "division"},
        ]
        assert render_result(_ok("get_breadcrumbs", path=path)) == "Koncernen › IT"


# ── Mutation renderers ───────────────────────────────────────────────


class TestMutationRenderer:
    def test_create(self) -> None:
        output = render_result(_ok("create_unit", unit=_unit(), parent_id="operations"))
        assert output.startswith("OK  create_unit")
        assert "id: ops-1" in output
        assert "cost_center: 0003" in output
        assert "parent_id: operations" in output
        assert "manager" not in output

    def test_update_fields_changed(self) -> None:
        output = render_result(
            _ok("update_unit", unit=_unit(manager="Anna"), fields_changed=["manager", "name"])
        )
        assert "manager: Anna" in output
        assert 'fields_changed: ["manager","name"]' in output

    def test_delete_with_reassignment(self) -> None:
        output = render_result(
            _ok(
                "delete_unit",
                id="ops-stab",
                name="Ops Stab",
                reassigned_to="ops-avd",
                reassigned=["ops-support"],
            )
        )
        assert "id: ops-stab" in output
        assert "reassigned_to: ops-avd" in output
        assert 'reassigned: ["ops-support"]' in output

    def test_delete_leaf(self) -> None:
        output = render_result(
            _ok("delete_unit", id="x", name="X", reassigned_to=None, reassigned=[])
        )
        assert "reassigned" not in output


# ── Query renderers ──────────────────────────────────────────────────


class TestQueryRenderers:
    def test_cost_center_available(self) -> None:
        result = _ok("check_cost_center", cost_center="9999", available=True, conflicting_unit=None)
        assert render_result(result) == "9999 is available"

    def test_types_table(self) -> None:
        types = [{"value": "koncern", "label": "Koncern"}, {"value": "division", "label": "Division"}]
        output = render_result(_ok("list_types", types=types, count=2))
        assert "Unit types" in output
        assert "koncern" in output
        assert "Division" in output

    def test_leaf_type_has_no_children(self) -> None:
        result = _ok("list_allowed_child_types", parent_type="sektion", types=[], count=0)
        assert render_result(result) == "sektion cannot have child units"

    def test_validate_ok(self) -> None:
        result = _ok("validate", valid=True, issues=[], count=0, units=11)
        assert render_result(result) == "OK  11 units, no issues"

    def test_validate_issues(self) -> None:
        issues = ["Duplicate ID: a (unit: A)", "Unknown unit type: team (unit: B)"]
        output = render_result(_ok("validate", valid=False, issues=issues, count=2, units=3))
        assert output.splitlines()[0] == "2 issues"
        assert "  - Unknown unit type: team (unit: B)" in output


# ── Backup renderers ─────────────────────────────────────────────────


class TestBackupRenderers:
    def test_empty_list(self) -> None:
        result = _ok("list_backups", items=[], count=0, backup_dir="/tmp/backups")
        assert render_result(result) == "No backups in /tmp/backups"

    def test_list(self) -> None:
        items = [
            {"name": "organization.manual.20260102T000000000000.json", "manual": True},
            {"name": "organization.20260101T000000000000.json", "manual": False},
        ]
        output = render_result(_ok("list_backups", items=items, count=2, backup_dir="b"))
        assert "organization.manual.20260102T000000000000.json" in output
        assert "manual" in output
        assert "automatic" in output
        assert output.endswith("2 backups")

    def test_restore_with_warnings(self) -> None:
        result = ServiceResult(
            ok=True,
            op="restore",
            data={"name": "organization.x.json", "units": 4},
            warnings=["Duplicate ID: a (unit: A)"],
        )
        output = render_result(result)
        assert "units: 4" in output
        assert "warning: Duplicate ID: a (unit: A)" in output


# ── Dashboard renderers ──────────────────────────────────────────────


def _summary_data() -> dict[str, object]:
    return {
        "unit": _unit(id="operations", name="Operations", cost_center="0002"),
        "year": "2026",
        "scope_size": 2,
        "missing_records": ["0112"],
        "is_aggregated": True,
        "result": {"budget": 1440, "utfall": 1320, "variance": -8.3},
        "revenue": {"budget": 3600, "utfall": 3600, "variance": 0},
        "costs": {"budget": 2160, "utfall": 2280, "variance": 5.6},
        "figures": {
            "personal": {"antal_anstallda": 40, "personalomsattning": 12.5, "sjukfranvaro": 2.5},
            "produktion": {"arenden": 150.0, "leveranstid": 3.5, "kvalitetsindex": None},
        },
        "statuses": {"kostnadsavvikelse": "critical", "personalomsattning": "warning"},
    }


class TestDashboardRenderers:
    def test_summary(self) -> None:
        output = render_result(ServiceResult(ok=True, op="summary", data=_summary_data()))
        assert "Operations" in output
        assert "3 600" in output
        assert "+5.6%" in output
        assert "-8.3%" in output
        assert "personalomsattning: 12.5%" in output
        assert "arenden: 150" in output
        assert "leveranstid: 3.5" in output
        assert "kvalitetsindex: –" in output
        assert 'missing_records: ["0112"]' in output

    def test_monthly(self) -> None:
        months = [{"month": m, "result": 110.0} for m in ("Jan", "Feb")]
        result = _ok("monthly", unit=_unit(name="Operations"), track="utfall", months=months, total=220)
        output = render_result(result)
        assert "Jan" in output
        assert "110" in output
        assert "Totalt" in output
        assert "220" in output

    def test_children(self) -> None:
        rows = [
            {
                "unit": _unit(id="ops-avd", name="Ops Avdelning", cost_center="0020"),
                "headcount": 30,
                "result": {"budget": 960, "utfall": 960, "variance": 0},
                "costs": {"budget": 1440, "utfall": 1440, "variance": 0},
                "personalomsattning": 10,
                "sjukfranvaro": 2,
                "kundnojdhet": 70,
                "statuses": {},
            }
        ]
        output = render_result(_ok("compare_children", unit=_unit(), children=rows, count=1))
        assert "Ops Avdelning" in output
        assert "1 440" in output
        assert "Kundnöjdhet" in output
        assert "70%" in output

    def test_children_without_satisfaction_column(self) -> None:
        rows = [
            {
                "unit": _unit(),
                "headcount": 5,
                "costs": {"utfall": 0, "variance": 0},
                "personalomsattning": 0,
                "sjukfranvaro": 0,
                "kundnojdhet": None,
                "statuses": {},
            }
        ]
        output = render_result(_ok("compare_children", unit=_unit(), children=rows, count=1))
        assert "Kundnöjdhet" not in output

    def test_no_children(self) -> None:
        result = _ok("compare_children", unit=_unit(name="IT Support"), children=[], count=0)
        assert render_result(result) == "IT Support has no child units"


# ── Quiet and generic ────────────────────────────────────────────────


class TestQuietRenderer:
    def test_error(self) -> None:
        output = render_quiet(_err("get_unit", "NOT_FOUND", "Unit x not found"))
        assert output == "ERROR: get_unit — Unit x not found"

    def test_types_list_values(self) -> None:
        types = [{"value": "stab", "label": "Stab"}, {"value": "enhet", "label": "Enhet"}]
        assert render_quiet(_ok("list_allowed_child_types", types=types)) == "stab\nenhet"

    def test_children_ids(self) -> None:
        rows = [{"unit": {"id": "operations"}}, {"unit": {"id": "it-division"}}]
        assert render_quiet(_ok("compare_children", children=rows)) == "operations\nit-division"

    def test_backup_names(self) -> None:
        items = [{"name": "a.json", "manual": True}]
        assert render_quiet(_ok("list_backups", items=items)) == "a.json"

    def test_unit_id(self) -> None:
        assert render_quiet(_ok("create_unit", unit=_unit())) == "ops-1"

    def test_fallback(self) -> None:
        assert render_quiet(_ok("validate", valid=True)) == "OK: validate"


class TestGenericRenderer:
    def test_unknown_op(self) -> None:
        output = render_result(_ok("something_new", answer=42))
        assert output.startswith("OK  something_new")
        assert "answer: 42" in output

    def test_verbose_meta_telemetry(self) -> None:
        result = ServiceResult(
            ok=True,
            op="validate",
            data={"valid": True, "units": 1},
            meta={"telemetry": {"name": "OrganizationService.validate", "duration_ms": 1.5, "children": [{"name": "validate_organization", "duration_ms": 0.5, "attrs": {"units": 11}}]}},
        )
        output = render_result(result, verbose=True)
        assert "meta:" in output
        assert "OrganizationService.validate" in output
        assert "validate_organization" in output
        assert "(units=11)" in output
