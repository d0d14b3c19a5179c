"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from orgctl.output.console import create_console, get_output, style_for_status
from orgctl.output.icons import glyph_for, icon_for

if TYPE_CHECKING:
    from rich.console import Console

    from orgctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items") or result.data.get("types") or result.data.get("children")
    if items and isinstance(items, list):
        return "\n".join(_extract_id(item) for item in items if _extract_id(item))

    unit = result.data.get("unit")
    if isinstance(unit, dict) and unit.get("id"):
        return str(unit["id"])

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_id(item: Any) -> str:
    """Extract an identifier from a dict item (units, types, backups)."""
    if isinstance(item, dict):
        if isinstance(item.get("unit"), dict):
            return _extract_id(item["unit"])
        for key in ("id", "value", "name"):
            val = item.get(key)
            if val is not None:
                return str(val)
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="org.ok")
    op = Text(f"  {result.op}", style="org.op")
    console.print(Text.assemble(label, op))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="org.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="org.id")
    elif key == "cost_center":
        v = Text(str(value), style="org.cc")
    elif key == "name":
        v = Text(str(value), style="org.name")
    elif key in ("path", "backup_dir"):
        v = Text(str(value), style="org.path")
    elif isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":"), ensure_ascii=False))
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _number(value: float | None, decimals: int = 0) -> str:
    if value is None:
        return "–"
    return f"{value:,.{decimals}f}".replace(",", " ")


def _metric(value: float | None) -> str:
    if value is None:
        return "–"
    return _number(value, 0 if float(value).is_integer() else 1)


def _percent(value: float | None, *, signed: bool = False) -> str:
    if value is None:
        return "–"
    sign = "+" if signed and value > 0 else ""
    return f"{sign}{value:.1f}%"


def _status_text(text: str, status: str | None) -> Text:
    return Text(text, style=style_for_status(status or "neutral"))


def _status_field(console: Console, key: str, text: str, status: str | None) -> None:
    """Print a key-value field colored by its threshold status."""
    console.print(Text.assemble(Text(f"  {key}: ", style="org.key"), _status_text(text, status)))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    if span_data.get("attrs"):
        extras = [f"{ak}={av}" for ak, av in span_data["attrs"].items()]
        line += f"  ({', '.join(extras)})"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text.assemble(Text("  warning: ", style="org.warning"), warning))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="org.error")
    op = Text(f"  {result.op}", style="org.op")
    console.print(Text.assemble(label, op, f"  [{err.code}]" if err else ""))

    issues = err.detail.get("issues", []) if err else []
    if issues:
        for issue in issues:
            console.print(f"  - {issue}", markup=False)
    else:
        console.print(f"  {msg}", markup=False)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}", markup=False)


# ── Tree renderers ────────────────────────────────────────────────────


def _unit_label(node: dict[str, Any]) -> Text:
    icon = glyph_for(icon_for(node.get("id", ""), node.get("type", "")))
    label = Text(f"{icon} ")
    label.append(str(node.get("name", "")), style="org.name")
    label.append(f"  {node.get('id', '')}", style="org.id")
    label.append(f"  {node.get('costCenter', '')}", style="org.cc")
    label.append(f"  {node.get('type', '')}", style="dim")
    if node.get("manager"):
        label.append(f"  ({node['manager']})", style="dim")
    return label


def _add_branch(tree: Tree, node: dict[str, Any]) -> None:
    for child in node.get("children", []):
        _add_branch(tree.add(_unit_label(child)), child)


def render_org_tree(node: dict[str, Any]) -> Tree:
    """Build a Rich Tree from a unit in its document shape."""
    tree = Tree(_unit_label(node), guide_style="dim")
    _add_branch(tree, node)
    return tree


def _render_tree(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render get_tree / get_unit as a Rich tree."""
    node = result.data.get("tree") or result.data.get("unit") or {}
    console.print(render_org_tree(node))
    console.print(f"\n{result.data.get('count', 0)} units")
    if verbose:
        _render_meta(console, result)


def _render_breadcrumbs(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    path = result.data.get("path", [])
    text = Text()
    for i, step in enumerate(path):
        if i:
            text.append(" › ", style="dim")
        text.append(str(step.get("name", "")), style="org.name" if i == len(path) - 1 else "")
    console.print(text)


# ── Mutation renderers ────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create/update/move results."""
    _status_line(console, result)
    unit = result.data.get("unit", {})
    for key in ("id", "name", "type", "cost_center", "manager"):
        if unit.get(key) is not None:
            _field(console, key, unit[key])
    for key in ("parent_id", "fields_changed"):
        if key in result.data:
            _field(console, key, result.data[key])
    _render_warnings(console, result)
    if verbose:
        _render_meta(console, result)


def _render_delete(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "id", d.get("id", ""))
    _field(console, "name", d.get("name", ""))
    if d.get("reassigned"):
        _field(console, "reassigned_to", d.get("reassigned_to"))
        _field(console, "reassigned", d["reassigned"])
    if verbose:
        _render_meta(console, result)


# ── Query renderers ───────────────────────────────────────────────────


def _render_cost_center(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    cc = d.get("cost_center", "")
    if d.get("available"):
        console.print(Text(f"{cc} is available", style="org.ok"))
        return
    holder = d.get("conflicting_unit") or {}
    line = Text(f"{cc} is taken", style="org.error")
    line.append(f" by {holder.get('name', '?')} ({holder.get('id', '?')})")
    console.print(line)


def _render_types(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    parent = result.data.get("parent_type")
    types = result.data.get("types", [])
    if parent and not types:
        console.print(f"{parent} cannot have child units")
        return
    title = f"Allowed under {parent}" if parent else "Unit types"
    table = Table(title=title, show_header=True, pad_edge=False, expand=False)
    table.add_column("Type", style="org.id", no_wrap=True)
    table.add_column("Label")
    for item in types:
        table.add_row(str(item.get("value", "")), str(item.get("label", "")))
    console.print(table)


def _render_validate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    if d.get("valid"):
        summary = f"  {d.get('units', 0)} units, no issues"
        console.print(Text.assemble(Text("OK", style="org.ok"), summary))
    else:
        console.print(Text(f"{d.get('count', 0)} issues", style="org.error"))
        for issue in d.get("issues", []):
            console.print(f"  - {issue}", markup=False)
    if verbose:
        _render_meta(console, result)


# ── Backup renderers ──────────────────────────────────────────────────


def _render_backups(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(f"No backups in {result.data.get('backup_dir', '')}")
        return
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Backup", no_wrap=True)
    table.add_column("Kind")
    for item in items:
        table.add_row(str(item["name"]), "manual" if item.get("manual") else "automatic")
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} backups")


def _render_backup_action(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    for key in ("name", "path", "units"):
        if key in result.data:
            _field(console, key, result.data[key])
    _render_warnings(console, result)


# ── Dashboard renderers ───────────────────────────────────────────────


def _render_summary(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    unit = d.get("unit", {})
    statuses: dict[str, str] = d.get("statuses", {})
    title = f"{unit.get('name', '?')} ({unit.get('cost_center', '')})"
    if d.get("year"):
        title += f" — {d['year']}"
    if d.get("is_aggregated"):
        title += f" — {d.get('scope_size', 0)} cost centers"

    table = Table(title=title, show_header=True, pad_edge=False, expand=False)
    table.add_column("")
    table.add_column("Budget", justify="right")
    table.add_column("Utfall", justify="right")
    table.add_column("Avvikelse", justify="right")
    for label, key in (("Intäkter", "revenue"), ("Kostnader", "costs"), ("Resultat", "result")):
        row = d.get(key, {})
        variance = _percent(row.get("variance"), signed=True)
        table.add_row(
            label,
            _number(row.get("budget")),
            _number(row.get("utfall")),
            _status_text(variance, statuses.get("kostnadsavvikelse"))
            if key == "costs"
            else Text(variance),
        )
    console.print(table)

    figures = d.get("figures", {})
    personal = figures.get("personal", {})
    console.print()
    _field(console, "antal_anstallda", _number(personal.get("antal_anstallda")))
    for key in ("personalomsattning", "sjukfranvaro"):
        _status_field(console, key, _percent(personal.get(key)), statuses.get(key))
    for key, value in figures.get("produktion", {}).items():
        _status_field(console, key, _metric(value), statuses.get(key))
    if d.get("missing_records"):
        _field(console, "missing_records", d["missing_records"])
    if verbose:
        _render_meta(console, result)


def _render_monthly(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    unit = d.get("unit", {})
    table = Table(
        title=f"{unit.get('name', '?')} — {d.get('track', '')}",
        show_header=True,
        pad_edge=False,
        expand=False,
    )
    table.add_column("Månad")
    table.add_column("Resultat", justify="right")
    for row in d.get("months", []):
        value = row.get("result", 0)
        table.add_row(row.get("month", ""), Text(_number(value), style="red" if value < 0 else ""))
    table.add_row(Text("Totalt", style="bold"), Text(_number(d.get("total")), style="bold"))
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_children(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    rows = result.data.get("children", [])
    if not rows:
        console.print(f"{result.data.get('unit', {}).get('name', '?')} has no child units")
        return
    show_satisfaction = any(row.get("kundnojdhet") is not None for row in rows)

    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Enhet", style="org.name")
    table.add_column("KS", style="org.cc")
    table.add_column("Anställda", justify="right")
    table.add_column("Kostnader", justify="right")
    table.add_column("Avvikelse", justify="right")
    table.add_column("Pers.oms.", justify="right")
    table.add_column("Sjukfr.", justify="right")
    if show_satisfaction:
        table.add_column("Kundnöjdhet", justify="right")

    for row in rows:
        unit = row.get("unit", {})
        statuses = row.get("statuses", {})
        costs = row.get("costs", {})
        cells: list[Any] = [
            str(unit.get("name", "")),
            str(unit.get("cost_center", "")),
            _number(row.get("headcount")),
            _number(costs.get("utfall")),
            _status_text(
                _percent(costs.get("variance"), signed=True), statuses.get("kostnadsavvikelse")
            ),
            _status_text(_percent(row.get("personalomsattning")), statuses.get("personalomsattning")),
            _status_text(_percent(row.get("sjukfranvaro")), statuses.get("sjukfranvaro")),
        ]
        if show_satisfaction:
            value = row.get("kundnojdhet")
            cells.append(
                _status_text("–" if value is None else f"{value:g}%", statuses.get("kundnojdhet"))
            )
        table.add_row(*cells)
    console.print(table)
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    _render_warnings(console, result)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Tree
    "get_tree": _render_tree,
    "get_unit": _render_tree,
    "get_breadcrumbs": _render_breadcrumbs,
    "check_cost_center": _render_cost_center,
    "list_types": _render_types,
    "list_allowed_child_types": _render_types,
    "validate": _render_validate,
    # Mutations
    "create_unit": _render_mutation,
    "update_unit": _render_mutation,
    "move_unit": _render_mutation,
    "delete_unit": _render_delete,
    # Backups
    "create_snapshot": _render_backup_action,
    "list_backups": _render_backups,
    "restore": _render_backup_action,
    # Dashboard
    "summary": _render_summary,
    "monthly": _render_monthly,
    "compare_children": _render_children,
}
