"""Command group: show, create, update, delete and move units."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from orgctl.commands._base import OrgGroup
from orgctl.services.organization import OrganizationService

if TYPE_CHECKING:
    from orgctl.commands._context import AppContext

_UNIT_EXAMPLES = """\
  orgctl unit show it-division
  orgctl unit path it-support
  orgctl unit create operations --id ops-1 --name "Ops One" --type enhet --cost-center 0003
  orgctl unit update ops-1 --manager "Anna Berg"
  orgctl unit delete ops-1
  orgctl unit delete operations --reassign-to it-division
  orgctl unit move ops-1 it-division"""


@click.group(cls=OrgGroup, examples=_UNIT_EXAMPLES)
@click.pass_obj
def unit(app: AppContext) -> None:
    """Inspect and edit organizational units."""


@unit.command(
    examples="""\
  orgctl unit show it-division
  orgctl --json unit show {root}"""
)
@click.argument("unit_id")
@click.pass_obj
def show(app: AppContext, unit_id: str) -> None:
    """Show UNIT_ID with its subtree."""
    app.emit(OrganizationService(app.workspace).get_unit(unit_id))


@unit.command(
    examples="""\
  orgctl unit path it-support"""
)
@click.argument("unit_id")
@click.pass_obj
def path(app: AppContext, unit_id: str) -> None:
    """Show the path from the top level down to UNIT_ID."""
    app.emit(OrganizationService(app.workspace).get_breadcrumbs(unit_id))


@unit.command(
    examples="""\
  orgctl unit create operations --id ops-1 --name "Ops One" --type enhet --cost-center 0003
  orgctl unit create it-division --id it-sakerhet --name "IT-säkerhet" \\
      --type enhet --cost-center 0420 --manager "Eva Lind\""""
)
@click.argument("parent_id")
@click.option("--id", "unit_id", required=True, help="Permanent unit ID (a-z, 0-9, -).")
@click.option("--name", required=True, help="Display name.")
@click.option("--type", "unit_type", required=True, help="Unit type.")
@click.option("--cost-center", required=True, help="Four-digit cost center.")
@click.option("--manager", default=None, help="Manager name.")
@click.pass_obj
def create(
    app: AppContext,
    parent_id: str,
    unit_id: str,
    name: str,
    unit_type: str,
    cost_center: str,
    manager: str | None,
) -> None:
    """Create a unit under PARENT_ID."""
    fields: dict[str, Any] = {
        "id": unit_id,
        "name": name,
        "type": unit_type,
        "cost_center": cost_center,
    }
    if manager is not None:
        fields["manager"] = manager
    app.emit(OrganizationService(app.workspace).create_unit(parent_id, fields))


@unit.command(
    examples="""\
  orgctl unit update ops-1 --name "Operations One"
  orgctl unit update ops-1 --cost-center 0421 --type sektion
  orgctl unit update ops-1 --clear-manager"""
)
@click.argument("unit_id")
@click.option("--name", default=None, help="New display name.")
@click.option("--type", "unit_type", default=None, help="New unit type.")
@click.option("--cost-center", default=None, help="New four-digit cost center.")
@click.option("--manager", default=None, help="New manager name.")
@click.option("--clear-manager", is_flag=True, help="Remove the manager.")
@click.pass_obj
def update(
    app: AppContext,
    unit_id: str,
    name: str | None,
    unit_type: str | None,
    cost_center: str | None,
    manager: str | None,
    clear_manager: bool,
) -> None:
    """Update fields of UNIT_ID. The ID itself never changes."""
    if clear_manager and manager is not None:
        raise click.UsageError("--manager and --clear-manager are mutually exclusive")

    changes: dict[str, Any] = {}
    if name is not None:
        changes["name"] = name
    if unit_type is not None:
        changes["type"] = unit_type
    if cost_center is not None:
        changes["cost_center"] = cost_center
    if manager is not None:
        changes["manager"] = manager
    if clear_manager:
        changes["manager"] = ""

    if not changes:
        click.echo("No changes specified. Use --help for options.", err=True)
        raise SystemExit(1)

    app.emit(OrganizationService(app.workspace).update_unit(unit_id, changes))


@unit.command(
    examples="""\
  orgctl unit delete ops-1
  orgctl unit delete operations --reassign-to it-division"""
)
@click.argument("unit_id")
@click.option(
    "--reassign-to",
    default=None,
    help="Unit that receives the children of the deleted unit.",
)
@click.pass_obj
def delete(app: AppContext, unit_id: str, reassign_to: str | None) -> None:
    """Delete UNIT_ID. Units with children need --reassign-to."""
    app.emit(OrganizationService(app.workspace).delete_unit(unit_id, reassign_to))


@unit.command(
    examples="""\
  orgctl unit move ops-1 it-division"""
)
@click.argument("unit_id")
@click.argument("new_parent_id")
@click.pass_obj
def move(app: AppContext, unit_id: str, new_parent_id: str) -> None:
    """Move UNIT_ID and its subtree under NEW_PARENT_ID."""
    app.emit(OrganizationService(app.workspace).move_unit(unit_id, new_parent_id))
