"""Command: list unit types."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgctl.commands._base import OrgCommand

if TYPE_CHECKING:
    from orgctl.commands._context import AppContext


@click.command(
    cls=OrgCommand,
    examples="""\
  orgctl types
  orgctl types --parent division""",
)
@click.option("--parent", "parent_type", default=None, help="Only types allowed under this type.")
@click.pass_obj
def types(app: AppContext, parent_type: str | None) -> None:
    """List unit types, or the child types a parent type accepts."""
    from orgctl.services.organization import OrganizationService

    svc = OrganizationService(app.workspace)
    if parent_type is None:
        app.emit(svc.list_types())
    else:
        app.emit(svc.list_allowed_child_types(parent_type))
