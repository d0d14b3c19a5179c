"""Command: show the organization tree."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgctl.commands._base import OrgCommand

if TYPE_CHECKING:
    from orgctl.commands._context import AppContext


@click.command(
    cls=OrgCommand,
    examples="""\
  orgctl tree
  orgctl tree it-division
  orgctl --json tree""",
)
@click.argument("unit_id", required=False)
@click.pass_obj
def tree(app: AppContext, unit_id: str | None) -> None:
    """Show the whole tree, or the subtree under UNIT_ID."""
    from orgctl.services.organization import OrganizationService

    svc = OrganizationService(app.workspace)
    app.emit(svc.get_unit(unit_id) if unit_id else svc.get_tree())
