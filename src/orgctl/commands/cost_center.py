"""Command: cost center availability check."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgctl.commands._base import OrgCommand

if TYPE_CHECKING:
    from orgctl.commands._context import AppContext


@click.command(
    "cost-center",
    cls=OrgCommand,
    examples="""\
  orgctl cost-center 0420
  orgctl --json cost-center 0003""",
)
@click.argument("cost_center")
@click.pass_obj
def cost_center(app: AppContext, cost_center: str) -> None:
    """Check whether COST_CENTER is free to use."""
    from orgctl.services.organization import OrganizationService

    app.emit(OrganizationService(app.workspace).check_cost_center(cost_center))
