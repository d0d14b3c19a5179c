"""Command group: aggregated budget and headcount figures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgctl.commands._base import OrgGroup
from orgctl.services.dashboard import DashboardService

if TYPE_CHECKING:
    from orgctl.commands._context import AppContext

_DASHBOARD_EXAMPLES = """\
  orgctl dashboard summary
  orgctl dashboard summary it-division
  orgctl dashboard monthly it-division --track budget
  orgctl dashboard children {root}"""


@click.group(cls=OrgGroup, examples=_DASHBOARD_EXAMPLES)
@click.pass_obj
def dashboard(app: AppContext) -> None:
    """Roll up cost-center figures through the tree."""


@dashboard.command(
    examples="""\
  orgctl dashboard summary
  orgctl --json dashboard summary it-support"""
)
@click.argument("unit_id", required=False)
@click.pass_obj
def summary(app: AppContext, unit_id: str | None) -> None:
    """Headline figures for UNIT_ID (the top level when omitted)."""
    app.emit(DashboardService(app.workspace).summary(unit_id))


@dashboard.command(
    examples="""\
  orgctl dashboard monthly
  orgctl dashboard monthly it-division --track budget"""
)
@click.argument("unit_id", required=False)
@click.option(
    "--track",
    type=click.Choice(["budget", "utfall"]),
    default="utfall",
    help="Budget or actual figures.",
)
@click.pass_obj
def monthly(app: AppContext, unit_id: str | None, track: str) -> None:
    """Month-by-month result for UNIT_ID."""
    app.emit(DashboardService(app.workspace).monthly(unit_id, track))


@dashboard.command(
    examples="""\
  orgctl dashboard children
  orgctl dashboard children it-division"""
)
@click.argument("unit_id", required=False)
@click.pass_obj
def children(app: AppContext, unit_id: str | None) -> None:
    """Compare the direct children of UNIT_ID, largest headcount first."""
    app.emit(DashboardService(app.workspace).compare_children(unit_id))
