"""Command: full-tree validation of the stored organization."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgctl.commands._base import OrgCommand

if TYPE_CHECKING:
    from orgctl.commands._context import AppContext


@click.command(
    cls=OrgCommand,
    examples="""\
  orgctl check
  orgctl --json check""",
)
@click.pass_obj
def check(app: AppContext) -> None:
    """Validate the stored organization; exits 1 when issues are found."""
    from orgctl.services.organization import OrganizationService

    result = OrganizationService(app.workspace).validate()
    app.emit(result)
    if not result.data.get("valid", False):
        raise SystemExit(1)
