"""Command group: snapshots of the organization document."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgctl.commands._base import OrgGroup
from orgctl.services.backup import BackupService

if TYPE_CHECKING:
    from orgctl.commands._context import AppContext

_BACKUP_EXAMPLES = """\
  orgctl backup create
  orgctl backup list
  orgctl backup restore organization.20261017T101500000000.json"""


@click.group(cls=OrgGroup, examples=_BACKUP_EXAMPLES)
@click.pass_obj
def backup(app: AppContext) -> None:
    """Create, list and restore backups."""


@backup.command(examples="  orgctl backup create")
@click.pass_obj
def create(app: AppContext) -> None:
    """Take a manual snapshot (never pruned)."""
    app.emit(BackupService(app.workspace).create_snapshot())


@backup.command(
    "list",
    examples="""\
  orgctl backup list
  orgctl -q backup list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List backups, newest first."""
    app.emit(BackupService(app.workspace).list_backups())


@backup.command(examples="  orgctl backup restore organization.20261017T101500000000.json")
@click.argument("name")
@click.pass_obj
def restore(app: AppContext, name: str) -> None:
    """Restore backup NAME. The current document is snapshotted first."""
    app.emit(BackupService(app.workspace).restore(name))
