"""Subcommand modules for orgctl.

Provides register_commands() which uses deferred imports to keep
``orgctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from orgctl.commands.backup import backup
    from orgctl.commands.dashboard import dashboard
    from orgctl.commands.unit import unit

    cli.add_command(unit)
    cli.add_command(backup)
    cli.add_command(dashboard)

    # --- Standalone commands ---
    from orgctl.commands.check import check
    from orgctl.commands.cost_center import cost_center
    from orgctl.commands.tree import tree
    from orgctl.commands.types_cmd import types

    cli.add_command(tree)
    cli.add_command(cost_center)
    cli.add_command(types)
    cli.add_command(check)
