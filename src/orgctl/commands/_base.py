"""Click base classes for orgctl commands.

Commands and groups take an ``examples`` text printed by ``--examples``
so ``--help`` stays short. ``{root}`` in the text becomes the configured
top-level unit id, since that id differs between organizations.
"""

from __future__ import annotations

from typing import Any

import click

from orgctl.commands._context import AppContext
from orgctl.config.models import OrganizationConfig


def _root_id(ctx: click.Context) -> str:
    app = ctx.find_object(AppContext)
    if app is None:
        return OrganizationConfig().root_id
    return app.settings.organization.root_id


def _examples_option(examples: str) -> click.Option:
    def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples.format(root=_root_id(ctx)))
        ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=show,
        help="Show usage examples.",
    )


class OrgCommand(click.Command):
    """Command with an optional ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples))


class OrgGroup(click.Group):
    """Group whose subcommands default to :class:`OrgCommand`."""

    command_class = OrgCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples))
