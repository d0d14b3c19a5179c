"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy Workspace initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from orgctl.config.settings import OrgSettings
    from orgctl.infrastructure.workspace import Workspace
    from orgctl.services.result import ServiceResult

EXIT_CLIENT_ERROR = 1
EXIT_INTERNAL_ERROR = 2


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The workspace is created on first use so ``--help`` and ``--version``
    never touch the data directory.
    """

    def __init__(self, settings: OrgSettings) -> None:
        self.settings = settings
        self._workspace: Workspace | None = None

        from orgctl.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            document=settings.document_path.name,
        )

        if settings.verbose:
            from orgctl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def workspace(self) -> Workspace:
        """The workspace (created lazily on first access)."""
        if self._workspace is None:
            from orgctl.infrastructure.workspace import Workspace

            self._workspace = Workspace(self.settings)
        return self._workspace

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout, normal return. With ``--quiet`` warnings go to
          stderr so they don't pollute piped output.
        * Client failure (validation, not found): stderr, exit 1.
        * Internal failure (persistence, conflict): stderr, exit 2.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output and settings.quiet:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
            return

        click.echo(output, err=True)
        if result.error is not None and result.error.is_client_error:
            raise SystemExit(EXIT_CLIENT_ERROR)
        raise SystemExit(EXIT_INTERNAL_ERROR)
