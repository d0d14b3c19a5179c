"""structlog setup shared by every orgctl command.

All log output goes to stderr so stdout carries only results: a console
renderer for people, JSON lines under ``--log-json``. The stdlib loggers
used by storage and services pass through the same processors, and every
event is tagged with the organization document it concerns.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import Processor

_PRE_CHAIN: tuple[Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
)


def _renderer(log_json: bool) -> Processor:
    if log_json:
        # unit names are Swedish; keep å/ä/ö readable in JSON lines
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    document: str | None = None,
) -> None:
    """Route structlog and stdlib logging to a single stderr handler.

    ``orgctl.*`` logs at DEBUG with ``--verbose`` and WARNING otherwise;
    other libraries stay at WARNING. *document* is bound as a context
    variable so every line names the organization file. Safe to call
    repeatedly; the previous handler and bindings are replaced.
    """
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=list(_PRE_CHAIN),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)
    logging.getLogger("orgctl").setLevel(logging.DEBUG if verbose else logging.WARNING)

    structlog.contextvars.clear_contextvars()
    if document is not None:
        structlog.contextvars.bind_contextvars(document=document)
