"""structlog setup for cpg-reducer.

The reducer's modules log through the stdlib ``logging`` API; a single
stderr handler renders those records with structlog, either as console
lines or (``--log-json``) as one JSON object per line. stdout is left to
the emitted documents.
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route all log records to stderr through structlog.

    ``verbose`` lowers the ``cpg_reducer`` logger to DEBUG; everything
    else stays at WARNING. Safe to call more than once.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    # level, logger and timestamp on every record, stdlib or structlog
    shared_processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("cpg_reducer").setLevel(level)
    # pydot's pyparsing grammar logs every parse step at DEBUG
    logging.getLogger("pydot").setLevel(logging.WARNING)
