"""structlog configuration for barrowctl.

Library modules log through stdlib ``logging.getLogger(__name__)``; this
module routes those records, and any structlog loggers, through one
stderr handler:

- Human (default): console renderer, colored only on a TTY
- JSON (``--log-json``): one JSON object per line

Only the ``barrowctl`` logger tree drops to DEBUG under ``--verbose``;
third-party loggers stay at WARNING.
"""

from __future__ import annotations

import logging
import sys

import structlog

BARROW_LOGGER = "barrowctl"


def _shared_processors() -> list[structlog.types.Processor]:
    """Processors applied to both structlog and foreign stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _stderr_handler(formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    return handler


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the stderr handler and set levels.

    Safe to call repeatedly; each call replaces the root handler rather
    than stacking another one.

    Args:
        verbose: DEBUG for the ``barrowctl`` loggers, WARNING otherwise.
        log_json: JSON lines instead of the console renderer.
    """
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(log_json),
        ],
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_stderr_handler(formatter))
    root.setLevel(logging.WARNING)

    logging.getLogger(BARROW_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
