"""structlog configuration for storyweb.

Both output modes write to stderr so stdout stays clean for results:
- Human (default): console lines, coloured only when stderr is a TTY
- JSON (--log-json): one structured JSON object per line

Stdlib loggers under ``storyweb.*`` go through the same processor chain,
so engine modules log with plain ``logging.getLogger(__name__)`` and still
pick up whatever :func:`input_context` has bound.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

import structlog

APP_LOGGER = "storyweb"


def _shared_processors() -> list[structlog.types.Processor]:
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


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Route structlog and the ``storyweb`` stdlib loggers to stderr.

    Args:
        verbose: DEBUG for storyweb loggers (build counts, simulation
            lifecycle, selections); WARNING otherwise.
        log_json: Render JSON lines instead of console lines.
    """
    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)
    logging.getLogger(APP_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)


@contextmanager
def input_context(path: Path, op: str) -> Generator[None]:
    """Tag every log line emitted inside the block with the input file and op."""
    with structlog.contextvars.bound_contextvars(input=str(path), op=op):
        yield
