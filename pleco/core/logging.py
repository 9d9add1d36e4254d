"""
Logging configuration for Pleco.

All output goes through structlog. A crawl run binds its ``crawl_id`` into
the structlog context variables so every line emitted during that run
(orchestrator, backends, seed adapter) carries the same id.
"""

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import Processor


def new_crawl_id() -> str:
    """Short random id for one crawl run."""
    return str(uuid.uuid4())[:8]


@contextmanager
def crawl_context(crawl_id: str, **fields: Any) -> Iterator[None]:
    """Bind crawl-scoped fields for the duration of a run."""
    with structlog.contextvars.bound_contextvars(crawl_id=crawl_id, **fields):
        yield


def configure_logging(json_logs: bool = False, log_level: str = "INFO") -> None:
    """
    Configure structlog for console or JSON output.

    Args:
        json_logs: If True, output JSON format (for log shipping).
                   If False, output colored console format.
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # httpx logs every request at INFO through stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=max(level, logging.WARNING),
    )
