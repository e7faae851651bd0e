# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structured logging using structlog.

Modules log through ``logging.getLogger(__name__)`` with %-style arguments.
Every stdlib record goes through one structlog processor chain, so request
context bound with bind_context() appears on each line. Output is a colored
console in development or debug, JSON otherwise.

Example:
    >>> setup_logging(get_settings())
    >>> bind_context(request_id="abc123")
    >>> logging.getLogger(__name__).info("Enrolled student %s", student_id)
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from school_registry.core.config.settings import Settings

_NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "sqlalchemy", "aiosqlite", "asyncio")


def _renderer(settings: "Settings", chain: list[Processor]) -> Processor:
    if settings.is_development or settings.debug:
        return structlog.dev.ConsoleRenderer(colors=True)
    chain.append(structlog.processors.format_exc_info)
    return structlog.processors.JSONRenderer()


def setup_logging(settings: "Settings") -> None:
    """Configure structlog and route stdlib logging through it.

    Safe to call more than once; the root handler is replaced each time.

    Args:
        settings: Provides log_level, environment and debug.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    renderer = _renderer(settings, chain)

    structlog.configure(
        processors=[*chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_context(**values: object) -> None:
    """Attach key/value pairs to every log line in the current context."""
    structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    """Drop everything bound with bind_context()."""
    structlog.contextvars.clear_contextvars()
