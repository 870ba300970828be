"""
Leyline logging - structured logging for the CLI and library.

Library modules log events; only ``leyline.cli`` prints user-facing text.
Logs go to stderr so ``--json`` output on stdout stays machine readable.

Manifesto:
    - **Structured:** key/value events (``logger.info("sync_completed", copied=3)``)
    - **Quiet by default:** WARNING level unless ``--verbose`` or ``LEYLINE_DEBUG``
    - **Machine friendly:** ``LEYLINE_STRUCTURED_LOGGING=true`` switches to JSON lines

Architecture:
    ::

        configure_logging(level="WARNING", json_format=False)
              ↓
        processors:
          1. merge_contextvars
          2. add_log_level
          3. add_logger_name
          4. TimeStamper(iso)
          5. _add_service_metadata
          6. JSONRenderer | ConsoleRenderer
              ↓
        _NamedPrintLoggerFactory(file=sys.stderr)

Examples:
    >>> from leyline.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG")
    >>> logger = get_logger(__name__)
    >>> logger.debug("git_command", command="git fetch origin master")

Tags:
    logging, structlog, observability, leyline
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_SERVICE_NAME = "leyline"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service", _SERVICE_NAME)
    return event_dict


def add_logger_name(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add the name given to :func:`get_logger` as ``logger``."""
    name = getattr(logger, "name", None)
    if name:
        event_dict.setdefault("logger", name)
    return event_dict


class _NamedPrintLogger(structlog.PrintLogger):
    def __init__(self, file: TextIO | None = None, name: str | None = None):
        super().__init__(file)
        self.name = name


class _NamedPrintLoggerFactory:
    """Like ``structlog.PrintLoggerFactory`` but keeps the logger name."""

    def __init__(self, file: TextIO | None = None):
        self._file = file

    def __call__(self, *args: Any) -> _NamedPrintLogger:
        name = args[0] if args and isinstance(args[0], str) else None
        return _NamedPrintLogger(self._file, name=name)


def configure_logging(
    level: str = "WARNING",
    json_format: bool = False,
    service: str = "leyline",
) -> None:
    """Configure structured logging for the process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON lines, False for human console output
        service: Service name included in every event
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _add_service_metadata,
    ]
    if json_format:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=_NamedPrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger bound to ``name``."""
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound logging context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(command="sync", target="docs/leyline"):
            logger.info("sync_started")
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "add_logger_name",
    "LogContext",
]
