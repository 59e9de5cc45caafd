"""Structured logging for recording analysis.

Provides:
- structlog setup driven by AnalysisSettings or explicit arguments
- Scoped context (recording name, command) bound to every log line
- Timed operation start/end logging
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Optional

import structlog

if TYPE_CHECKING:
    from ..config import AnalysisSettings


def _shared_processors(include_timestamp: bool) -> list:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
    ]
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    return processors


def configure_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    include_timestamp: bool = True,
    settings: Optional["AnalysisSettings"] = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Explicit arguments win over ``settings``; without either, INFO level
    console output is used. Output goes to stderr so JSON printed by the
    CLI on stdout stays parseable.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        json_format: Render log lines as JSON
        include_timestamp: Add an ISO timestamp to every line
        settings: Settings supplying defaults for level and format

    Raises:
        AttributeError: If ``level`` is not a logging level name
    """
    if level is None:
        level = settings.log_level if settings else "INFO"
    if json_format is None:
        json_format = settings.log_json if settings else False

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[*_shared_processors(include_timestamp), renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None, **context) -> structlog.BoundLogger:
    """Return a structlog logger, optionally with context already bound."""
    logger = structlog.get_logger(name)
    return logger.bind(**context) if context else logger


class LogContext:
    """Bind context variables for the duration of a block.

    Usage:
        with LogContext(recording="swap-flow", command="intents"):
            analyze_recording(recording)  # every line carries both keys
    """

    def __init__(self, **context):
        self.context = context
        self._bound = None

    def __enter__(self) -> "LogContext":
        self._bound = structlog.contextvars.bound_contextvars(**self.context)
        self._bound.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._bound.__exit__(exc_type, exc_val, exc_tb)
        self._bound = None


@contextmanager
def log_operation(
    operation: str,
    logger: Optional[structlog.BoundLogger] = None,
    **context,
):
    """Log the start, end and duration of an operation.

    Yields a dict the caller can fill with result details; it is logged on
    completion together with ``success`` and ``duration_ms``. Failures are
    logged at error level and re-raised.

    Example:
        with log_operation("translate_recording", recording="swap") as op:
            plan = build_intent_steps(analysis)
            op["intent_steps"] = len(plan)
    """
    log = (logger or get_logger()).bind(operation=operation, **context)
    result = {"success": False, "error": None}
    started = time.perf_counter()

    log.debug(f"{operation} started")
    try:
        yield result
    except Exception as e:
        result["error"] = str(e)
        result["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
        log.error(f"{operation} failed", **result)
        raise

    result["success"] = True
    result["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
    log.debug(f"{operation} completed", **result)
