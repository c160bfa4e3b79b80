"""Structured logging configuration."""

import logging
import sys
from typing import TextIO

import structlog

from fetch_request.settings import get_settings


def configure_logging(
    level: int | str | None = None,
    output: TextIO = sys.stderr,
    json_format: bool | None = None,
) -> None:
    """Configure structured logging for the fetch-request layer.

    Sets up structlog with timestamps, log levels and contextvar binding.
    Unset arguments fall back to FETCH_REQUEST_LOG_LEVEL and
    FETCH_REQUEST_LOG_JSON.

    Args:
        level: Logging level, numeric or by name.
        output: Output stream (default: stderr).
        json_format: Whether to render JSON instead of console output.
    """
    settings = get_settings()
    if level is None:
        level = settings.log_level
    if isinstance(level, str):
        level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    if json_format is None:
        json_format = settings.log_json

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

