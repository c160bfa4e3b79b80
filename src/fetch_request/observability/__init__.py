"""Observability module for logging."""

from fetch_request.observability.logging import configure_logging


__all__ = [
    "configure_logging",
]
