"""Structured logging configuration."""

import logging

import structlog


def configure_logging(level: str = "info") -> None:
    """Configure structlog to render human-readable lines at the given level."""
    # uvicorn's "trace" sits below DEBUG; structlog has no such level
    if level == "trace":
        level = "debug"
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )
