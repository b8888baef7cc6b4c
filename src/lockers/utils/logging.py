"""Logging configuration for the Lockers domain."""

import logging
import os

import structlog


def configure_logging() -> None:
    """Render structlog events as JSON at ``LOG_LEVEL`` (default INFO)."""
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    return structlog.get_logger(name)


# Suppress noisy library loggers
logging.getLogger("protean").setLevel(logging.WARNING)
