"""Structured JSON logging for every pipeline component, built on structlog."""

import logging
import sys

import structlog

_configured_level: int | None = None


def _setup(level: int) -> None:
    global _configured_level
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )
    _configured_level = level


def configure_logging(component: str, level: str = "INFO") -> structlog.typing.FilteringBoundLogger:
    """Return a logger bound to ``component``, configuring structlog on first use.

    Components created later with the same level share the existing
    configuration instead of rebuilding the processor chain.
    """
    numeric = getattr(logging, level.upper(), logging.INFO)
    if _configured_level != numeric:
        _setup(numeric)
    return structlog.get_logger(component=component)
