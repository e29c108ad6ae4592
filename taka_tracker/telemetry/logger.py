"""
Structured Logging

Every command the tracker executes is logged as a structured event:
- transaction and budget mutations (with ids and categories, never notes)
- access gate transitions (never the PIN itself)
- storage failures, which put the user's data at risk

Events go through structlog into the standard library logging tree, so the
host application decides where they end up.
"""

import logging
import sys

import structlog


def configure_logging(debug: bool = False) -> None:
    """
    Configure structlog and the stdlib root handler.

    Safe to call more than once; the last call wins.
    """
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **initial_values) -> structlog.stdlib.BoundLogger:
    """Get a logger bound to a component name."""
    return structlog.get_logger(name, component=name, **initial_values)
