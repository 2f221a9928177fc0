"""
structlog setup for the portfolio API.

Production deployments (ENVIRONMENT=production or a Railway container) get one
JSON object per line. Local runs get the console renderer, uncolored under
pytest so captured output stays readable.

    logger = get_logger(__name__)
    logger.info("Contact created", contact_id=12)
"""

import logging
import os
import sys
from typing import Any

import structlog

IS_TEST = "pytest" in sys.modules
IS_PRODUCTION = not IS_TEST and (
    os.getenv("RAILWAY_ENVIRONMENT") is not None
    or os.getenv("ENVIRONMENT", "production").lower() == "production"
)

QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "sqlalchemy.engine")


def configure_logging() -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if IS_PRODUCTION:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=not IS_TEST))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # uvicorn and sqlalchemy log through stdlib logging
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=logging.INFO)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


configure_logging()
