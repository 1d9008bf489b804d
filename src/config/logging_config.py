"""Logging configuration.

Modules log through the standard library (``logging.getLogger(__name__)``).
Records are rendered by structlog so every line carries the level, an ISO
timestamp, the logger name and whatever request context has been bound with
``structlog.contextvars`` (the request ID in particular).
"""

import logging
import sys

import structlog

from src.config.settings import settings


def configure_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """Install a structlog-rendered handler on the root logger.

    Args:
        log_level: Level name, defaults to ``settings.log_level``
        log_format: ``json`` or ``console``, defaults to ``settings.log_format``

    """
    level = (log_level or settings.log_level).upper()
    fmt = (log_format or settings.log_format).lower()

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.ExtraAdder(),
    ]

    if fmt == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.INFO))

    # Uvicorn installs its own access log; ours comes from RequestContextMiddleware
    logging.getLogger("uvicorn.access").disabled = True
