"""
structlog configuration for applications embedding the terrain library.

The library only ever calls ``structlog.get_logger()``; entry points such
as the demo script call :func:`configure_logging` once at startup.
"""

import logging
from typing import Optional

import structlog

from .config import TerrainSettings, settings as default_settings


def configure_logging(settings: Optional[TerrainSettings] = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        settings: Settings to read log level and format from
    """
    settings = settings or default_settings
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)

    if settings.log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
