"""
Loguru configuration.

Wiring modules log through loguru directly. Library modules (cache, stores,
services) use ``logging.getLogger(__name__)`` and are routed into the same
sinks by ``InterceptHandler``.
"""

import logging
import os
import sys
from typing import Any, Dict

from loguru import logger

from shorturl.core.config import settings

# Third-party loggers that install their own handlers
ROUTED_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi")


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru, keeping the original call site."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so {name}:{line} points at the caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def file_sink_options() -> Dict[str, Any]:
    """Options for the rotating file sink: JSON lines or the text format."""
    options: Dict[str, Any] = {
        "level": settings.LOG_LEVEL.upper(),
        "rotation": settings.LOG_ROTATION,
        "retention": settings.LOG_RETENTION,
        "compression": "gz",
    }
    if settings.LOG_JSON:
        options["serialize"] = True
    else:
        options["format"] = settings.LOG_FORMAT
    return options


def setup_logging():
    """
    Install the loguru sinks and route stdlib logging into them.

    A stderr sink is added only in debug mode; the file sink is always on.
    """
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    logger.remove()

    if settings.DEBUG:
        logger.add(
            sys.stderr,
            level=settings.LOG_LEVEL.upper(),
            format=settings.LOG_FORMAT,
            backtrace=True,
            diagnose=True,
        )
    logger.add(os.path.join(settings.LOG_DIR, settings.LOG_FILENAME), **file_sink_options())

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ROUTED_LOGGERS:
        routed = logging.getLogger(name)
        routed.handlers = [InterceptHandler()]
        routed.propagate = False

    return logger
