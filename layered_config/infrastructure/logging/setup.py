"""
Logging setup and configuration utilities.

Library modules log through the standard ``logging`` module. Applications that
want loguru output call ``setup_logging``, which installs loguru sinks and
routes standard logging records into loguru.
"""

import inspect
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from loguru import logger as loguru_logger

from ..config.models import LoggingConfig

LIBRARY_LOGGER = "layered_config"

# loguru levels without a standard logging counterpart
STDLIB_LEVELS = {"TRACE": 5, "SUCCESS": 25}


class InterceptHandler(logging.Handler):
    """Forward standard logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Any = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller outside the logging module so loguru reports the right origin
        frame = inspect.currentframe()
        depth = 0
        while frame is not None and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        loguru_logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Setup loguru logging for the configuration library.

    Args:
        config: Logging configuration (defaults if omitted)
    """
    config = config or LoggingConfig()

    # Remove default handler
    loguru_logger.remove()

    # Console logging
    if config.console_enabled:
        loguru_logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                   "<level>{level: <8}</level> | "
                   "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
                   "<level>{message}</level>",
            level=config.level,
            colorize=True,
            backtrace=True,
            diagnose=False
        )

    # File logging
    if config.file_enabled:
        log_dir = Path(config.log_directory)
        log_dir.mkdir(parents=True, exist_ok=True)

        loguru_logger.add(
            log_dir / config.log_file,
            format=config.format,
            level=config.level,
            rotation=config.max_file_size,
            retention=config.backup_count,
            compression="zip",
            backtrace=True,
            diagnose=False
        )

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    library_logger.handlers = [
        handler for handler in library_logger.handlers
        if not isinstance(handler, InterceptHandler)
    ]
    library_logger.addHandler(InterceptHandler())
    library_logger.setLevel(STDLIB_LEVELS.get(config.level, config.level))
    library_logger.propagate = False
