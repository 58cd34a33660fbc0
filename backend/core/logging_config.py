"""
Loguru logging configuration.

Features:
- Console logging with colors for development
- Structured JSON logging for production (or LOG_FORMAT=json)
- Correlation ID in all log messages
- Optional rotating log file
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from core.correlation import get_correlation_id

if TYPE_CHECKING:
    from loguru import Record


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[correlation_id]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def correlation_filter(record: "Record") -> bool:
    """
    Add correlation ID to log record.

    Args:
        record: Loguru log record.

    Returns:
        Always True (filter never drops messages).
    """
    record["extra"]["correlation_id"] = get_correlation_id() or "-"
    return True


def configure_logging(
    environment: str = "development",
    level: str = "INFO",
    log_format: str = "pretty",
    log_file: str = "",
) -> None:
    """
    Configure Loguru for the application.

    Args:
        environment: Production always logs JSON regardless of ``log_format``.
        level: Minimum level for every sink.
        log_format: "pretty" for colored console output, "json" for one JSON
            object per line.
        log_file: When set, also write to this file with rotation.
    """
    # Remove default handler
    logger.remove()

    serialize = log_format == "json" or environment == "production"

    if serialize:
        logger.add(
            sys.stderr,
            format="{message}",
            level=level,
            filter=correlation_filter,
            serialize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format=LOG_FORMAT,
            level=level,
            filter=correlation_filter,
            colorize=True,
        )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format="{message}" if serialize else LOG_FORMAT,
            level=level,
            filter=correlation_filter,
            rotation="10 MB",
            retention="7 days",
            serialize=serialize,
        )
