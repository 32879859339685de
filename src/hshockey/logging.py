"""Logging configuration using Loguru.

Console output is colorized; file output (optional) is rotated and written as
JSON lines. Stdlib logging from uvicorn/fastapi is routed through the same
handlers.

Example:
    >>> from hshockey.logging import setup_logging, get_logger
    >>> setup_logging(level="DEBUG")
    >>> logger = get_logger(__name__)
    >>> logger.info("Parsed {} rows", 12)
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from loguru import logger


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = sys._getframe(6), 6
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(
    level: str = "INFO",
    log_dir: str | None = None,
    rotation: str = "1 day",
    retention: str = "30 days",
    serialize: bool = True,
) -> None:
    """Configure loguru sinks.

    Args:
        level: Minimum log level.
        log_dir: Directory for rotated file logs; ``None`` keeps console only.
        rotation: When to rotate log files.
        retention: How long to keep old log files.
        serialize: Whether file logs are JSON lines.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[name]}</cyan> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / "hshockey_{time:YYYY-MM-DD}.log",
            level=level,
            rotation=rotation,
            retention=retention,
            serialize=serialize,
            enqueue=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


# Records emitted before setup_logging() still need an extra["name"] key.
logger.configure(extra={"name": "hshockey"})


def get_logger(name: str) -> Any:
    return logger.bind(name=name)


__all__ = ["InterceptHandler", "get_logger", "logger", "setup_logging"]
