"""Loguru sink configuration for CLI entry points."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from loguru import logger

CONSOLE_FORMAT = "<level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {name}:{function}:{line} - {message}"


def configure_logging(settings: Any, verbose: bool = False) -> None:
    """
    Replace the default loguru sink.

    Args:
        settings: ``config.Settings`` (``log_level``, ``log_file``, ``data_dir``)
        verbose: Force DEBUG on stderr
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else settings.log_level,
        format=CONSOLE_FORMAT,
    )

    if settings.log_file:
        log_path = Path(settings.log_file).expanduser()
        if not log_path.is_absolute():
            log_path = Path(settings.data_dir).expanduser() / log_path
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level="DEBUG",
            format=FILE_FORMAT,
            rotation="1 MB",
            retention=5,
        )
