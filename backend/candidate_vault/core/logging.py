"""Centralized Loguru configuration for the persistence core."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from loguru import logger

from candidate_vault.core.config import settings

MAX_LOG_FILE_BYTES = 500 * 1024 * 1024

_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} | "
    "operation={extra[operation]} candidate_id={extra[candidate_id]} - {message}"
)


def _daily_or_size_rotation(message: Any, file: Any) -> bool:
    """Rotate when date changes or file exceeds 500MB.

    Args:
        message: Loguru message object.
        file: Active file handle managed by Loguru.

    Returns:
        ``True`` when the sink should rotate.
    """
    record_time = message.record["time"]
    current_file_date = Path(file.name).stem.split("_")[-1]
    if record_time.strftime("%Y-%m-%d") != current_file_date:
        return True
    return file.tell() >= MAX_LOG_FILE_BYTES


def setup_logging(log_level: str = "INFO", log_dir: str | Path | None = None) -> None:
    """Configure console and file logging.

    Args:
        log_level: Minimum level for application logs.
        log_dir: Directory for file sinks, defaults to ``settings.LOG_DIR``.
    """
    target_dir = Path(log_dir if log_dir is not None else settings.LOG_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.configure(extra={"operation": "-", "candidate_id": "-"})

    effective_level = "DEBUG" if settings.DEBUG else log_level.upper()

    logger.add(
        sys.stdout,
        level=effective_level,
        colorize=True,
        enqueue=True,
        backtrace=settings.DEBUG,
        diagnose=settings.DEBUG,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}:{function}:{line}</cyan> | "
            "op=<magenta>{extra[operation]}</magenta> "
            "candidate=<cyan>{extra[candidate_id]}</cyan> - "
            "<level>{message}</level>"
        ),
    )

    logger.add(
        target_dir / "app_{time:YYYY-MM-DD}.log",
        level=effective_level,
        rotation=_daily_or_size_rotation,
        retention="30 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        format=_FILE_FORMAT,
    )

    logger.add(
        target_dir / "errors_{time:YYYY-MM-DD}.log",
        level="ERROR",
        rotation="100 MB",
        retention="90 days",
        compression="zip",
        enqueue=True,
        backtrace=True,
        diagnose=settings.DEBUG,
        format=_FILE_FORMAT,
    )


__all__ = ["setup_logging"]
