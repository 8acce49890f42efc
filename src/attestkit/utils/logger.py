"""
Centralised Loguru configuration.

Two sinks are installed:
  - **stderr** (terminal): INFO and above, compact and coloured.
  - **File**: DEBUG and above with source location, rotated by size and
    kept for 30 days.

Call ``setup_logger()`` once at startup, before the first network call, so
that request/response traces land in the file sink.
"""
import sys
from pathlib import Path

from loguru import logger


def setup_logger(log_dir: str = "logs", level: str = "INFO") -> logger:
    """Configure and return the global Loguru logger.

    Args:
        log_dir: Directory for rotated log files.  Created automatically
                 if it does not exist.
        level: Minimum level for the terminal sink.

    Returns:
        The configured ``logger`` singleton.
    """
    logger.remove()

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    # e.g. logs/attestkit_2024-02-23.log
    log_file = log_path / "attestkit_{time:YYYY-MM-DD}.log"

    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    logger.add(
        log_file,
        level="DEBUG",
        rotation="10 MB",
        retention="30 days",
        compression="zip",
        format=(
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
            "{name}:{function}:{line} - {message}"
        ),
        enqueue=True,
        encoding="utf-8",
    )

    return logger
