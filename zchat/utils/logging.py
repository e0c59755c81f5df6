# zchat/utils/logging.py
"""
Logging configuration for zchat.
"""
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from zchat.constants import LOG_DIR, LOG_FORMAT, LOG_ROTATION, LOG_RETENTION


def setup_logging(debug: bool = False, log_dir: Optional[Path] = None) -> None:
    """
    Configure the application logging.

    The console sink stays at WARNING unless debug is enabled, so log lines do
    not interleave with the confirmation prompts.

    Args:
        debug: Whether to enable debug logging.
        log_dir: Directory for the log files. Defaults to LOG_DIR.
    """
    log_dir = log_dir or LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    # Remove default handlers
    logger.remove()
    logger.configure(extra={"name": "zchat"})

    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level="DEBUG" if debug else "WARNING",
        diagnose=debug,
    )

    log_file = log_dir / "zchat.log"
    logger.add(
        log_file,
        format=LOG_FORMAT,
        level="DEBUG" if debug else "INFO",
        rotation=LOG_ROTATION,
        retention=LOG_RETENTION,
        compression="zip",
    )

    # Structured JSON log
    json_log_file = log_dir / "zchat_structured.log"
    logger.add(
        json_log_file,
        serialize=True,
        level="INFO",
        rotation=LOG_ROTATION,
        retention=LOG_RETENTION,
        compression="zip",
    )

    logger.bind(name=__name__).debug(f"Logging initialized. Log files: {log_file}, {json_log_file}")


def get_logger(name: str = "zchat"):
    """
    Get a logger bound to the given module name.

    Args:
        name: The name for the logger.

    Returns:
        A loguru logger carrying ``name`` in its extra record.
    """
    return logger.bind(name=name)
