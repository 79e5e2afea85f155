"""Centralized logging configuration for the API and the queue worker.

Provides console output plus separate files for:
- info.log: General application logs (INFO level and above)
- error.log: Error logs only (ERROR level and above), which includes
  exhausted retries and failed queue jobs
"""

import logging
import sys
from pathlib import Path

from app.core.config import get_settings

DETAILED_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
SIMPLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_dir: Path | None = None) -> logging.Logger:
    """Configure application logging with file and console handlers.

    Args:
        log_dir: Directory for the log files. Defaults to logs/ in the project root.

    Returns:
        The configured root logger.
    """
    settings = get_settings()
    level = logging.DEBUG if settings.log_level == "DEBUG" else logging.INFO

    log_dir = log_dir or Path(__file__).parent.parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    detailed_formatter = logging.Formatter(fmt=DETAILED_FORMAT, datefmt=DATE_FORMAT)
    simple_formatter = logging.Formatter(fmt=SIMPLE_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers
    root_logger.handlers.clear()

    info_handler = logging.FileHandler(log_dir / "info.log", encoding="utf-8")
    info_handler.setLevel(logging.INFO)
    info_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(info_handler)

    error_handler = logging.FileHandler(log_dir / "error.log", encoding="utf-8")
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(error_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    return root_logger
