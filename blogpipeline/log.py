"""Structured file + console logging."""

import logging
import sys
from datetime import datetime

from .config import LOGS_DIR

LOGGER_NAME = "blogpipeline"

_logger = None


def get_logger() -> logging.Logger:
    """Get or create the pipeline logger with file + console handlers."""
    global _logger
    if _logger is not None:
        return _logger

    _logger = logging.getLogger(LOGGER_NAME)
    _logger.setLevel(logging.DEBUG)

    if _logger.handlers:
        return _logger

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter("  [%(levelname)s] %(message)s"))
    _logger.addHandler(console)

    try:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        log_file = LOGS_DIR / f"blogpipeline_{datetime.now():%Y%m%d}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as e:
        _logger.warning("File logging disabled: %s", e)
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-8s %(message)s", datefmt="%H:%M:%S")
        )
        _logger.addHandler(file_handler)

    return _logger


def log(msg: str):
    """Convenience wrapper — INFO level."""
    get_logger().info(msg)
