"""
Logging setup for the life tower command line.

Library modules only create module loggers under the "life_tower"
namespace; handlers are attached here, once, by the entry point.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Route "life_tower" records to stderr and, optionally, a log file.

    Calling it again replaces the handlers from the previous call.

    Args:
        level: Threshold for the package logger and its handlers
        log_file: Path of a file that receives the same records (overwritten)
    """
    logger = logging.getLogger("life_tower")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
