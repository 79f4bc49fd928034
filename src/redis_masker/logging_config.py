"""Logging setup for the CLI and embedding applications.

Library modules only call ``logging.getLogger(__name__)``; nothing here runs
unless ``setup_logging`` is called.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "redis_masker"

VERBOSE_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
TERSE_FORMAT = "%(levelname)s: %(message)s"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    verbose: bool = False,
) -> logging.Logger:
    """Attach handlers to the ``redis_masker`` logger and return it.

    Console output goes to stderr so masked data on stdout stays parseable.
    A log file, if given, always gets the verbose format.  Unknown level
    names fall back to INFO.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    handlers[0].setFormatter(logging.Formatter(VERBOSE_FORMAT if verbose else TERSE_FORMAT))
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(VERBOSE_FORMAT))
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(log_level)
        logger.addHandler(handler)

    logger.propagate = False
    return logger
