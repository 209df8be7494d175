"""Logging setup for scripts and hosts embedding the engine.

Engine modules only create `logging.getLogger(__name__)` loggers under the
`roofpv` namespace; nothing is configured on import.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Route `roofpv` records to stdout, and to `log_file` when given.

    Calling it again replaces the handlers of the previous call. Use
    `logging.DEBUG` to see rejected placements and clamped settings.
    """

    logger = logging.getLogger("roofpv")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
