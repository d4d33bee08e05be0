"""
Logging setup shared by the server and the CLI.

Modules log through logging.getLogger(__name__); this only configures the
root handler once per process.
"""

import logging
from typing import Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%H:%M:%S"

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "google_genai")


def setup_logging(level: Union[int, str] = logging.INFO):
    """
    Configure the root logger.

    Args:
        level: Level name ("DEBUG", "info", ...) or logging constant
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    logging.getLogger().setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
