"""
Logging helpers shared across rainwatch.

Every module gets its logger through ``app_logger(__name__)`` so console
formatting and the level are configured in one place.
"""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level() -> int:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def app_logger(name: str, log_file: Optional[str] = None) -> logging.Logger:
    """
    Return a configured logger.

    Handlers are attached once per logger name, so calling this at import
    time from many modules (and on every Streamlit rerun) is safe.

    :param name: Logger name, normally the module's ``__name__``.
    :param log_file: Optional path; when given, records are also written there.
    :return: logging.Logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level())
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if not any(getattr(h, "_rainwatch_console", False) for h in logger.handlers):
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        console._rainwatch_console = True
        logger.addHandler(console)

    if log_file and not any(
        isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_file)
        for h in logger.handlers
    ):
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
