"""
Logging helpers shared by every stock_analyst module.

Module loggers (``get_logger(__name__)``) write to stdout with their own
handler and do not propagate, so the CLI's ``basicConfig`` never duplicates
their lines.  ``LOG_LEVEL`` in the environment sets the default level;
``set_log_level`` adjusts every logger created so far (used by ``--verbose``).
"""

import logging
import os
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s  [%(levelname)s]  %(name)s — %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_PACKAGE_PREFIXES = ("stock_analyst", "worker.", "orchestrator", "stock_report_desk")


def resolve_level(level: Union[int, str, None] = None) -> int:
    """
    Turn *level* (or ``LOG_LEVEL`` when omitted) into a logging level.

    Unknown names fall back to INFO.
    """
    if isinstance(level, int):
        return level
    name = (level or os.getenv("LOG_LEVEL", "INFO")).strip().upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def get_logger(name: str, level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Return a configured logger with the given name.

    Logging format:  timestamp  [LEVEL]  logger_name — message

    Parameters
    ----------
    name : str
        Typically __name__ of the calling module.
    level : int | str, optional
        Logging level; defaults to ``LOG_LEVEL`` or INFO.

    Returns
    -------
    logging.Logger
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    logger.setLevel(resolve_level(level))
    return logger


def set_log_level(level: Union[int, str]) -> None:
    """Apply *level* to every stock_analyst, worker and orchestrator logger."""
    value = resolve_level(level)
    for name, logger in logging.Logger.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and name.startswith(_PACKAGE_PREFIXES):
            logger.setLevel(value)
