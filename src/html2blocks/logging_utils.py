"""Logging setup for the html2blocks command line.

Library modules only create ``logging.getLogger(__name__)`` loggers; the
handlers and formats below are installed by the CLI so that applications
embedding the converter keep control of their own logging.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
TRACE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# httpx and httpcore log every request at INFO/DEBUG; only trace mode shows them.
HTTP_LOGGERS = ("httpx", "httpcore")


def resolve_log_level(log_level: int | str) -> int:
    """Return a numeric level for a level number or name, defaulting to INFO.

    Examples
    --------
        >>> resolve_log_level("debug")
        10
        >>> resolve_log_level("chatty")
        20

    """
    if isinstance(log_level, int):
        return log_level
    level = getattr(logging, str(log_level).upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Install console (and optional file) handlers on the root logger.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or level name (e.g. "INFO")
    log_file : str, optional
        Also append log records to this file
    trace_mode : bool, default False
        Use timestamps and logger names, and let the HTTP client loggers
        through

    Returns
    -------
    logging.Logger
        The configured root logger

    """
    level = resolve_log_level(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if trace_mode:
        formatter = logging.Formatter(TRACE_FORMAT, datefmt=TRACE_DATE_FORMAT)
    else:
        formatter = logging.Formatter(CONSOLE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error: OSError | None = None
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
        except OSError as e:
            file_error = e

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if trace_mode else max(level, logging.WARNING))

    if file_error is not None:
        root_logger.warning("Could not create log file %s: %s", log_file, file_error)
    elif log_file:
        root_logger.info("Logging to file: %s", log_file)

    return root_logger


__all__ = ["configure_logging", "resolve_log_level", "CONSOLE_FORMAT", "TRACE_FORMAT"]
