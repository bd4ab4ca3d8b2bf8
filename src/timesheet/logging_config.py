"""Logging setup for the command-line tool."""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Marks handlers installed here so repeated setup replaces them
_HANDLER_FLAG = "_timesheet_handler"


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[str] = None,
    verbose: bool = False,
) -> None:
    """Configure the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file to append log records to
        verbose: Also log to the console at DEBUG level
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)
    if verbose:
        log_level = logging.DEBUG

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            root_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_FLAG, True)
        root_logger.addHandler(file_handler)

    if verbose:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        setattr(console_handler, _HANDLER_FLAG, True)
        root_logger.addHandler(console_handler)

    if not log_file and not verbose:
        # Keep warnings off the terminal unless asked for
        null_handler = logging.NullHandler()
        setattr(null_handler, _HANDLER_FLAG, True)
        root_logger.addHandler(null_handler)
