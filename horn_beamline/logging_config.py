"""
Routes the records of the package loggers (placements, station profiles,
attachments, sampling) to the console and, optionally, to a file. Handlers are
tagged so repeated calls replace their own handlers and leave any handler added
by the host application in place.
"""

import logging
import sys
from typing import List, Optional

__all__ = ["setup_logging"]

_package = __name__.rpartition(".")[0]
_console_handler_name = f"{_package}.console"
_file_handler_name = f"{_package}.file"

record_format = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console: bool = True,
) -> logging.Logger:
    """
    Configure the package logger

    Args:
        level (int, optional): logging level of the package logger and its
                               handlers. Defaults to logging.INFO.
        log_file (Optional[str], optional): file the records are written to,
                                            truncated on every call. Defaults to
                                            no file.
        console (bool, optional): write records to stdout. Defaults to True.

    Returns:
        logging.Logger: the package logger
    """
    logger = logging.getLogger(_package)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if handler.get_name() in (_console_handler_name, _file_handler_name):
            logger.removeHandler(handler)
            handler.close()

    handlers: List[logging.Handler] = []
    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.set_name(_console_handler_name)
        handlers.append(console_handler)
    if log_file is not None:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.set_name(_file_handler_name)
        handlers.append(file_handler)

    formatter = logging.Formatter(record_format, datefmt="%H:%M:%S")
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug(
        "logging at level %s to %s",
        logging.getLevelName(level),
        ", ".join(h.get_name() for h in handlers) or "no handlers",
    )
    return logger
