"""
Logging setup for Aurum Try-On.

One named application logger writes short lines to stdout and, optionally,
detailed lines to a rotating file under %APPDATA%/AurumTryOn/logs/
(~/.aurum_tryon/logs/ where APPDATA is not set). Modules log through
child loggers obtained with ``get_logger``.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import LOG_FILENAME, LOG_MAX_BYTES, LOG_BACKUP_COUNT

LOGGER_NAME = "AurumTryOn"

CONSOLE_FORMAT = logging.Formatter("%(asctime)s | %(levelname)-8s | %(message)s", datefmt="%H:%M:%S")
FILE_FORMAT = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s:%(lineno)d | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)


def get_log_directory() -> Path:
    """
    Directory for log files, created on first use.

    Returns:
        %APPDATA%/AurumTryOn/logs, or ~/.aurum_tryon/logs without APPDATA.
    """
    appdata = os.environ.get("APPDATA")
    log_dir = Path(appdata) / "AurumTryOn" / "logs" if appdata else Path.home() / ".aurum_tryon" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(CONSOLE_FORMAT)
    return handler


def _file_handler(path: Path) -> logging.Handler:
    handler = RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8")
    # The file always gets everything
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(FILE_FORMAT)
    return handler


def setup_logging(
    debug: bool = False,
    log_to_file: bool = True,
    log_filename: Optional[str] = None
) -> logging.Logger:
    """
    Configure the application logger. Safe to call again; handlers are replaced.

    Args:
        debug: Log debug messages to the console.
        log_to_file: Also write a rotating log file.
        log_filename: File name inside the log directory.

    Returns:
        The application logger.
    """
    level = logging.DEBUG if debug else logging.INFO
    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel(logging.DEBUG if log_to_file else level)
    app_logger.handlers.clear()

    app_logger.addHandler(_console_handler(level))

    if log_to_file:
        log_path = get_log_directory() / (log_filename or LOG_FILENAME)
        app_logger.addHandler(_file_handler(log_path))
        app_logger.debug(f"Logging to file: {log_path}")

    return app_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Child of the application logger.

    Args:
        name: Component name, e.g. "AssetCache". None returns the application logger.
    """
    app_logger = logging.getLogger(LOGGER_NAME)
    return app_logger.getChild(name) if name else app_logger
