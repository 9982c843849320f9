"""
Logging configuration for applications using the single instance guard.

This module provides a single setup_logging function that configures the root
logger with:
- Console output to stdout
- Optional file output to {log_dir}/{app_name}.log
- Fresh log file on each start unless LOG_APPEND=1
"""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Optional

from .config import default_app_name, env_bool

# Thread-safe lock for logging configuration
_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)
_UNKNOWN_LOGGER_NAME = "<unknown>"

LOG_FORMAT = "%(asctime)s%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _formatter() -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)


def _is_console_handler(handler: logging.Handler) -> bool:
    if not isinstance(handler, logging.StreamHandler) or isinstance(handler, logging.FileHandler):
        return False
    return handler.stream in (sys.stdout, sys.stderr)


def _has_console_handler(root_logger: logging.Logger) -> bool:
    return any(_is_console_handler(handler) for handler in root_logger.handlers)


def _has_file_handler(root_logger: logging.Logger) -> bool:
    return any(isinstance(handler, logging.FileHandler) for handler in root_logger.handlers)


def _should_skip_logging_configuration(root_logger: logging.Logger, wants_file: bool) -> bool:
    if not root_logger.handlers:
        return False
    if not _has_console_handler(root_logger):
        return False
    return _has_file_handler(root_logger) or not wants_file


def _close_handlers(logger: logging.Logger, logger_name: Optional[str] = None) -> None:
    """Close all handlers for a logger, logging any errors."""
    for handler in list(logger.handlers):
        try:
            handler.close()
        except OSError as e:
            safe_name = logger_name if logger_name else _UNKNOWN_LOGGER_NAME
            _MODULE_LOGGER.debug("Handler close failed for logger '%s': %s", safe_name, e)


def _reset_root_handlers(root_logger: logging.Logger) -> None:
    _close_handlers(root_logger, "root")
    root_logger.handlers = []


def _build_console_handler(level: int) -> logging.Handler:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(_formatter())
    console_handler.setLevel(level)
    return console_handler


def _build_file_handler(app_name: str, log_dir: Path, level: int) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"{app_name}.log"
    file_mode = "a" if env_bool("LOG_APPEND", or_value=False) else "w"

    handler_cls = getattr(logging.handlers, "WatchedFileHandler", logging.FileHandler)
    file_handler = handler_cls(log_path, mode=file_mode)
    file_handler.setFormatter(_formatter())
    file_handler.setLevel(level)
    return file_handler


def setup_logging(app_name: Optional[str] = None, *, log_dir: Optional[Path] = None, level: int = logging.INFO) -> None:
    """Configure root logging for the application"""

    with _config_lock:
        root_logger = logging.getLogger()
        wants_file = log_dir is not None

        if _should_skip_logging_configuration(root_logger, wants_file):
            return

        _reset_root_handlers(root_logger)
        root_logger.addHandler(_build_console_handler(level))

        if log_dir is not None:
            name = app_name if app_name else default_app_name()
            root_logger.addHandler(_build_file_handler(name, Path(log_dir).expanduser(), level))

        root_logger.setLevel(level)
        logging.getLogger("psutil").setLevel(logging.WARNING)


__all__ = ["LOG_DATE_FORMAT", "LOG_FORMAT", "setup_logging"]
