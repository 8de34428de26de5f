"""
Central logging configuration for PayHub.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from .middleware import TransactionIdFilter
from .structured_logger import build_formatter

ROOT_LOGGER_NAME = "payhub_backend"

# Third-party loggers and the level they are capped at
EXTERNAL_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "sqlalchemy": logging.WARNING,
    "botocore": logging.WARNING,
    "uvicorn": logging.INFO,
    "fastapi": logging.INFO,
}


class LoggingConfig:
    """Installs handlers once per process."""

    def __init__(self):
        self._handlers: list[logging.Handler] = []
        self._is_configured = False

    def setup(
        self,
        log_to_file: bool = False,
        log_level: str = "INFO",
        log_file_path: str = "logs/app.log",
        use_json_format: bool = True,
        max_bytes: int = 50 * 1024 * 1024,
        backup_count: int = 5,
    ) -> logging.Logger:
        """
        Set up console (and optionally rotating file) logging.

        Args:
            log_to_file: Whether to also write to a rotating log file
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_file_path: Path to the log file
            use_json_format: Whether to use JSON formatting
            max_bytes: Maximum file size before rotation
            backup_count: Number of backup files to keep

        Returns:
            The application root logger
        """
        if self._is_configured:
            return get_logger()

        level = getattr(logging, log_level.upper())
        formatter = build_formatter(use_json_format)
        txn_filter = TransactionIdFilter()

        console_handler = logging.StreamHandler(sys.stdout)
        self._handlers.append(console_handler)

        if log_to_file:
            directory = os.path.dirname(log_file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            self._handlers.append(
                RotatingFileHandler(
                    log_file_path, maxBytes=max_bytes, backupCount=backup_count
                )
            )

        root_logger = logging.getLogger()
        for handler in self._handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            handler.addFilter(txn_filter)
            root_logger.addHandler(handler)
        root_logger.setLevel(level)

        for logger_name, ext_level in EXTERNAL_LOGGERS.items():
            logging.getLogger(logger_name).setLevel(max(ext_level, level))

        logging.captureWarnings(True)
        self._is_configured = True
        return get_logger()

    def shutdown(self) -> None:
        root_logger = logging.getLogger()
        for handler in self._handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self._handlers = []
        self._is_configured = False


_logging_config = LoggingConfig()


def setup_logging(
    log_to_file: bool | None = None,
    log_level: str | None = None,
    log_file_path: str | None = None,
    use_json_format: bool | None = None,
) -> logging.Logger:
    """
    Set up logging, filling unset arguments from the environment.

    Args:
        log_to_file: Whether to enable file logging (env: LOG_TO_FILE)
        log_level: Logging level (env: LOG_LEVEL)
        log_file_path: Path to log file (env: LOG_FILE_PATH)
        use_json_format: Whether to use JSON format (env: LOG_FORMAT=json)
    """
    if log_to_file is None:
        log_to_file = os.getenv("LOG_TO_FILE", "false").lower() == "true"

    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    if log_file_path is None:
        log_file_path = os.getenv("LOG_FILE_PATH", "logs/app.log")

    if use_json_format is None:
        use_json_format = os.getenv("LOG_FORMAT", "json").lower() == "json"

    return _logging_config.setup(
        log_to_file=log_to_file,
        log_level=log_level,
        log_file_path=log_file_path,
        use_json_format=use_json_format,
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger namespaced under the application logger.

    Module names that already live in the package (``__name__``) are used as is.
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def shutdown_logging() -> None:
    _logging_config.shutdown()
