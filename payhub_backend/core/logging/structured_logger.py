"""
Structured JSON log formatting for PayHub.
"""

import logging
import traceback
from typing import Any

from pythonjsonlogger.json import JsonFormatter

from ..utils import utc_now

SERVICE_NAME = "payhub-backend"
SERVICE_VERSION = "0.1.0"

_DROPPED_FIELDS = ("msg", "args", "created", "msecs", "relativeCreated", "pathname")


class StructuredFormatter(JsonFormatter):
    """JSON formatter that adds the standard observability fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = utc_now().isoformat()
        log_record["transaction_id"] = getattr(record, "transaction_id", None)
        log_record["level"] = record.levelname
        log_record["logger_name"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno
        log_record["service"] = {"name": SERVICE_NAME, "version": SERVICE_VERSION}

        if record.exc_info and record.exc_info[0] is not None:
            log_record["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        for field in _DROPPED_FIELDS:
            log_record.pop(field, None)


def build_formatter(use_json_format: bool) -> logging.Formatter:
    """Formatter shared by the console and file handlers."""
    if use_json_format:
        return StructuredFormatter(
            fmt="%(timestamp)s %(level)s %(transaction_id)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    return logging.Formatter(
        "%(asctime)s | %(levelname)s | %(transaction_id)s | "
        "%(name)s:%(lineno)d | %(message)s"
    )
