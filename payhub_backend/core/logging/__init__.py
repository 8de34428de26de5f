"""Logging infrastructure for the PayHub backend."""

from .logger_config import get_logger, setup_logging, shutdown_logging
from .middleware import (
    RequestIdMiddleware,
    TransactionIdFilter,
    get_transaction_id,
    set_transaction_id,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    "RequestIdMiddleware",
    "TransactionIdFilter",
    "get_transaction_id",
    "set_transaction_id",
]
