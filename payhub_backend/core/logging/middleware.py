"""
Request correlation for logging.

Each request gets a transaction ID (taken from ``x-transaction-id`` when the
caller sends one) that is attached to every log record emitted while the
request is handled.
"""

import logging
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

TRANSACTION_ID_HEADER = "x-transaction-id"

_transaction_id: ContextVar[str | None] = ContextVar("transaction_id", default=None)


def generate_transaction_id() -> str:
    return uuid.uuid4().hex[:8]


def get_transaction_id() -> str | None:
    """Transaction ID of the current context, if any."""
    return _transaction_id.get()


def set_transaction_id(txn_id: str) -> None:
    _transaction_id.set(txn_id)


class TransactionIdFilter(logging.Filter):
    """Logging filter that adds the transaction ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "transaction_id"):
            record.transaction_id = get_transaction_id() or "-"
        return True


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Sets the transaction ID for the request, logs it and echoes the ID back."""

    def __init__(self, app, logger: logging.Logger | None = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("payhub_backend.requests")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        txn_id = request.headers.get(TRANSACTION_ID_HEADER) or generate_transaction_id()
        set_transaction_id(txn_id)

        start_time = time.time()
        self.logger.info(
            "Request started",
            extra={"method": request.method, "path": request.url.path},
        )

        response = await call_next(request)

        self.logger.info(
            "Request completed",
            extra={
                "status_code": response.status_code,
                "duration_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
        response.headers[TRANSACTION_ID_HEADER] = txn_id
        return response
