"""
Custom exception classes for consistent error handling across all modules.

Every exception carries a machine-readable ``category`` and the HTTP status
the API layer answers with.
"""

from typing import Any


class PayHubException(Exception):
    """Base exception for all PayHub related errors."""

    status_code: int = 400
    category: str = "error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundError(PayHubException):
    """Raised when a requested resource is not found."""

    status_code = 404
    category = "not_found"

    def __init__(
        self,
        resource_type: str,
        identifier: Any,
        details: dict[str, Any] | None = None,
    ):
        message = f"{resource_type} with identifier '{identifier}' not found"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.identifier = identifier


class ConflictError(PayHubException):
    """Raised on duplicates or a disallowed state transition."""

    status_code = 409
    category = "conflict"


class NotAcceptableError(PayHubException):
    """Raised when an operation is not allowed in the current state."""

    status_code = 406
    category = "not_acceptable"


class ValidationError(PayHubException):
    """Raised when data validation fails, including processor rejections."""

    status_code = 400
    category = "validation_failure"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ):
        if field:
            full_message = f"Validation error for field '{field}': {message}"
        else:
            full_message = message
        super().__init__(full_message, details)
        self.field = field
        self.value = value


class ExternalServiceError(PayHubException):
    """Raised when external service integration fails."""

    status_code = 502
    category = "internal_failure"

    def __init__(
        self,
        service_name: str,
        operation: str,
        details: dict[str, Any] | None = None,
    ):
        message = f"External service '{service_name}' failed during '{operation}'"
        super().__init__(message, details)
        self.service_name = service_name
        self.operation = operation
