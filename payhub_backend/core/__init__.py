"""Core infrastructure for the PayHub backend.

``base_crud`` is imported from its module directly; it depends on
``payhub_backend.database``, which itself imports from this package.
"""

from .database_types import UUID
from .exceptions import (
    ConflictError,
    ExternalServiceError,
    NotAcceptableError,
    PayHubException,
    ResourceNotFoundError,
    ValidationError,
)

__all__ = [
    "UUID",
    "PayHubException",
    "ResourceNotFoundError",
    "ConflictError",
    "NotAcceptableError",
    "ValidationError",
    "ExternalServiceError",
]
