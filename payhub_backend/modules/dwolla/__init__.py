"""Dwolla integration for PayHub.

The webhook handlers and route depend on the other modules and are imported
from their own submodules.
"""

from .client import DwollaClient, get_dwolla_client
from .errors import DwollaFieldError, DwollaRequestError, processor_errors
from .status_mapper import (
    build_update_payload,
    pick_updatable_fields,
    profile_status_for,
    updatable_values,
)
from .statuses import (
    CustomerStatus,
    DocumentType,
    DocumentVerificationStatus,
    EventTopic,
    OwnerVerificationStatus,
    ProfileStatus,
    TransferStatus,
)

__all__ = [
    # Client
    "DwollaClient",
    "get_dwolla_client",
    # Errors
    "DwollaFieldError",
    "DwollaRequestError",
    "processor_errors",
    # Status mapping
    "build_update_payload",
    "pick_updatable_fields",
    "profile_status_for",
    "updatable_values",
    # Statuses
    "CustomerStatus",
    "DocumentType",
    "DocumentVerificationStatus",
    "EventTopic",
    "OwnerVerificationStatus",
    "ProfileStatus",
    "TransferStatus",
]
