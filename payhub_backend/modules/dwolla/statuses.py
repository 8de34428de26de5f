"""Status vocabulary shared by the onboarding, transfer and document flows.

Values of the processor-facing enums are part of the Dwolla wire contract and
must match what the API and its webhooks emit.
"""

import enum


class ProfileStatus(str, enum.Enum):
    """Onboarding status of a contractor profile."""

    INVITED = "invited"
    PROFILE = "profile"
    BANK = "bank"
    DOCUMENT = "document"
    ACTIVE = "active"
    JOB = "job"


class CustomerStatus(str, enum.Enum):
    """Verification status of a Dwolla customer."""

    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    DOCUMENT = "document"
    SUSPENDED = "suspended"
    RETRY = "retry"


class OwnerVerificationStatus(str, enum.Enum):
    """Verification status of a beneficial owner."""

    VERIFIED = "verified"
    DOCUMENT = "document"
    INCOMPLETE = "incomplete"


class TransferStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"
    RECLAIMED = "reclaimed"


TERMINAL_TRANSFER_STATUSES = frozenset(
    {
        TransferStatus.COMPLETED,
        TransferStatus.CANCELLED,
        TransferStatus.FAILED,
        TransferStatus.RECLAIMED,
    }
)


class DocumentType(str, enum.Enum):
    """Document types accepted by the processor."""

    PASSPORT = "passport"
    LICENSE = "license"
    ID_CARD = "idCard"
    OTHER = "other"


class DocumentVerificationStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    APPROVED = "approved"
    FAILED = "failed"


class EventTopic(str, enum.Enum):
    """Webhook topics the backend reacts to."""

    # Transfers
    TRANSFER_CREATED = "transfer_created"
    TRANSFER_CANCELLED = "transfer_cancelled"
    TRANSFER_FAILED = "transfer_failed"
    TRANSFER_RECLAIMED = "transfer_reclaimed"
    TRANSFER_COMPLETED = "transfer_completed"
    CUSTOMER_TRANSFER_CREATED = "customer_transfer_created"
    CUSTOMER_TRANSFER_CANCELLED = "customer_transfer_cancelled"
    CUSTOMER_TRANSFER_FAILED = "customer_transfer_failed"
    CUSTOMER_TRANSFER_COMPLETED = "customer_transfer_completed"

    # Customers
    CUSTOMER_CREATED = "customer_created"
    CUSTOMER_VERIFIED = "customer_verified"
    CUSTOMER_SUSPENDED = "customer_suspended"
    CUSTOMER_ACTIVATED = "customer_activated"
    CUSTOMER_VERIFICATION_DOCUMENT_NEEDED = "customer_verification_document_needed"
    CUSTOMER_REVERIFICATION_NEEDED = "customer_reverification_needed"

    # Verification documents
    CUSTOMER_VERIFICATION_DOCUMENT_UPLOADED = "customer_verification_document_uploaded"
    CUSTOMER_VERIFICATION_DOCUMENT_APPROVED = "customer_verification_document_approved"
    CUSTOMER_VERIFICATION_DOCUMENT_FAILED = "customer_verification_document_failed"

    # Beneficial owners
    CUSTOMER_BENEFICIAL_OWNER_VERIFIED = "customer_beneficial_owner_verified"
    CUSTOMER_BENEFICIAL_OWNER_VERIFICATION_DOCUMENT_NEEDED = (
        "customer_beneficial_owner_verification_document_needed"
    )
    CUSTOMER_BENEFICIAL_OWNER_REVERIFICATION_NEEDED = (
        "customer_beneficial_owner_reverification_needed"
    )

    @classmethod
    def parse(cls, raw: str | None) -> "EventTopic | None":
        """Topic for a wire value, or None when it is not one we know."""
        try:
            return cls(raw)
        except ValueError:
            return None
