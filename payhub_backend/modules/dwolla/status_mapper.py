"""
Mapping between processor statuses, webhook topics and local statuses.

Everything here is pure; callers decide what to persist.
"""

from typing import Any

from ...core.exceptions import NotAcceptableError
from .statuses import (
    CustomerStatus,
    DocumentVerificationStatus,
    EventTopic,
    OwnerVerificationStatus,
    ProfileStatus,
    TransferStatus,
)

# Local attribute -> Dwolla customer field
CUSTOMER_WIRE_FIELDS: dict[str, str] = {
    "first_name": "firstName",
    "last_name": "lastName",
    "email": "email",
    "business_name": "businessName",
    "address1": "address1",
    "address2": "address2",
    "city": "city",
    "state": "state",
    "postal_code": "postalCode",
    "phone": "phone",
}

# Identity is locked once verified; contact details stay editable.
_UPDATABLE_FIELDS: dict[CustomerStatus, frozenset[str]] = {
    CustomerStatus.VERIFIED: frozenset(
        {"email", "address1", "address2", "city", "state", "postalCode", "phone"}
    ),
    CustomerStatus.UNVERIFIED: frozenset(
        {"firstName", "lastName", "email", "businessName"}
    ),
}

TRANSFER_STATUS_BY_TOPIC: dict[EventTopic, TransferStatus] = {
    EventTopic.TRANSFER_CREATED: TransferStatus.PENDING,
    EventTopic.CUSTOMER_TRANSFER_CREATED: TransferStatus.PENDING,
    EventTopic.TRANSFER_CANCELLED: TransferStatus.CANCELLED,
    EventTopic.CUSTOMER_TRANSFER_CANCELLED: TransferStatus.CANCELLED,
    EventTopic.TRANSFER_FAILED: TransferStatus.FAILED,
    EventTopic.CUSTOMER_TRANSFER_FAILED: TransferStatus.FAILED,
    EventTopic.TRANSFER_RECLAIMED: TransferStatus.RECLAIMED,
    EventTopic.TRANSFER_COMPLETED: TransferStatus.COMPLETED,
    EventTopic.CUSTOMER_TRANSFER_COMPLETED: TransferStatus.COMPLETED,
}

# customer_activated is absent: the new status has to be read back from Dwolla.
CUSTOMER_STATUS_BY_TOPIC: dict[EventTopic, CustomerStatus] = {
    EventTopic.CUSTOMER_CREATED: CustomerStatus.UNVERIFIED,
    EventTopic.CUSTOMER_VERIFIED: CustomerStatus.VERIFIED,
    EventTopic.CUSTOMER_SUSPENDED: CustomerStatus.SUSPENDED,
    EventTopic.CUSTOMER_VERIFICATION_DOCUMENT_NEEDED: CustomerStatus.DOCUMENT,
    EventTopic.CUSTOMER_REVERIFICATION_NEEDED: CustomerStatus.RETRY,
}

OWNER_STATUS_BY_TOPIC: dict[EventTopic, OwnerVerificationStatus] = {
    EventTopic.CUSTOMER_BENEFICIAL_OWNER_VERIFIED: OwnerVerificationStatus.VERIFIED,
    EventTopic.CUSTOMER_BENEFICIAL_OWNER_VERIFICATION_DOCUMENT_NEEDED: (
        OwnerVerificationStatus.DOCUMENT
    ),
    EventTopic.CUSTOMER_BENEFICIAL_OWNER_REVERIFICATION_NEEDED: (
        OwnerVerificationStatus.INCOMPLETE
    ),
}

DOCUMENT_STATUS_BY_TOPIC: dict[EventTopic, DocumentVerificationStatus] = {
    EventTopic.CUSTOMER_VERIFICATION_DOCUMENT_UPLOADED: (
        DocumentVerificationStatus.PENDING
    ),
    EventTopic.CUSTOMER_VERIFICATION_DOCUMENT_APPROVED: (
        DocumentVerificationStatus.APPROVED
    ),
    EventTopic.CUSTOMER_VERIFICATION_DOCUMENT_FAILED: DocumentVerificationStatus.FAILED,
}


def _as_customer_status(status: CustomerStatus | str | None) -> CustomerStatus | None:
    if status is None or isinstance(status, CustomerStatus):
        return status
    try:
        return CustomerStatus(status)
    except ValueError:
        return None


def pick_updatable_fields(status: CustomerStatus | str | None) -> frozenset[str]:
    """Dwolla customer fields that may be pushed at the given status.

    Returns an empty set for every status other than verified/unverified.
    """
    customer_status = _as_customer_status(status)
    if customer_status is None:
        return frozenset()
    return _UPDATABLE_FIELDS.get(customer_status, frozenset())


def build_update_payload(status: CustomerStatus | str | None, record: Any) -> dict:
    """
    Build the customer update payload for a local record.

    Args:
        status: Current Dwolla status of the customer
        record: Object exposing the local snake_case attributes

    Returns:
        Wire payload holding only the updatable fields that have a value

    Raises:
        NotAcceptableError: If nothing may be updated at this status
    """
    allowed = pick_updatable_fields(status)
    if not allowed:
        raise NotAcceptableError(
            f"Customer can not be updated at status '{_status_value(status)}'",
            details={"status": _status_value(status)},
        )

    payload = {}
    for attribute, wire_name in CUSTOMER_WIRE_FIELDS.items():
        if wire_name not in allowed:
            continue
        value = getattr(record, attribute, None)
        if value is not None:
            payload[wire_name] = value
    return payload


def updatable_values(
    status: CustomerStatus | str | None, values: dict[str, Any]
) -> dict[str, Any]:
    """Subset of local ``values`` that may change at ``status``.

    Locked identity fields are dropped so the local record keeps matching
    what Dwolla holds.
    """
    allowed = pick_updatable_fields(status)
    return {
        attribute: value
        for attribute, value in values.items()
        if CUSTOMER_WIRE_FIELDS.get(attribute) in allowed
    }


def _status_value(status: CustomerStatus | str | None) -> str | None:
    return status.value if isinstance(status, CustomerStatus) else status


def customer_status_for_topic(topic: EventTopic) -> CustomerStatus | None:
    return CUSTOMER_STATUS_BY_TOPIC.get(topic)


def owner_status_for_topic(topic: EventTopic) -> OwnerVerificationStatus | None:
    return OWNER_STATUS_BY_TOPIC.get(topic)


def document_status_for_topic(topic: EventTopic) -> DocumentVerificationStatus | None:
    return DOCUMENT_STATUS_BY_TOPIC.get(topic)


def transfer_status_for_topic(topic: EventTopic) -> TransferStatus | None:
    return TRANSFER_STATUS_BY_TOPIC.get(topic)


def profile_status_for(
    customer_status: CustomerStatus | str | None, has_funding_source: bool
) -> ProfileStatus | None:
    """
    Onboarding status a profile moves to after its customer status changed.

    None means the onboarding status is left as it is (suspended customers,
    unknown values).
    """
    customer_status = _as_customer_status(customer_status)
    if customer_status in (CustomerStatus.VERIFIED, CustomerStatus.UNVERIFIED):
        return ProfileStatus.ACTIVE if has_funding_source else ProfileStatus.BANK
    if customer_status == CustomerStatus.DOCUMENT:
        return ProfileStatus.DOCUMENT
    if customer_status == CustomerStatus.RETRY:
        return ProfileStatus.PROFILE
    return None
