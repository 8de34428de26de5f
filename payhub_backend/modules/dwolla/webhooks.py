"""
Inbound Dwolla webhook processing.

Events are classified by topic, routed to the handler of their category and
applied to the record the event's resource link points at. Webhooks carry no
tenant context, so records are resolved with the ``*_for_all_tenants``
lookups. Every outcome is reported back to the caller instead of raised, so
Dwolla always receives a 200 and does not redeliver.
"""

import enum
import hashlib
import hmac
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.logging import get_logger
from ..documents import crud as document_crud
from ..profiles import crud as profile_crud
from ..profiles import services as profile_services
from ..tenants import crud as tenant_crud
from ..transactions import crud as transaction_crud
from ..transactions.services import update_transaction_status
from .client import DwollaClient
from .schemas import WebhookEvent
from .status_mapper import (
    CUSTOMER_STATUS_BY_TOPIC,
    DOCUMENT_STATUS_BY_TOPIC,
    OWNER_STATUS_BY_TOPIC,
    TRANSFER_STATUS_BY_TOPIC,
    customer_status_for_topic,
    document_status_for_topic,
    owner_status_for_topic,
)
from .statuses import DocumentVerificationStatus, EventTopic

logger = get_logger(__name__)

SIGNATURE_HEADER = "X-Request-Signature-SHA-256"


class WebhookOutcome(str, enum.Enum):
    PROCESSED = "processed"
    IGNORED_UNKNOWN_TOPIC = "ignored_unknown_topic"
    DROPPED_MISSING_LINK = "dropped_missing_link"
    ENTITY_NOT_FOUND = "entity_not_found"
    INVALID_SIGNATURE = "invalid_signature"
    FAILED = "failed"


class EventCategory(str, enum.Enum):
    TRANSFER = "transfer"
    CUSTOMER = "customer"
    DOCUMENT = "document"
    BENEFICIAL_OWNER = "beneficial_owner"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassifiedEvent:
    topic: EventTopic | None
    raw_topic: str | None
    resource_href: str | None
    category: EventCategory
    event_id: str | None = None


def _category_for(topic: EventTopic | None) -> EventCategory:
    if topic in TRANSFER_STATUS_BY_TOPIC:
        return EventCategory.TRANSFER
    if topic in CUSTOMER_STATUS_BY_TOPIC or topic == EventTopic.CUSTOMER_ACTIVATED:
        return EventCategory.CUSTOMER
    if topic in DOCUMENT_STATUS_BY_TOPIC:
        return EventCategory.DOCUMENT
    if topic in OWNER_STATUS_BY_TOPIC:
        return EventCategory.BENEFICIAL_OWNER
    return EventCategory.UNKNOWN


def classify_event(raw: dict[str, Any]) -> ClassifiedEvent:
    """Parse a webhook body into its topic, resource link and category."""
    event = WebhookEvent.model_validate(raw)
    topic = EventTopic.parse(event.topic)
    return ClassifiedEvent(
        topic=topic,
        raw_topic=event.topic,
        resource_href=event.resource_href,
        category=_category_for(topic),
        event_id=event.id,
    )


def verify_signature(secret: str | None, body: bytes, signature: str | None) -> bool:
    """
    Check the HMAC-SHA256 signature Dwolla sends with each event.

    Always True when no webhook secret is configured.
    """
    if not secret:
        return True
    if not signature:
        return False
    expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)


# ----- Handler registry -----

Handler = Callable[
    [AsyncSession, DwollaClient, ClassifiedEvent], Awaitable[WebhookOutcome]
]

_HANDLERS: dict[EventCategory, Handler] = {}


def register_handler(category: EventCategory) -> Callable[[Handler], Handler]:
    def decorator(func: Handler) -> Handler:
        _HANDLERS[category] = func
        return func

    return decorator


def _not_found(kind: str, event: ClassifiedEvent) -> WebhookOutcome:
    logger.warning(
        f"No {kind} found for webhook {event.raw_topic}",
        extra={"event_id": event.event_id, "resource": event.resource_href},
    )
    return WebhookOutcome.ENTITY_NOT_FOUND


@register_handler(EventCategory.TRANSFER)
async def handle_transfer_event(
    db: AsyncSession, client: DwollaClient, event: ClassifiedEvent
) -> WebhookOutcome:
    transaction = (
        await transaction_crud.get_transaction_by_external_id_for_all_tenants(
            db, event.resource_href
        )
    )
    if not transaction:
        return _not_found("transaction", event)

    if await update_transaction_status(db, transaction, event.topic):
        logger.info(
            f"Transaction {transaction.tenant_id}/{transaction.id} is now "
            f"{transaction.status.value}"
        )
    return WebhookOutcome.PROCESSED


@register_handler(EventCategory.CUSTOMER)
async def handle_customer_event(
    db: AsyncSession, client: DwollaClient, event: ClassifiedEvent
) -> WebhookOutcome:
    company = await tenant_crud.get_company_by_dwolla_uri_for_all_tenants(
        db, event.resource_href
    )
    profile = None
    if not company:
        profile = await profile_crud.get_profile_by_payments_uri_for_all_tenants(
            db, event.resource_href
        )
        if not profile:
            return _not_found("company or profile", event)

    if event.topic == EventTopic.CUSTOMER_ACTIVATED:
        customer = await client.get_customer(event.resource_href)
        status = customer.status
    else:
        status = customer_status_for_topic(event.topic).value

    if company:
        company.dwolla_status = status
        logger.info(f"Company of tenant {company.tenant_id} is now {status}")
        return WebhookOutcome.PROCESSED

    profile.payments_status = status
    has_source = await profile_crud.has_funding_source(
        db, profile.tenant_id, profile.id
    )
    # Suspension leaves the onboarding status untouched
    onboarding_status = profile_services.onboarding_status_for(profile, has_source)
    if onboarding_status is not None:
        profile.status = onboarding_status
    logger.info(
        f"Profile {profile.tenant_id}/{profile.id} customer status is now {status}"
    )
    return WebhookOutcome.PROCESSED


@register_handler(EventCategory.DOCUMENT)
async def handle_document_event(
    db: AsyncSession, client: DwollaClient, event: ClassifiedEvent
) -> WebhookOutcome:
    document = await document_crud.get_document_by_dwolla_uri_for_all_tenants(
        db, event.resource_href
    )
    if not document:
        return _not_found("document", event)

    status = document_status_for_topic(event.topic)
    document.verification_status = status
    if status == DocumentVerificationStatus.FAILED:
        remote = await client.get_document(event.resource_href)
        document.failure_reason = remote.failure_reason
    logger.info(
        f"Document {document.tenant_id}/{document.id} verification is now "
        f"{status.value}"
    )
    return WebhookOutcome.PROCESSED


@register_handler(EventCategory.BENEFICIAL_OWNER)
async def handle_beneficial_owner_event(
    db: AsyncSession, client: DwollaClient, event: ClassifiedEvent
) -> WebhookOutcome:
    owner = await tenant_crud.get_owner_by_dwolla_uri_for_all_tenants(
        db, event.resource_href
    )
    if not owner:
        return _not_found("beneficial owner", event)

    status = owner_status_for_topic(event.topic)
    owner.verification_status = status.value
    logger.info(
        f"Beneficial owner {owner.tenant_id}/{owner.id} is now {status.value}"
    )
    return WebhookOutcome.PROCESSED


# ----- Dispatch -----


async def process_event(
    db: AsyncSession, client: DwollaClient, raw: dict[str, Any]
) -> WebhookOutcome:
    """
    Apply one webhook event and commit the change.

    Exceptions from the handlers propagate; the route turns them into the
    ``failed`` outcome.
    """
    event = classify_event(raw)

    if event.category == EventCategory.UNKNOWN:
        logger.info(
            f"Ignoring webhook with unhandled topic {event.raw_topic}",
            extra={"event_id": event.event_id},
        )
        return WebhookOutcome.IGNORED_UNKNOWN_TOPIC

    # Transactions are created as pending, there is nothing to apply
    if event.topic in (
        EventTopic.TRANSFER_CREATED,
        EventTopic.CUSTOMER_TRANSFER_CREATED,
    ):
        logger.info(
            f"Transfer created: {event.resource_href}",
            extra={"event_id": event.event_id},
        )
        return WebhookOutcome.PROCESSED

    if not event.resource_href:
        logger.error(
            f"Webhook {event.raw_topic} has no resource link, dropping it",
            extra={"event_id": event.event_id},
        )
        return WebhookOutcome.DROPPED_MISSING_LINK

    outcome = await _HANDLERS[event.category](db, client, event)
    if outcome == WebhookOutcome.PROCESSED:
        await db.commit()
    return outcome
