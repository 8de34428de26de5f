import hashlib
import hmac
import json
import logging

import pytest

from payhub_backend.modules.dwolla.schemas import DwollaCustomer, DwollaDocument
from payhub_backend.modules.dwolla.statuses import (
    DocumentVerificationStatus,
    EventTopic,
    ProfileStatus,
    TransferStatus,
)
from payhub_backend.modules.dwolla.webhooks import (
    SIGNATURE_HEADER,
    EventCategory,
    WebhookOutcome,
    classify_event,
    process_event,
    verify_signature,
)

from .helpers import (
    DWOLLA_API,
    customer_uri,
    make_company,
    make_document,
    make_funding_source,
    make_owner,
    make_profile,
    make_transaction,
)

EVENTS_URL = "/api/dwolla/events"


def event(topic: str, href: str | None = None, **extra) -> dict:
    body = {"id": "evt-1", "topic": topic, "timestamp": "2026-10-18T12:00:00Z"}
    if href is not None:
        body["_links"] = {"resource": {"href": href}}
    body.update(extra)
    return body


# =============================================================================
# CLASSIFICATION / SIGNATURE
# =============================================================================


@pytest.mark.parametrize(
    ("topic", "category"),
    [
        ("customer_transfer_completed", EventCategory.TRANSFER),
        ("transfer_reclaimed", EventCategory.TRANSFER),
        ("customer_activated", EventCategory.CUSTOMER),
        ("customer_suspended", EventCategory.CUSTOMER),
        ("customer_verification_document_failed", EventCategory.DOCUMENT),
        ("customer_beneficial_owner_verified", EventCategory.BENEFICIAL_OWNER),
        ("customer_funding_source_added", EventCategory.UNKNOWN),
        (None, EventCategory.UNKNOWN),
    ],
)
def test_classify_event(topic, category):
    classified = classify_event(event(topic, customer_uri("c1")))

    assert classified.category == category
    assert classified.raw_topic == topic
    assert classified.resource_href == customer_uri("c1")
    assert classified.event_id == "evt-1"


def test_classify_event_without_links():
    classified = classify_event(event("customer_verified"))

    assert classified.topic == EventTopic.CUSTOMER_VERIFIED
    assert classified.resource_href is None


def test_signature_checked_only_with_secret():
    body = b'{"topic": "customer_verified"}'
    signature = hmac.new(b"s3cret", body, hashlib.sha256).hexdigest()

    assert verify_signature(None, body, None)
    assert verify_signature("s3cret", body, signature)
    assert not verify_signature("s3cret", body, "0" * 64)
    assert not verify_signature("s3cret", body, None)


# =============================================================================
# DISPATCH OUTCOMES
# =============================================================================


async def test_unknown_topic_is_ignored(db, dwolla):
    outcome = await process_event(
        db, dwolla, event("customer_funding_source_added", customer_uri("c1"))
    )

    assert outcome == WebhookOutcome.IGNORED_UNKNOWN_TOPIC


async def test_transfer_created_needs_no_lookup(db, dwolla):
    outcome = await process_event(
        db, dwolla, event("transfer_created", f"{DWOLLA_API}/transfers/unknown")
    )

    assert outcome == WebhookOutcome.PROCESSED


async def test_missing_resource_link_is_dropped_with_error(db, dwolla, caplog):
    with caplog.at_level(logging.ERROR):
        outcome = await process_event(db, dwolla, event("customer_verified"))

    assert outcome == WebhookOutcome.DROPPED_MISSING_LINK
    assert any(record.levelno == logging.ERROR for record in caplog.records)


@pytest.mark.parametrize("links", [None, [], "nope"])
async def test_null_or_malformed_links_are_dropped(db, dwolla, caplog, links):
    raw = {"id": "evt-9", "topic": "transfer_completed", "_links": links}

    with caplog.at_level(logging.ERROR):
        outcome = await process_event(db, dwolla, raw)

    assert outcome == WebhookOutcome.DROPPED_MISSING_LINK
    assert any(record.levelno == logging.ERROR for record in caplog.records)


async def test_unknown_resource_is_reported(db, dwolla):
    outcome = await process_event(
        db, dwolla, event("customer_verified", customer_uri("nobody"))
    )

    assert outcome == WebhookOutcome.ENTITY_NOT_FOUND


# =============================================================================
# CUSTOMERS
# =============================================================================


async def test_customer_verified_updates_company(db, tenant, dwolla):
    company = await make_company(db, tenant.id, status="document")

    outcome = await process_event(
        db, dwolla, event("customer_verified", company.dwolla_uri)
    )

    assert outcome == WebhookOutcome.PROCESSED
    assert company.dwolla_status == "verified"


async def test_customer_verified_moves_profile_onboarding(db, tenant, dwolla):
    profile = await make_profile(
        db,
        tenant.id,
        status=ProfileStatus.DOCUMENT,
        payments_uri=customer_uri("linus"),
        payments_status="document",
    )
    await make_funding_source(db, tenant.id, profile.id)

    outcome = await process_event(
        db, dwolla, event("customer_verified", profile.payments_uri)
    )

    assert outcome == WebhookOutcome.PROCESSED
    assert profile.payments_status == "verified"
    assert profile.status == ProfileStatus.ACTIVE


async def test_pending_job_onboarding_survives_verification(db, tenant, dwolla):
    profile = await make_profile(
        db,
        tenant.id,
        status=ProfileStatus.DOCUMENT,
        payments_uri=customer_uri("linus"),
        payments_status="document",
        pending_job_id=1,
    )
    await make_funding_source(db, tenant.id, profile.id)

    await process_event(db, dwolla, event("customer_verified", profile.payments_uri))

    assert profile.status == ProfileStatus.JOB


async def test_suspension_keeps_onboarding_status(db, tenant, dwolla):
    profile = await make_profile(
        db,
        tenant.id,
        status=ProfileStatus.ACTIVE,
        payments_uri=customer_uri("linus"),
        payments_status="verified",
    )

    await process_event(db, dwolla, event("customer_suspended", profile.payments_uri))

    assert profile.payments_status == "suspended"
    assert profile.status == ProfileStatus.ACTIVE


async def test_customer_activated_reads_status_back(db, tenant, dwolla):
    company = await make_company(db, tenant.id, status="suspended")
    dwolla.get_customer.return_value = DwollaCustomer(
        status="verified", type="business"
    )

    outcome = await process_event(
        db, dwolla, event("customer_activated", company.dwolla_uri)
    )

    assert outcome == WebhookOutcome.PROCESSED
    assert company.dwolla_status == "verified"
    dwolla.get_customer.assert_awaited_once_with(company.dwolla_uri)


async def test_redelivered_event_is_idempotent(db, tenant, dwolla):
    profile = await make_profile(
        db,
        tenant.id,
        payments_uri=customer_uri("linus"),
        payments_status="unverified",
    )
    body = event("customer_reverification_needed", profile.payments_uri)

    first = await process_event(db, dwolla, body)
    second = await process_event(db, dwolla, body)

    assert first == second == WebhookOutcome.PROCESSED
    assert profile.payments_status == "retry"
    assert profile.status == ProfileStatus.PROFILE


# =============================================================================
# TRANSFERS / DOCUMENTS / OWNERS
# =============================================================================


async def test_transfer_completed_updates_transaction(db, tenant, dwolla):
    profile = await make_profile(db, tenant.id, status=ProfileStatus.ACTIVE)
    source = await make_funding_source(db, tenant.id, profile.id)
    transaction = await make_transaction(db, tenant.id, profile.id, source.id)

    outcome = await process_event(
        db, dwolla, event("customer_transfer_completed", transaction.external_id)
    )

    assert outcome == WebhookOutcome.PROCESSED
    assert transaction.status == TransferStatus.COMPLETED


async def test_conflicting_terminal_status_warns_once(db, tenant, dwolla, caplog):
    profile = await make_profile(db, tenant.id, status=ProfileStatus.ACTIVE)
    source = await make_funding_source(db, tenant.id, profile.id)
    transaction = await make_transaction(
        db, tenant.id, profile.id, source.id, status=TransferStatus.COMPLETED
    )

    with caplog.at_level(logging.WARNING):
        await process_event(
            db, dwolla, event("transfer_failed", transaction.external_id)
        )
        await process_event(
            db, dwolla, event("transfer_failed", transaction.external_id)
        )

    assert transaction.status == TransferStatus.FAILED
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1


async def test_failed_document_records_reason(db, tenant, dwolla):
    profile = await make_profile(db, tenant.id)
    document = await make_document(db, tenant.id, profile.id)
    dwolla.get_document.return_value = DwollaDocument(
        status="reviewed", failureReason="ScanNotReadable"
    )

    outcome = await process_event(
        db,
        dwolla,
        event("customer_verification_document_failed", document.dwolla_uri),
    )

    assert outcome == WebhookOutcome.PROCESSED
    assert document.verification_status == DocumentVerificationStatus.FAILED
    assert document.failure_reason == "ScanNotReadable"


async def test_approved_document_skips_lookup(db, tenant, dwolla):
    profile = await make_profile(db, tenant.id)
    document = await make_document(db, tenant.id, profile.id)

    await process_event(
        db,
        dwolla,
        event("customer_verification_document_approved", document.dwolla_uri),
    )

    assert document.verification_status == DocumentVerificationStatus.APPROVED
    dwolla.get_document.assert_not_awaited()


async def test_owner_verified(db, tenant, dwolla):
    company = await make_company(db, tenant.id, status="document")
    owner = await make_owner(db, tenant.id, company.id)

    outcome = await process_event(
        db, dwolla, event("customer_beneficial_owner_verified", owner.dwolla_uri)
    )

    assert outcome == WebhookOutcome.PROCESSED
    assert owner.verification_status == "verified"


async def test_lookup_spans_tenants(db, tenant, other_tenant, dwolla):
    company = await make_company(db, other_tenant.id, status="unverified")

    await process_event(db, dwolla, event("customer_verified", company.dwolla_uri))

    assert company.dwolla_status == "verified"


# =============================================================================
# ROUTE
# =============================================================================


async def test_route_reports_outcome(api, db, tenant):
    company = await make_company(db, tenant.id, status="document")

    response = await api.post(
        EVENTS_URL, json=event("customer_verified", company.dwolla_uri)
    )

    assert response.status_code == 200
    assert response.json()["data"] == {"outcome": "processed"}


async def test_route_answers_200_for_missing_link(api):
    response = await api.post(EVENTS_URL, json=event("customer_verified"))

    assert response.status_code == 200
    assert response.json()["data"] == {"outcome": "dropped_missing_link"}


async def test_route_swallows_processing_failure(api, db, tenant, dwolla):
    company = await make_company(db, tenant.id, status="suspended")
    dwolla.get_customer.side_effect = RuntimeError("connection reset")

    response = await api.post(
        EVENTS_URL, json=event("customer_activated", company.dwolla_uri)
    )

    assert response.status_code == 200
    assert response.json()["data"] == {"outcome": "failed"}


async def test_route_rejects_malformed_body(api):
    response = await api.post(EVENTS_URL, content=b"not json")

    assert response.status_code == 200
    assert response.json()["data"] == {"outcome": "failed"}


async def test_route_checks_signature(api, db, tenant, dwolla):
    dwolla.webhook_secret = "s3cret"
    company = await make_company(db, tenant.id, status="document")
    body = json.dumps(event("customer_verified", company.dwolla_uri)).encode()

    rejected = await api.post(
        EVENTS_URL, content=body, headers={SIGNATURE_HEADER: "0" * 64}
    )
    accepted = await api.post(
        EVENTS_URL,
        content=body,
        headers={
            SIGNATURE_HEADER: hmac.new(b"s3cret", body, hashlib.sha256).hexdigest()
        },
    )

    assert rejected.json()["data"] == {"outcome": "invalid_signature"}
    assert accepted.json()["data"] == {"outcome": "processed"}
