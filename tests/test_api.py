from datetime import timedelta

import pytest

from payhub_backend.modules.auth.jwt_service import create_access_token
from payhub_backend.modules.auth.schemas import RoleSlug
from payhub_backend.modules.dwolla.statuses import ProfileStatus

from .helpers import (
    auth_headers,
    company_payload,
    make_company,
    make_document,
    make_funding_source,
    make_profile,
    make_transaction,
)


async def test_health(api):
    response = await api.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_transaction_id_is_echoed(api):
    response = await api.get("/api/health", headers={"x-transaction-id": "abc123"})

    assert response.headers["x-transaction-id"] == "abc123"


# =============================================================================
# AUTH
# =============================================================================


async def test_missing_token_is_rejected(api):
    response = await api.get("/api/tenant")

    assert response.status_code in (401, 403)


async def test_invalid_token_is_unauthorized(api):
    response = await api.get(
        "/api/tenant", headers={"Authorization": "Bearer not-a-token"}
    )

    assert response.status_code == 401


async def test_expired_token_is_unauthorized(api, tenant):
    token = create_access_token(
        user_id=1,
        tenant_id=tenant.id,
        email="admin@example.com",
        role_slug="admin",
        expires_delta=timedelta(minutes=-1),
    )

    response = await api.get(
        "/api/tenant", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 401


async def test_reader_can_read_but_not_write(api, db, tenant):
    await make_company(db, tenant.id)
    headers = auth_headers(tenant.id, RoleSlug.ADMIN_READER)

    read = await api.get("/api/tenant/company", headers=headers)
    write = await api.patch(
        "/api/tenant/company", json={"email": "x@example.com"}, headers=headers
    )

    assert read.status_code == 200
    assert write.status_code == 403


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("GET", "/api/tenant/company"),
        ("GET", "/api/profiles"),
        ("GET", "/api/transactions"),
        ("GET", "/api/documents"),
        ("GET", "/api/beneficial-owners"),
    ],
)
async def test_contractor_role_is_forbidden(api, tenant, method, path):
    response = await api.request(
        method, path, headers=auth_headers(tenant.id, RoleSlug.CONTRACTOR)
    )

    assert response.status_code == 403


# =============================================================================
# TENANT ISOLATION
# =============================================================================


@pytest.fixture
async def foreign_records(db, other_tenant):
    """Records owned by another tenant."""
    await make_company(db, other_tenant.id)
    profile = await make_profile(db, other_tenant.id, status=ProfileStatus.ACTIVE)
    source = await make_funding_source(db, other_tenant.id, profile.id)
    transaction = await make_transaction(db, other_tenant.id, profile.id, source.id)
    document = await make_document(db, other_tenant.id, profile.id)
    return {
        "profile": profile.id,
        "transaction": transaction.id,
        "document": document.id,
    }


async def test_other_tenants_company_is_invisible(api, tenant, foreign_records):
    response = await api.get("/api/tenant/company", headers=auth_headers(tenant.id))

    assert response.status_code == 404
    assert response.json()["error"]["category"] == "not_found"


async def test_other_tenants_records_are_not_found(api, tenant, foreign_records):
    headers = auth_headers(tenant.id)

    paths = [
        f"/api/profiles/{foreign_records['profile']}",
        f"/api/profiles/{foreign_records['profile']}/funding-sources",
        f"/api/transactions/{foreign_records['transaction']}",
        f"/api/documents/{foreign_records['document']}",
    ]
    for path in paths:
        response = await api.get(path, headers=headers)
        assert response.status_code == 404, path


async def test_other_tenants_records_are_not_listed(api, tenant, foreign_records):
    headers = auth_headers(tenant.id)

    for path in ("/api/profiles", "/api/transactions", "/api/documents"):
        response = await api.get(path, headers=headers)
        assert response.json()["data"]["total"] == 0, path


async def test_profiles_are_paged_and_sorted(api, db, tenant):
    for i in range(3):
        await make_profile(db, tenant.id, email=f"c{i}@example.com", last_name=f"N{i}")

    response = await api.get(
        "/api/profiles",
        params={
            "page": 2,
            "page_size": 2,
            "sort_field": "last_name",
            "sort_direction": "desc",
        },
        headers=auth_headers(tenant.id),
    )

    data = response.json()["data"]
    assert data["total"] == 3
    assert data["total_pages"] == 2
    assert data["page"] == 2
    assert [p["last_name"] for p in data["items"]] == ["N0"]


async def test_page_size_is_capped(api, tenant):
    response = await api.get(
        "/api/transactions",
        params={"page_size": 101},
        headers=auth_headers(tenant.id),
    )

    assert response.status_code == 422


async def test_ids_are_allocated_per_tenant(db, tenant, other_tenant):
    first = await make_profile(db, tenant.id)
    second = await make_profile(db, other_tenant.id)

    assert first.id == second.id == 1


# =============================================================================
# ERRORS
# =============================================================================


async def test_request_validation_error_shape(api, tenant):
    payload = company_payload()
    del payload["email"]

    response = await api.post(
        "/api/tenant/company", json=payload, headers=auth_headers(tenant.id)
    )

    assert response.status_code == 422


async def test_duplicate_company_conflicts(api, db, tenant):
    await make_company(db, tenant.id)

    response = await api.post(
        "/api/tenant/company", json=company_payload(), headers=auth_headers(tenant.id)
    )

    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["error"]["category"] == "conflict"
    assert body["data"] is None
