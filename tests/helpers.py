"""Factories and request helpers shared by the tests."""

from decimal import Decimal

from payhub_backend.modules.auth.jwt_service import create_access_token
from payhub_backend.modules.auth.schemas import RoleSlug
from payhub_backend.modules.documents.crud import document_crud
from payhub_backend.modules.documents.models import DocumentOwnerType
from payhub_backend.modules.dwolla.statuses import (
    DocumentType,
    ProfileStatus,
    TransferStatus,
)
from payhub_backend.modules.jobs.crud import job_crud
from payhub_backend.modules.profiles.crud import funding_source_crud, profile_crud
from payhub_backend.modules.tenants.crud import company_crud, owner_crud
from payhub_backend.modules.transactions.crud import transaction_crud

DWOLLA_API = "https://api-sandbox.dwolla.com"


def auth_headers(tenant_id: int, role: RoleSlug = RoleSlug.ADMIN) -> dict:
    token = create_access_token(
        user_id=1, tenant_id=tenant_id, email="admin@example.com", role_slug=role.value
    )
    return {"Authorization": f"Bearer {token}"}


def customer_uri(name: str) -> str:
    return f"{DWOLLA_API}/customers/{name}"


def company_payload(**overrides) -> dict:
    payload = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@acme.example",
        "phone": "5555550100",
        "address1": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "postal_code": "62701",
        "business_name": "Acme Staffing LLC",
        "business_type": "llc",
        "business_classification": "9ed3f670-7d6f-11e3-b1ce-5404a6144203",
        "ein": "00-0000000",
        "date_of_birth": "1980-01-01",
        "ssn": "1234",
        "controller": {
            "first_name": "Grace",
            "last_name": "Hopper",
            "title": "CEO",
            "date_of_birth": "1975-12-09",
            "ssn": "6789",
            "address": {
                "address1": "2 Side St",
                "city": "Springfield",
                "state_province_region": "IL",
                "postal_code": "62701",
                "country": "US",
            },
        },
    }
    payload.update(overrides)
    return payload


async def make_company(db, tenant_id: int, status: str = "verified", **overrides):
    values = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@acme.example",
        "address1": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "postal_code": "62701",
        "business_name": "Acme Staffing LLC",
        "business_type": "llc",
        "business_classification": "9ed3f670-7d6f-11e3-b1ce-5404a6144203",
        "dwolla_uri": customer_uri(f"company-{tenant_id}"),
        "dwolla_status": status,
        "dwolla_type": "business",
    }
    values.update(overrides)
    company = await company_crud.create(db, values, tenant_id)
    await db.commit()
    return company


async def make_owner(db, tenant_id: int, company_id: int, **overrides):
    values = {
        "company_id": company_id,
        "first_name": "Alan",
        "last_name": "Turing",
        "address1": "3 Park Ave",
        "city": "London",
        "state_province_region": "LDN",
        "country": "GB",
        "dwolla_uri": f"{DWOLLA_API}/beneficial-owners/owner-{tenant_id}",
        "verification_status": "incomplete",
    }
    values.update(overrides)
    owner = await owner_crud.create(db, values, tenant_id)
    await db.commit()
    return owner


async def make_profile(
    db,
    tenant_id: int,
    status: ProfileStatus = ProfileStatus.INVITED,
    **overrides,
):
    values = {
        "first_name": "Linus",
        "last_name": "Torvalds",
        "email": f"linus-{tenant_id}@example.com",
        "status": status,
    }
    values.update(overrides)
    profile = await profile_crud.create(db, values, tenant_id)
    await db.commit()
    return profile


async def make_funding_source(db, tenant_id: int, profile_id: int, **overrides):
    values = {
        "profile_id": profile_id,
        "name": "Checking",
        "bank_account_type": "checking",
        "account_last4": "6789",
        "dwolla_uri": f"{DWOLLA_API}/funding-sources/fs-{tenant_id}-{profile_id}",
        "dwolla_status": "verified",
    }
    values.update(overrides)
    source = await funding_source_crud.create(db, values, tenant_id)
    await db.commit()
    return source


async def make_transaction(
    db,
    tenant_id: int,
    profile_id: int,
    funding_source_id: int,
    status: TransferStatus = TransferStatus.PENDING,
    external_id: str | None = None,
):
    transaction = await transaction_crud.create(
        db,
        {
            "profile_id": profile_id,
            "funding_source_id": funding_source_id,
            "amount": Decimal("125.00"),
        },
        tenant_id,
        external_id=external_id or f"{DWOLLA_API}/transfers/t-{tenant_id}",
        status=status,
    )
    await db.commit()
    return transaction


async def make_document(db, tenant_id: int, owner_id: int, **overrides):
    values = {
        "owner_type": DocumentOwnerType.PROFILE,
        "owner_id": owner_id,
        "document_type": DocumentType.PASSPORT,
        "name": "passport",
        "ext": "png",
        "size": 3,
        "storage_key": f"tenants/{tenant_id}/documents/passport.png",
        "dwolla_uri": f"{DWOLLA_API}/documents/doc-{tenant_id}",
    }
    values.update(overrides)
    document = await document_crud.create(db, values, tenant_id)
    await db.commit()
    return document


async def make_job(db, tenant_id: int, **overrides):
    values = {
        "name": "Warehouse shift",
        "rate": Decimal("25.00"),
        "is_active": True,
        "is_custom": False,
    }
    values.update(overrides)
    job = await job_crud.create(db, values, tenant_id)
    await db.commit()
    return job
