"""Tenant onboarding business logic.

Drives a tenant's business identity through Dwolla verification: company
creation, updates and retries, beneficial owners and their certification.
Every operation is scoped by the caller's ``tenant_id``.
"""

from types import SimpleNamespace

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import ConflictError, NotAcceptableError, ResourceNotFoundError
from ...core.logging import get_logger
from ..commons import PaginationParams
from ..dwolla.client import DwollaClient
from ..dwolla.errors import processor_errors
from ..dwolla.schemas import BusinessClassification
from ..dwolla.status_mapper import (
    CUSTOMER_WIRE_FIELDS,
    build_update_payload,
    updatable_values,
)
from ..dwolla.statuses import CustomerStatus
from . import crud
from .models import BeneficialOwner, Tenant, TenantCompany
from .schemas import (
    SOLE_PROPRIETORSHIP,
    BeneficialOwnerCreate,
    BeneficialOwnerUpdate,
    CompanyCreate,
    CompanyRetry,
    CompanyUpdate,
    ControllerCreate,
    OwnerAddress,
)

logger = get_logger(__name__)

RETRYABLE_STATUSES = frozenset(
    {CustomerStatus.DOCUMENT.value, CustomerStatus.RETRY.value}
)

# Columns of TenantCompany filled from a company submission
_COMPANY_COLUMNS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "address1",
    "address2",
    "city",
    "state",
    "postal_code",
    "country",
    "business_name",
    "doing_business_as",
    "business_type",
    "business_classification",
    "website",
)


# ----- Dwolla payloads -----


def _address_payload(address: OwnerAddress) -> dict:
    payload = {
        "address1": address.address1,
        "city": address.city,
        "stateProvinceRegion": address.state_province_region,
        "country": address.country,
    }
    if address.address2:
        payload["address2"] = address.address2
    if address.postal_code:
        payload["postalCode"] = address.postal_code
    return payload


def _controller_payload(controller: ControllerCreate) -> dict:
    return {
        "firstName": controller.first_name,
        "lastName": controller.last_name,
        "title": controller.title,
        "dateOfBirth": controller.date_of_birth.isoformat(),
        "ssn": controller.ssn,
        "address": _address_payload(controller.address),
    }


def business_customer_payload(data: CompanyCreate) -> dict:
    """Payload of a business verified customer."""
    payload = {
        "type": "business",
        "firstName": data.first_name,
        "lastName": data.last_name,
        "email": data.email,
        "phone": data.phone,
        "address1": data.address1,
        "city": data.city,
        "state": data.state,
        "postalCode": data.postal_code,
        "businessName": data.business_name,
        "businessType": data.business_type,
        "businessClassification": data.business_classification,
    }
    optional = {
        "address2": data.address2,
        "doingBusinessAs": data.doing_business_as,
        "ein": data.ein,
        "website": data.website,
    }
    payload.update({key: value for key, value in optional.items() if value})

    # Sole proprietors verify themselves; other business types name a controller
    if data.business_type == SOLE_PROPRIETORSHIP:
        payload["dateOfBirth"] = data.date_of_birth.isoformat()
        payload["ssn"] = data.ssn
    else:
        payload["controller"] = _controller_payload(data.controller)
    return payload


def owner_payload(data: BeneficialOwnerCreate) -> dict:
    return {
        "firstName": data.first_name,
        "lastName": data.last_name,
        "dateOfBirth": data.date_of_birth.isoformat(),
        "ssn": data.ssn,
        "address": _address_payload(data.address),
    }


def _company_values(data: CompanyCreate) -> dict:
    values = {column: getattr(data, column) for column in _COMPANY_COLUMNS}
    values["email"] = str(data.email)
    # Sole proprietors have no controller; a retry clears a stale one
    controller = None if data.business_type == SOLE_PROPRIETORSHIP else data.controller
    values["controller_first_name"] = controller.first_name if controller else None
    values["controller_last_name"] = controller.last_name if controller else None
    values["controller_title"] = controller.title if controller else None
    return values


def _owner_values(data: BeneficialOwnerCreate) -> dict:
    return {
        "first_name": data.first_name,
        "last_name": data.last_name,
        "title": data.title,
        "address1": data.address.address1,
        "address2": data.address.address2,
        "city": data.address.city,
        "state_province_region": data.address.state_province_region,
        "postal_code": data.address.postal_code,
        "country": data.address.country,
    }


# ----- Tenant / Company -----


async def get_tenant(db: AsyncSession, tenant_id: int) -> Tenant:
    tenant = await crud.get_tenant_by_id(db, tenant_id)
    if not tenant:
        raise ResourceNotFoundError("Tenant", tenant_id)
    return tenant


async def get_company(db: AsyncSession, tenant_id: int) -> TenantCompany:
    """The tenant's company, or NotFound when it was never submitted."""
    company = await crud.get_company_by_tenant(db, tenant_id)
    if not company:
        raise ResourceNotFoundError("TenantCompany", tenant_id)
    return company


async def get_company_controller(db: AsyncSession, tenant_id: int) -> TenantCompany:
    """Company whose controller fields describe the controlling person."""
    return await get_company(db, tenant_id)


async def create_company(
    db: AsyncSession,
    client: DwollaClient,
    tenant_id: int,
    data: CompanyCreate,
) -> TenantCompany:
    """
    Submit the tenant's company to Dwolla as a business verified customer.

    Raises:
        ConflictError: If the tenant already has a company
        ValidationError: If Dwolla rejects the submission
    """
    await get_tenant(db, tenant_id)
    if await crud.get_company_by_tenant(db, tenant_id):
        raise ConflictError(f"Company already exists for tenant {tenant_id}")

    with processor_errors():
        location = await client.create_customer(business_customer_payload(data))
        customer = await client.get_customer(location)

    company = await crud.company_crud.create(
        db,
        _company_values(data),
        tenant_id,
        dwolla_uri=location,
        dwolla_status=customer.status,
        dwolla_type=customer.type,
    )
    await db.commit()

    logger.info(
        f"Company created for tenant {tenant_id} with Dwolla status {customer.status}"
    )
    return company


async def update_company(
    db: AsyncSession,
    client: DwollaClient,
    tenant_id: int,
    data: CompanyUpdate,
) -> TenantCompany:
    """
    Push company changes allowed at the current Dwolla status.

    Raises:
        NotAcceptableError: If the status allows no update
    """
    company = await get_company(db, tenant_id)
    values = data.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in values:
        values["email"] = str(values["email"])

    merged = SimpleNamespace(
        **{
            attribute: values.get(attribute, getattr(company, attribute, None))
            for attribute in CUSTOMER_WIRE_FIELDS
        }
    )
    payload = build_update_payload(company.dwolla_status, merged)
    picked = updatable_values(company.dwolla_status, values)
    if len(picked) < len(values):
        logger.info(
            f"Ignoring company fields locked at status {company.dwolla_status}",
            extra={"fields": sorted(set(values) - set(picked))},
        )
    values = picked

    with processor_errors():
        customer = await client.update_customer(company.dwolla_uri, payload)

    values["dwolla_status"] = customer.status
    company = await crud.company_crud.update(db, company, values)
    await db.commit()
    return company


async def retry_company(
    db: AsyncSession,
    client: DwollaClient,
    tenant_id: int,
    data: CompanyRetry,
) -> TenantCompany:
    """
    Re-submit a corrected company after Dwolla asked for a retry or documents.

    Raises:
        NotAcceptableError: Unless the company status is retry or document
    """
    company = await get_company(db, tenant_id)
    if company.dwolla_status not in RETRYABLE_STATUSES:
        raise NotAcceptableError(
            f"Company can not be retried from status '{company.dwolla_status}'",
            details={"status": company.dwolla_status},
        )

    with processor_errors():
        customer = await client.update_customer(
            company.dwolla_uri, business_customer_payload(data)
        )

    values = _company_values(data)
    values["dwolla_status"] = customer.status
    values["dwolla_type"] = customer.type or company.dwolla_type
    company = await crud.company_crud.update(db, company, values)
    await db.commit()

    logger.info(f"Company of tenant {tenant_id} retried, status {customer.status}")
    return company


async def list_business_classifications(
    client: DwollaClient,
) -> list[BusinessClassification]:
    with processor_errors():
        return await client.list_business_classifications()


# ----- Beneficial Owners -----


async def _company_accepting_owner_changes(
    db: AsyncSession, tenant_id: int
) -> TenantCompany:
    company = await get_company(db, tenant_id)
    if company.dwolla_status == CustomerStatus.VERIFIED.value:
        raise NotAcceptableError(
            "Beneficial owners can not be changed once the company is verified"
        )
    return company


async def list_owners(
    db: AsyncSession, tenant_id: int, pagination: PaginationParams
) -> tuple[list[BeneficialOwner], int]:
    company = await get_company(db, tenant_id)
    return await crud.owner_crud.get_multi(
        db, tenant_id, pagination, filters={"company_id": company.id}
    )


async def get_owner(
    db: AsyncSession, tenant_id: int, owner_id: int
) -> BeneficialOwner:
    owner = await crud.owner_crud.get(db, tenant_id, owner_id)
    if not owner:
        raise ResourceNotFoundError("BeneficialOwner", owner_id)
    return owner


async def add_owner(
    db: AsyncSession,
    client: DwollaClient,
    tenant_id: int,
    data: BeneficialOwnerCreate,
) -> BeneficialOwner:
    company = await _company_accepting_owner_changes(db, tenant_id)

    with processor_errors():
        location = await client.create_beneficial_owner(
            company.dwolla_uri, owner_payload(data)
        )
        remote = await client.get_beneficial_owner(location)

    owner = await crud.owner_crud.create(
        db,
        _owner_values(data),
        tenant_id,
        company_id=company.id,
        dwolla_uri=location,
        verification_status=remote.verification_status,
    )
    await db.commit()
    return owner


async def edit_owner(
    db: AsyncSession,
    client: DwollaClient,
    tenant_id: int,
    owner_id: int,
    data: BeneficialOwnerUpdate,
) -> BeneficialOwner:
    await _company_accepting_owner_changes(db, tenant_id)
    owner = await get_owner(db, tenant_id, owner_id)

    with processor_errors():
        remote = await client.update_beneficial_owner(
            owner.dwolla_uri, owner_payload(data)
        )

    values = _owner_values(data)
    values["verification_status"] = remote.verification_status
    owner = await crud.owner_crud.update(db, owner, values)
    await db.commit()
    return owner


async def delete_owner(
    db: AsyncSession,
    client: DwollaClient,
    tenant_id: int,
    owner_id: int,
) -> None:
    await _company_accepting_owner_changes(db, tenant_id)
    owner = await get_owner(db, tenant_id, owner_id)

    with processor_errors():
        await client.delete_beneficial_owner(owner.dwolla_uri)

    await crud.owner_crud.delete(db, owner)
    await db.commit()


async def certify_ownership(
    db: AsyncSession, client: DwollaClient, tenant_id: int
) -> str:
    """Certify that the listed owners are complete; returns Dwolla's status."""
    company = await _company_accepting_owner_changes(db, tenant_id)
    with processor_errors():
        status = await client.certify_beneficial_ownership(company.dwolla_uri)
    logger.info(f"Beneficial ownership of tenant {tenant_id} certified: {status}")
    return status
