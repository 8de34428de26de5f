"""Contractor profile business logic.

Profiles are invited by a tenant, registered as Dwolla personal customers and
linked to bank funding sources. The onboarding status follows the Dwolla
customer status through the status mapper.
"""

from types import SimpleNamespace

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import ConflictError, NotAcceptableError, ResourceNotFoundError
from ...core.logging import get_logger
from ..commons import PaginationParams
from ..dwolla.client import DwollaClient
from ..dwolla.errors import processor_errors
from ..dwolla.status_mapper import (
    CUSTOMER_WIRE_FIELDS,
    build_update_payload,
    profile_status_for,
    updatable_values,
)
from ..dwolla.statuses import ProfileStatus
from . import crud
from .models import FundingSource, Profile
from .schemas import (
    CustomerRegistration,
    FundingSourceCreate,
    ProfileCreate,
    ProfileUpdate,
)

logger = get_logger(__name__)


def onboarding_status_for(
    profile: Profile, has_funding_source: bool
) -> ProfileStatus | None:
    """Onboarding status implied by the profile's Dwolla customer status.

    A profile that would be active stays at ``job`` while a custom job's
    onboarding is pending. None leaves the current status as it is.
    """
    status = profile_status_for(profile.payments_status, has_funding_source)
    if status == ProfileStatus.ACTIVE and profile.pending_job_id is not None:
        return ProfileStatus.JOB
    return status


async def sync_onboarding_status(db: AsyncSession, profile: Profile) -> None:
    """Derive the onboarding status from the Dwolla customer status."""
    has_source = await crud.has_funding_source(db, profile.tenant_id, profile.id)
    status = onboarding_status_for(profile, has_source)
    if status is not None and status != profile.status:
        logger.info(
            f"Profile {profile.tenant_id}/{profile.id} onboarding status "
            f"{profile.status.value} -> {status.value}"
        )
        profile.status = status


# ----- Profiles -----


async def create_profile(
    db: AsyncSession, tenant_id: int, data: ProfileCreate
) -> Profile:
    """Invite a contractor to the tenant."""
    if await crud.get_profile_by_email(db, tenant_id, str(data.email)):
        raise ConflictError(f"Profile with email '{data.email}' already exists")

    values = data.model_dump()
    values["email"] = str(data.email)
    profile = await crud.profile_crud.create(
        db, values, tenant_id, status=ProfileStatus.INVITED
    )
    await db.commit()
    return profile


async def get_profile(db: AsyncSession, tenant_id: int, profile_id: int) -> Profile:
    profile = await crud.profile_crud.get(db, tenant_id, profile_id)
    if not profile:
        raise ResourceNotFoundError("Profile", profile_id)
    return profile


async def list_profiles(
    db: AsyncSession,
    tenant_id: int,
    pagination: PaginationParams,
    status: ProfileStatus | None = None,
    search: str | None = None,
) -> tuple[list[Profile], int]:
    return await crud.profile_crud.get_multi(
        db,
        tenant_id,
        pagination,
        search_query=search,
        filters={"status": status},
    )


async def register_customer(
    db: AsyncSession,
    client: DwollaClient,
    tenant_id: int,
    profile_id: int,
    data: CustomerRegistration,
) -> Profile:
    """
    Register the profile as a Dwolla personal verified customer.

    Raises:
        ConflictError: If the profile already has a Dwolla customer
    """
    profile = await get_profile(db, tenant_id, profile_id)
    if profile.payments_uri:
        raise ConflictError(f"Profile {profile_id} is already registered")

    payload = {
        "type": "personal",
        "firstName": profile.first_name,
        "lastName": profile.last_name,
        "email": profile.email,
        "address1": data.address1,
        "city": data.city,
        "state": data.state,
        "postalCode": data.postal_code,
        "dateOfBirth": data.date_of_birth.isoformat(),
        "ssn": data.ssn,
    }
    if data.address2:
        payload["address2"] = data.address2

    with processor_errors():
        location = await client.create_customer(payload)
        customer = await client.get_customer(location)

    await crud.profile_crud.update(
        db,
        profile,
        {
            "address1": data.address1,
            "address2": data.address2,
            "city": data.city,
            "state": data.state,
            "postal_code": data.postal_code,
            "payments_uri": location,
            "payments_status": customer.status,
            "payments_type": customer.type,
        },
    )
    await sync_onboarding_status(db, profile)
    await db.commit()
    await db.refresh(profile)
    return profile


async def update_profile(
    db: AsyncSession,
    client: DwollaClient,
    tenant_id: int,
    profile_id: int,
    data: ProfileUpdate,
) -> Profile:
    """
    Update a profile, pushing the change to Dwolla once it is registered.

    Fields locked at the current customer status are left unchanged.

    Raises:
        NotAcceptableError: If the customer status allows no update
    """
    profile = await get_profile(db, tenant_id, profile_id)
    values = data.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in values:
        values["email"] = str(values["email"])

    if profile.payments_uri:
        merged = SimpleNamespace(
            **{
                attribute: values.get(attribute, getattr(profile, attribute, None))
                for attribute in CUSTOMER_WIRE_FIELDS
            }
        )
        payload = build_update_payload(profile.payments_status, merged)
        picked = updatable_values(profile.payments_status, values)
        if len(picked) < len(values):
            logger.info(
                f"Ignoring fields locked at status {profile.payments_status}",
                extra={"fields": sorted(set(values) - set(picked))},
            )
        values = picked

        with processor_errors():
            customer = await client.update_customer(profile.payments_uri, payload)
        values["payments_status"] = customer.status

    profile = await crud.profile_crud.update(db, profile, values)
    await sync_onboarding_status(db, profile)
    await db.commit()
    await db.refresh(profile)
    return profile


# ----- Funding Sources -----


async def list_funding_sources(
    db: AsyncSession, tenant_id: int, profile_id: int
) -> list[FundingSource]:
    await get_profile(db, tenant_id, profile_id)
    return await crud.get_funding_sources(db, tenant_id, profile_id)


async def get_funding_source(
    db: AsyncSession, tenant_id: int, profile_id: int, funding_source_id: int
) -> FundingSource:
    source = await crud.funding_source_crud.get(db, tenant_id, funding_source_id)
    if not source or source.profile_id != profile_id:
        raise ResourceNotFoundError("FundingSource", funding_source_id)
    return source


async def add_funding_source(
    db: AsyncSession,
    client: DwollaClient,
    tenant_id: int,
    profile_id: int,
    data: FundingSourceCreate,
) -> FundingSource:
    """Link a bank account; the first one completes onboarding."""
    profile = await get_profile(db, tenant_id, profile_id)
    if not profile.payments_uri:
        raise NotAcceptableError(
            "Profile must be registered before adding a funding source"
        )

    with processor_errors():
        location = await client.create_funding_source(
            profile.payments_uri,
            routing_number=data.routing_number,
            account_number=data.account_number,
            bank_account_type=data.bank_account_type.value,
            name=data.name,
        )
        remote = await client.get_funding_source(location)

    source = await crud.funding_source_crud.create(
        db,
        {
            "profile_id": profile.id,
            "name": data.name,
            "bank_account_type": data.bank_account_type.value,
            "account_last4": data.account_number[-4:],
            "dwolla_uri": location,
            "dwolla_status": remote.status,
        },
        tenant_id,
    )
    await sync_onboarding_status(db, profile)
    await db.commit()
    return source


async def remove_funding_source(
    db: AsyncSession,
    client: DwollaClient,
    tenant_id: int,
    profile_id: int,
    funding_source_id: int,
) -> None:
    profile = await get_profile(db, tenant_id, profile_id)
    source = await get_funding_source(db, tenant_id, profile_id, funding_source_id)

    with processor_errors():
        await client.remove_funding_source(source.dwolla_uri)

    await crud.funding_source_crud.delete(db, source)
    await sync_onboarding_status(db, profile)
    await db.commit()
