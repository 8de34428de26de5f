"""Contractor payments.

A transaction moves money from the tenant's Dwolla balance to a contractor's
bank account. After creation its status only changes through cancellation or
transfer webhooks.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import NotAcceptableError, ResourceNotFoundError
from ...core.logging import get_logger
from ..commons import PaginationParams
from ..dwolla.client import DwollaClient
from ..dwolla.errors import processor_errors
from ..dwolla.status_mapper import transfer_status_for_topic
from ..dwolla.statuses import (
    TERMINAL_TRANSFER_STATUSES,
    CustomerStatus,
    EventTopic,
    ProfileStatus,
    TransferStatus,
)
from ..jobs import services as job_services
from ..profiles import services as profile_services
from ..tenants import services as tenant_services
from . import crud
from .models import Transaction
from .schemas import TransactionCreate

logger = get_logger(__name__)


async def get_transaction(
    db: AsyncSession, tenant_id: int, transaction_id: int
) -> Transaction:
    transaction = await crud.transaction_crud.get(db, tenant_id, transaction_id)
    if not transaction:
        raise ResourceNotFoundError("Transaction", transaction_id)
    return transaction


async def list_transactions(
    db: AsyncSession,
    tenant_id: int,
    pagination: PaginationParams,
    status: TransferStatus | None = None,
    profile_id: int | None = None,
    job_id: int | None = None,
) -> tuple[list[Transaction], int]:
    return await crud.transaction_crud.get_multi(
        db,
        tenant_id,
        pagination,
        filters={"status": status, "profile_id": profile_id, "job_id": job_id},
    )


async def create_transaction(
    db: AsyncSession,
    client: DwollaClient,
    tenant_id: int,
    data: TransactionCreate,
) -> Transaction:
    """
    Pay a contractor from the tenant's Dwolla balance.

    Raises:
        NotAcceptableError: If the profile is not active, the job is inactive,
            the company is not verified or has no balance funding source
        ResourceNotFoundError: If the profile, funding source or job is unknown
    """
    profile = await profile_services.get_profile(db, tenant_id, data.profile_id)
    if profile.status != ProfileStatus.ACTIVE:
        raise NotAcceptableError(
            f"Profile {profile.id} can not be paid at status '{profile.status.value}'",
            details={"status": profile.status.value},
        )
    destination = await profile_services.get_funding_source(
        db, tenant_id, profile.id, data.funding_source_id
    )
    if data.job_id is not None:
        job = await job_services.get_job(db, tenant_id, data.job_id)
        if not job.is_active:
            raise NotAcceptableError(f"Job {job.id} is not active")

    company = await tenant_services.get_company(db, tenant_id)
    if company.dwolla_status != CustomerStatus.VERIFIED.value:
        raise NotAcceptableError(
            "Company must be verified before paying contractors",
            details={"status": company.dwolla_status},
        )

    with processor_errors():
        balance = await client.get_balance_funding_source(company.dwolla_uri)
        if balance is None:
            raise NotAcceptableError("Company has no Dwolla balance to pay from")
        location = await client.create_transfer(
            balance.location, destination.dwolla_uri, data.amount
        )

    transaction = await crud.transaction_crud.create(
        db,
        {
            "profile_id": profile.id,
            "funding_source_id": destination.id,
            "job_id": data.job_id,
            "amount": data.amount,
            "description": data.description,
        },
        tenant_id,
        external_id=location,
        status=TransferStatus.PENDING,
    )
    await db.commit()

    logger.info(
        f"Transaction {tenant_id}/{transaction.id} created for profile "
        f"{profile.id}: {data.amount} USD"
    )
    return transaction


async def cancel_transaction(
    db: AsyncSession,
    client: DwollaClient,
    tenant_id: int,
    transaction_id: int,
) -> Transaction:
    """
    Cancel a pending transaction.

    Raises:
        NotAcceptableError: If the transaction is no longer pending or Dwolla
            refuses the cancellation
    """
    transaction = await get_transaction(db, tenant_id, transaction_id)
    if transaction.status != TransferStatus.PENDING:
        raise NotAcceptableError(
            f"Transaction can not be cancelled at status '{transaction.status.value}'",
            details={"status": transaction.status.value},
        )

    with processor_errors():
        cancelled = await client.cancel_transfer(transaction.external_id)
    if not cancelled:
        raise NotAcceptableError("Dwolla did not cancel the transfer")

    transaction = await crud.transaction_crud.update(
        db, transaction, {"status": TransferStatus.CANCELLED}
    )
    await db.commit()
    return transaction


async def update_transaction_status(
    db: AsyncSession, transaction: Transaction, topic: EventTopic
) -> bool:
    """
    Apply a transfer webhook topic to a transaction.

    ``transfer_created`` carries no new information. A terminal status
    replacing a different terminal status is applied (latest wins) and logged
    as a warning.

    Returns:
        True when the row changed
    """
    status = transfer_status_for_topic(topic)
    if status is None or status == TransferStatus.PENDING:
        return False
    if status == transaction.status:
        return False

    if transaction.status in TERMINAL_TRANSFER_STATUSES:
        logger.warning(
            f"Transaction {transaction.tenant_id}/{transaction.id} moves from "
            f"terminal status {transaction.status.value} to {status.value}",
            extra={"topic": topic.value, "external_id": transaction.external_id},
        )

    transaction.status = status
    await db.flush()
    return True
