"""Transaction API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ..auth.dependencies import AdminReaderUser, AdminUser
from ..commons import BaseResponse, PaginatedResponse, Pagination
from ..dwolla.client import DwollaClient, get_dwolla_client
from ..dwolla.statuses import TransferStatus
from . import services
from .schemas import TransactionCreate, TransactionResponse

router = APIRouter(prefix="/transactions", tags=["Transactions"])

DbSession = Annotated[AsyncSession, Depends(get_db)]
Dwolla = Annotated[DwollaClient, Depends(get_dwolla_client)]


@router.get("", response_model=BaseResponse[PaginatedResponse[TransactionResponse]])
async def list_transactions(
    current_user: AdminReaderUser,
    db: DbSession,
    pagination: Pagination,
    status: TransferStatus | None = None,
    profile_id: int | None = None,
    job_id: int | None = None,
):
    transactions, total = await services.list_transactions(
        db,
        current_user.tenant_id,
        pagination,
        status=status,
        profile_id=profile_id,
        job_id=job_id,
    )
    items = [TransactionResponse.model_validate(t) for t in transactions]
    return BaseResponse(
        success=True, data=PaginatedResponse.of(items, total, pagination)
    )


@router.post("", response_model=BaseResponse[TransactionResponse])
async def create_transaction(
    data: TransactionCreate,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
):
    """Pay a contractor."""
    transaction = await services.create_transaction(
        db, client, current_user.tenant_id, data
    )
    return BaseResponse(
        success=True,
        message="Transaction created successfully",
        data=TransactionResponse.model_validate(transaction),
    )


@router.get("/{transaction_id}", response_model=BaseResponse[TransactionResponse])
async def get_transaction(
    transaction_id: int, current_user: AdminReaderUser, db: DbSession
):
    transaction = await services.get_transaction(
        db, current_user.tenant_id, transaction_id
    )
    return BaseResponse(
        success=True, data=TransactionResponse.model_validate(transaction)
    )


@router.post(
    "/{transaction_id}/cancel", response_model=BaseResponse[TransactionResponse]
)
async def cancel_transaction(
    transaction_id: int,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
):
    transaction = await services.cancel_transaction(
        db, client, current_user.tenant_id, transaction_id
    )
    return BaseResponse(
        success=True,
        message="Transaction cancelled successfully",
        data=TransactionResponse.model_validate(transaction),
    )
