"""Transaction schemas for PayHub."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from ..dwolla.statuses import TransferStatus


class TransactionCreate(BaseModel):
    """Pay a contractor from the tenant's Dwolla balance."""

    profile_id: int
    funding_source_id: int
    job_id: int | None = None
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    description: str | None = Field(None, max_length=255)


class TransactionResponse(BaseModel):
    id: int
    uuid: UUID
    profile_id: int
    funding_source_id: int
    job_id: int | None = None
    amount: Decimal
    currency: str
    description: str | None = None
    status: TransferStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
