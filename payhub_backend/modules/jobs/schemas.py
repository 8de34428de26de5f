"""Job schemas for PayHub."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class JobCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: str | None = Field(None, max_length=2000)
    rate: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    is_active: bool = True
    is_custom: bool = False


class JobUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=120)
    description: str | None = Field(None, max_length=2000)
    rate: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    is_active: bool | None = None
    is_custom: bool | None = None


class JobResponse(BaseModel):
    id: int
    uuid: UUID
    name: str
    description: str | None = None
    rate: Decimal | None = None
    is_active: bool
    is_custom: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
