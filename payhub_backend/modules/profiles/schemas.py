"""Contractor profile schemas for PayHub."""

import enum
from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from ..commons.validators import reject_placeholder_ssn
from ..dwolla.statuses import ProfileStatus


class BankAccountType(str, enum.Enum):
    CHECKING = "checking"
    SAVINGS = "savings"


# ----- Profile Schemas -----


class ProfileBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    phone: str | None = Field(None, max_length=50)
    business_name: str | None = Field(None, max_length=255)
    address1: str | None = Field(None, max_length=50)
    address2: str | None = Field(None, max_length=50)
    city: str | None = Field(None, max_length=120, pattern=r"[a-zA-Z]+")
    state: str | None = Field(None, pattern=r"^[A-Z]{2}$")
    postal_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, pattern=r"^[A-Z]{2}$")


class ProfileCreate(ProfileBase):
    """Invite a contractor."""

    pass


class ProfileUpdate(BaseModel):
    first_name: str | None = Field(None, min_length=1, max_length=120)
    last_name: str | None = Field(None, min_length=1, max_length=120)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    business_name: str | None = Field(None, max_length=255)
    address1: str | None = Field(None, max_length=50)
    address2: str | None = Field(None, max_length=50)
    city: str | None = Field(None, max_length=120, pattern=r"[a-zA-Z]+")
    state: str | None = Field(None, pattern=r"^[A-Z]{2}$")
    postal_code: str | None = Field(None, max_length=20)


class ProfileResponse(BaseModel):
    id: int
    uuid: UUID
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    business_name: str | None = None
    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    status: ProfileStatus
    pending_job_id: int | None = None
    payments_status: str | None = None
    payments_type: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CustomerRegistration(BaseModel):
    """Identity needed to register a profile as a personal verified customer."""

    date_of_birth: date
    ssn: str
    address1: str = Field(..., min_length=1, max_length=50)
    address2: str | None = Field(None, max_length=50)
    city: str = Field(..., min_length=1, max_length=120, pattern=r"[a-zA-Z]+")
    state: str = Field(..., pattern=r"^[A-Z]{2}$")
    postal_code: str = Field(..., min_length=1, max_length=20)

    @field_validator("ssn")
    @classmethod
    def ssn_not_placeholder(cls, v):
        return reject_placeholder_ssn(v)


# ----- Funding Source Schemas -----


class FundingSourceCreate(BaseModel):
    routing_number: str = Field(..., pattern=r"^\d{9}$")
    account_number: str = Field(..., pattern=r"^\d{4,17}$")
    bank_account_type: BankAccountType
    name: str = Field(..., min_length=1, max_length=50)


class FundingSourceResponse(BaseModel):
    id: int
    uuid: UUID
    profile_id: int
    name: str
    bank_account_type: str
    account_last4: str | None = None
    dwolla_status: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True
