"""Tenant and company onboarding schemas for PayHub."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from ..commons.validators import reject_placeholder_ssn

SOLE_PROPRIETORSHIP = "soleProprietorship"

# ----- Tenant Schemas -----


class TenantResponse(BaseModel):
    id: int
    uuid: UUID
    name: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


# ----- Controller / Owner Schemas -----


class OwnerAddress(BaseModel):
    """Address of a controller or beneficial owner (may be outside the US)."""

    address1: str = Field(..., min_length=1, max_length=50)
    address2: str | None = Field(None, max_length=50)
    city: str = Field(..., min_length=1, max_length=120)
    state_province_region: str = Field(..., min_length=1, max_length=50)
    postal_code: str | None = Field(None, max_length=20)
    country: str = Field(..., pattern=r"^[A-Z]{2}$")


class PersonIdentity(BaseModel):
    """Identity of a natural person submitted for verification."""

    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str = Field(..., min_length=1, max_length=120)
    date_of_birth: date
    ssn: str
    address: OwnerAddress

    @field_validator("ssn")
    @classmethod
    def ssn_not_placeholder(cls, v):
        return reject_placeholder_ssn(v)


class ControllerCreate(PersonIdentity):
    title: str = Field(..., min_length=1, max_length=120)


class ControllerResponse(BaseModel):
    first_name: str | None = Field(None, validation_alias="controller_first_name")
    last_name: str | None = Field(None, validation_alias="controller_last_name")
    title: str | None = Field(None, validation_alias="controller_title")

    class Config:
        from_attributes = True


class BeneficialOwnerCreate(PersonIdentity):
    title: str | None = Field(None, max_length=120)


class BeneficialOwnerUpdate(BeneficialOwnerCreate):
    """Edits re-submit the owner's full identity."""

    pass


class BeneficialOwnerResponse(BaseModel):
    id: int
    uuid: UUID
    company_id: int
    first_name: str
    last_name: str
    title: str | None = None
    address1: str
    address2: str | None = None
    city: str
    state_province_region: str
    postal_code: str | None = None
    country: str
    verification_status: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OwnershipCertificationResponse(BaseModel):
    status: str


# ----- Company Schemas -----


class CompanyBase(BaseModel):
    """Contact, address and business fields of a tenant company."""

    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    address1: str = Field(..., min_length=1, max_length=50)
    address2: str | None = Field(None, max_length=50)
    city: str = Field(..., min_length=1, max_length=120, pattern=r"[a-zA-Z]+")
    state: str = Field(..., pattern=r"^[A-Z]{2}$")
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(default="US", pattern=r"^[A-Z]{2}$")
    business_name: str = Field(..., min_length=1, max_length=255)
    doing_business_as: str | None = Field(None, max_length=255)
    business_type: str = Field(..., min_length=1, max_length=50)
    business_classification: str = Field(..., min_length=1, max_length=64)
    ein: str | None = Field(None, max_length=20)
    website: str | None = Field(None, max_length=255)


class CompanyCreate(CompanyBase):
    """Company submission: business identity plus its controller.

    Sole proprietors verify with their own date of birth and SSN and name
    no controller; every other business type must name one.
    """

    date_of_birth: date
    ssn: str
    controller: ControllerCreate | None = None

    @field_validator("ssn")
    @classmethod
    def ssn_not_placeholder(cls, v):
        return reject_placeholder_ssn(v)

    @model_validator(mode="after")
    def controller_required_unless_sole_proprietor(self) -> "CompanyCreate":
        if self.business_type != SOLE_PROPRIETORSHIP and self.controller is None:
            raise ValueError(
                f"controller is required for business type '{self.business_type}'"
            )
        return self


class CompanyRetry(CompanyCreate):
    """Corrected full payload re-submitted after a retry/document request."""

    pass


class CompanyUpdate(BaseModel):
    """Fields that may be pushed to Dwolla, depending on the current status."""

    first_name: str | None = Field(None, min_length=1, max_length=120)
    last_name: str | None = Field(None, min_length=1, max_length=120)
    email: EmailStr | None = None
    phone: str | None = Field(None, min_length=1, max_length=50)
    business_name: str | None = Field(None, min_length=1, max_length=255)
    address1: str | None = Field(None, min_length=1, max_length=50)
    address2: str | None = Field(None, max_length=50)
    city: str | None = Field(None, min_length=1, max_length=120, pattern=r"[a-zA-Z]+")
    state: str | None = Field(None, pattern=r"^[A-Z]{2}$")
    postal_code: str | None = Field(None, min_length=1, max_length=20)


class CompanyResponse(BaseModel):
    id: int
    uuid: UUID
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    address1: str
    address2: str | None = None
    city: str
    state: str
    postal_code: str
    country: str
    business_name: str
    doing_business_as: str | None = None
    business_type: str
    business_classification: str
    website: str | None = None
    dwolla_status: str | None = None
    dwolla_type: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BusinessClassificationResponse(BaseModel):
    id: str
    name: str
    industry_classifications: list["BusinessClassificationResponse"] = []

    class Config:
        from_attributes = True
