"""Typed views of Dwolla API resources and webhook envelopes."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class DwollaResource(BaseModel):
    """Common shape of HAL resources: an id and the ``_links`` map."""

    id: str | None = None
    links: dict[str, Any] = Field(default_factory=dict, alias="_links")

    class Config:
        populate_by_name = True
        extra = "ignore"

    def link(self, name: str) -> str | None:
        value = self.links.get(name)
        if isinstance(value, dict):
            return value.get("href")
        return None

    @property
    def location(self) -> str | None:
        return self.link("self")


class DwollaCustomer(DwollaResource):
    status: str
    type: str | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    email: str | None = None
    business_name: str | None = Field(default=None, alias="businessName")


class DwollaBeneficialOwner(DwollaResource):
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    verification_status: str | None = Field(default=None, alias="verificationStatus")


class BusinessClassification(BaseModel):
    """Business or industry classification offered by the processor."""

    id: str
    name: str
    industry_classifications: list["BusinessClassification"] = Field(
        default_factory=list
    )


class DwollaFundingSource(DwollaResource):
    status: str | None = None
    type: str | None = None
    bank_account_type: str | None = Field(default=None, alias="bankAccountType")
    name: str | None = None
    removed: bool = False


class TransferAmount(BaseModel):
    value: Decimal
    currency: str = "USD"


class DwollaTransfer(DwollaResource):
    status: str
    amount: TransferAmount | None = None


class DwollaDocument(DwollaResource):
    status: str | None = None
    type: str | None = None
    failure_reason: str | None = Field(default=None, alias="failureReason")


class WebhookSubscription(DwollaResource):
    url: str
    paused: bool = False


class WebhookEvent(BaseModel):
    """Envelope of an inbound Dwolla webhook."""

    id: str | None = None
    topic: str | None = None
    timestamp: datetime | None = None
    resource_id: str | None = Field(default=None, alias="resourceId")
    # Kept loose: a null or malformed map means the event has no resource link
    links: Any = Field(default=None, alias="_links")

    class Config:
        populate_by_name = True
        extra = "allow"

    @property
    def resource_href(self) -> str | None:
        if not isinstance(self.links, dict):
            return None
        resource = self.links.get("resource")
        if isinstance(resource, dict):
            return resource.get("href") or None
        return None
