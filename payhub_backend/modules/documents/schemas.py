"""Compliance document schemas for PayHub."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from ..dwolla.statuses import DocumentType, DocumentVerificationStatus
from .models import DocumentOwnerType


class DocumentResponse(BaseModel):
    id: int
    uuid: UUID
    owner_type: DocumentOwnerType
    owner_id: int
    document_type: DocumentType
    name: str
    ext: str
    file_name: str
    content_type: str | None = None
    size: int
    verification_status: DocumentVerificationStatus
    failure_reason: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class DocumentDownloadResponse(BaseModel):
    url: str
