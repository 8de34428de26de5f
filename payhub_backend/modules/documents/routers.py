"""Verification document API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ..auth.dependencies import AdminReaderUser, AdminUser
from ..commons import BaseResponse, PaginatedResponse, Pagination
from ..dwolla.client import DwollaClient, get_dwolla_client
from . import services
from .models import DocumentOwnerType
from .schemas import DocumentDownloadResponse, DocumentResponse
from .storage import StorageClient, get_storage_client

router = APIRouter(prefix="/documents", tags=["Documents"])

DbSession = Annotated[AsyncSession, Depends(get_db)]
Dwolla = Annotated[DwollaClient, Depends(get_dwolla_client)]
Storage = Annotated[StorageClient, Depends(get_storage_client)]


async def _upload(
    db: AsyncSession,
    client: DwollaClient,
    storage: StorageClient,
    tenant_id: int,
    owner_type: DocumentOwnerType,
    owner_id: int | None,
    document_type: str,
    file: UploadFile,
) -> BaseResponse[DocumentResponse]:
    content = await file.read()
    document = await services.upload_document(
        db,
        client,
        storage,
        tenant_id,
        owner_type,
        owner_id,
        document_type,
        file.filename or "document",
        content,
        file.content_type,
    )
    return BaseResponse(
        success=True,
        message="Document uploaded successfully",
        data=DocumentResponse.model_validate(document),
    )


@router.get("", response_model=BaseResponse[PaginatedResponse[DocumentResponse]])
async def list_documents(
    current_user: AdminReaderUser,
    db: DbSession,
    pagination: Pagination,
    owner_type: DocumentOwnerType | None = None,
    owner_id: int | None = None,
):
    documents, total = await services.list_documents(
        db,
        current_user.tenant_id,
        pagination,
        owner_type=owner_type,
        owner_id=owner_id,
    )
    return BaseResponse(
        success=True,
        data=PaginatedResponse.of(
            [DocumentResponse.model_validate(d) for d in documents], total, pagination
        ),
    )


@router.post("/company", response_model=BaseResponse[DocumentResponse])
async def upload_company_document(
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
    storage: Storage,
    document_type: str = Form(...),
    file: UploadFile = File(...),
):
    """Upload a verification document for the tenant's company."""
    return await _upload(
        db,
        client,
        storage,
        current_user.tenant_id,
        DocumentOwnerType.COMPANY,
        None,
        document_type,
        file,
    )


@router.post("/owners/{owner_id}", response_model=BaseResponse[DocumentResponse])
async def upload_owner_document(
    owner_id: int,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
    storage: Storage,
    document_type: str = Form(...),
    file: UploadFile = File(...),
):
    """Upload a verification document for a beneficial owner."""
    return await _upload(
        db,
        client,
        storage,
        current_user.tenant_id,
        DocumentOwnerType.OWNER,
        owner_id,
        document_type,
        file,
    )


@router.post("/profiles/{profile_id}", response_model=BaseResponse[DocumentResponse])
async def upload_profile_document(
    profile_id: int,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
    storage: Storage,
    document_type: str = Form(...),
    file: UploadFile = File(...),
):
    """Upload a verification document for a contractor."""
    return await _upload(
        db,
        client,
        storage,
        current_user.tenant_id,
        DocumentOwnerType.PROFILE,
        profile_id,
        document_type,
        file,
    )


@router.get("/{document_id}", response_model=BaseResponse[DocumentResponse])
async def get_document(
    document_id: int, current_user: AdminReaderUser, db: DbSession
):
    document = await services.get_document(db, current_user.tenant_id, document_id)
    return BaseResponse(success=True, data=DocumentResponse.model_validate(document))


@router.get(
    "/{document_id}/download", response_model=BaseResponse[DocumentDownloadResponse]
)
async def get_download_url(
    document_id: int,
    current_user: AdminReaderUser,
    db: DbSession,
    storage: Storage,
):
    url = await services.get_download_url(
        db, storage, current_user.tenant_id, document_id
    )
    return BaseResponse(success=True, data=DocumentDownloadResponse(url=url))


@router.delete("/{document_id}", response_model=BaseResponse[None])
async def delete_document(
    document_id: int,
    current_user: AdminUser,
    db: DbSession,
    storage: Storage,
):
    await services.delete_document(db, storage, current_user.tenant_id, document_id)
    return BaseResponse(success=True, message="Document deleted successfully")
