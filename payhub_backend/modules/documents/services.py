"""
Verification document uploads.

Dwolla asks for documents when a customer or beneficial owner reaches the
``document`` status. An upload stores the metadata row, the blob and the
Dwolla submission together: if any step fails the row is rolled back and a
stored blob is removed again.
"""

from typing import NamedTuple
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import (
    ConflictError,
    ExternalServiceError,
    NotAcceptableError,
    ResourceNotFoundError,
)
from ...core.logging import get_logger
from ...core.utils import split_file_name
from ..commons import PaginationParams
from ..dwolla.client import DwollaClient
from ..dwolla.errors import processor_errors
from ..dwolla.statuses import CustomerStatus, DocumentType, DocumentVerificationStatus
from ..profiles import services as profile_services
from ..tenants import services as tenant_services
from . import crud
from .models import Document, DocumentOwnerType
from .storage import StorageClient

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class DocumentOwner(NamedTuple):
    owner_type: DocumentOwnerType
    owner_id: int
    dwolla_uri: str | None
    dwolla_status: str | None


async def resolve_owner(
    db: AsyncSession,
    tenant_id: int,
    owner_type: DocumentOwnerType,
    owner_id: int | None = None,
) -> DocumentOwner:
    """Load the record a document belongs to; NotFound when it does not exist."""
    if owner_type == DocumentOwnerType.COMPANY:
        company = await tenant_services.get_company(db, tenant_id)
        return DocumentOwner(
            owner_type, company.id, company.dwolla_uri, company.dwolla_status
        )
    if owner_type == DocumentOwnerType.OWNER:
        owner = await tenant_services.get_owner(db, tenant_id, owner_id)
        return DocumentOwner(
            owner_type, owner.id, owner.dwolla_uri, owner.verification_status
        )
    profile = await profile_services.get_profile(db, tenant_id, owner_id)
    return DocumentOwner(
        owner_type, profile.id, profile.payments_uri, profile.payments_status
    )


def _parse_document_type(value: str) -> DocumentType:
    try:
        return DocumentType(value)
    except ValueError:
        raise ConflictError(
            f"Invalid document type '{value}'",
            details={"allowed": [t.value for t in DocumentType]},
        )


async def _remove_orphan_blob(storage: StorageClient, key: str) -> None:
    try:
        await storage.delete(key)
    except ExternalServiceError as e:
        logger.warning(
            f"Document blob {key} could not be removed, reconciliation required",
            extra={"storage_key": key, "error": e.message},
        )


# ----- Documents -----


async def upload_document(
    db: AsyncSession,
    client: DwollaClient,
    storage: StorageClient,
    tenant_id: int,
    owner_type: DocumentOwnerType,
    owner_id: int | None,
    document_type: str,
    file_name: str,
    content: bytes,
    content_type: str | None = None,
) -> Document:
    """
    Store a verification document and submit it to Dwolla.

    Raises:
        NotAcceptableError: If the file is empty or the owner is not waiting
            for documents
        ConflictError: If the document type is unknown
    """
    if not content:
        raise NotAcceptableError("File missing")
    doc_type = _parse_document_type(document_type)

    owner = await resolve_owner(db, tenant_id, owner_type, owner_id)
    if owner.dwolla_status != CustomerStatus.DOCUMENT.value:
        raise NotAcceptableError(
            f"{owner_type.value.capitalize()} can not upload documents "
            f"at status '{owner.dwolla_status}'",
            details={"status": owner.dwolla_status},
        )

    name, ext = split_file_name(file_name)
    storage_key = f"tenants/{tenant_id}/documents/{uuid4().hex}"
    if ext:
        storage_key = f"{storage_key}.{ext}"

    stored = False
    try:
        document = await crud.document_crud.create(
            db,
            {
                "owner_type": owner.owner_type,
                "owner_id": owner.owner_id,
                "document_type": doc_type,
                "name": name,
                "ext": ext,
                "content_type": content_type,
                "size": len(content),
                "storage_key": storage_key,
            },
            tenant_id,
        )

        await storage.save(storage_key, content, content_type)
        stored = True

        with processor_errors():
            location = await client.create_document(
                owner.dwolla_uri,
                content,
                file_name,
                doc_type.value,
                content_type or DEFAULT_CONTENT_TYPE,
            )
            remote = await client.get_document(location)

        document.dwolla_uri = location
        document.failure_reason = remote.failure_reason
        if remote.status in {s.value for s in DocumentVerificationStatus}:
            document.verification_status = DocumentVerificationStatus(remote.status)
        await db.commit()
    except Exception:
        await db.rollback()
        if stored:
            await _remove_orphan_blob(storage, storage_key)
        raise

    logger.info(
        f"Document {tenant_id}/{document.id} submitted for "
        f"{owner_type.value} {owner.owner_id}"
    )
    return document


async def get_document(
    db: AsyncSession, tenant_id: int, document_id: int
) -> Document:
    document = await crud.document_crud.get(db, tenant_id, document_id)
    if not document:
        raise ResourceNotFoundError("Document", document_id)
    return document


async def list_documents(
    db: AsyncSession,
    tenant_id: int,
    pagination: PaginationParams,
    owner_type: DocumentOwnerType | None = None,
    owner_id: int | None = None,
) -> tuple[list[Document], int]:
    return await crud.document_crud.get_multi(
        db,
        tenant_id,
        pagination,
        filters={"owner_type": owner_type, "owner_id": owner_id},
    )


async def get_download_url(
    db: AsyncSession, storage: StorageClient, tenant_id: int, document_id: int
) -> str:
    document = await get_document(db, tenant_id, document_id)
    return await storage.download_url(document.storage_key, document.file_name)


async def delete_document(
    db: AsyncSession, storage: StorageClient, tenant_id: int, document_id: int
) -> None:
    """Remove the blob, then mark the row deleted."""
    document = await get_document(db, tenant_id, document_id)
    await storage.delete(document.storage_key)
    await crud.document_crud.delete(db, document)
    await db.commit()
