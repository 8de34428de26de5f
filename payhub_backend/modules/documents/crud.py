"""CRUD operations for the documents module."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.base_crud import BaseCRUD
from .models import Document


class DocumentCRUD(BaseCRUD[Document, dict, dict]):
    search_fields = ["name"]


document_crud = DocumentCRUD(Document)


async def get_document_by_dwolla_uri_for_all_tenants(
    db: AsyncSession, dwolla_uri: str
) -> Document | None:
    """Resolve a Dwolla document across every tenant (webhook path)."""
    result = await db.execute(
        select(Document).where(
            Document.dwolla_uri == dwolla_uri,
            Document.deleted_at.is_(None),
        )
    )
    return result.scalars().first()
