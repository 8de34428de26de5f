"""CRUD operations for the transactions module."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.base_crud import BaseCRUD
from .models import Transaction
from .schemas import TransactionCreate


class TransactionCRUD(BaseCRUD[Transaction, TransactionCreate, dict]):
    search_fields = ["description"]


transaction_crud = TransactionCRUD(Transaction)


async def get_transaction_by_external_id_for_all_tenants(
    db: AsyncSession, external_id: str
) -> Transaction | None:
    """Resolve a Dwolla transfer across every tenant (webhook path)."""
    result = await db.execute(
        select(Transaction).where(Transaction.external_id == external_id)
    )
    return result.scalar_one_or_none()
