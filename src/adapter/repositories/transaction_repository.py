"""SQLAlchemy implementation of TransactionRepository

Provides persistence for Transaction entities with row-level locking so a
webhook's read-modify-write of one transaction is atomic.
"""

from typing import Any, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.transaction_repository import TransactionRepository
from src.domain.transaction import Transaction


class SqlAlchemyTransactionRepository(TransactionRepository):
    """
    SQLAlchemy implementation of TransactionRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Partial updates keyed by ref_id
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, transaction: Transaction) -> Transaction:
        self.session.add(transaction)
        await self.session.flush()
        await self.session.refresh(transaction)
        return transaction

    async def get_by_ref_id(self, ref_id: str, for_update: bool = False) -> Optional[Transaction]:
        """
        Retrieve transaction by reference id with optional row-level locking

        Args:
            ref_id: Merchant reference id
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Transaction if found, None otherwise
        """
        stmt = select(Transaction).where(Transaction.ref_id == ref_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, ref_id: str, changes: dict[str, Any]) -> Transaction:
        """
        Apply a partial update to a transaction

        Note:
            Should be called within a transaction with the row already locked
        """
        transaction = await self.get_by_ref_id(ref_id)
        if transaction is None:
            raise LookupError(f"Transaction with ref_id {ref_id} not found for update")

        for field_name, value in changes.items():
            setattr(transaction, field_name, value)

        self.session.add(transaction)
        await self.session.flush()
        return transaction
