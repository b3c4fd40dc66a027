"""Transaction Repository Interface

Defines the contract for transaction persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from src.domain.transaction import Transaction


class TransactionRepository(ABC):
    """
    Repository interface for Transaction persistence

    Webhook reconciliation relies on per-record read-modify-write atomicity,
    so get_by_ref_id supports row-level locking.
    """

    @abstractmethod
    async def create(self, transaction: Transaction) -> Transaction:
        """
        Persist a new transaction

        Args:
            transaction: Transaction entity to persist

        Returns:
            Persisted Transaction
        """
        pass

    @abstractmethod
    async def get_by_ref_id(self, ref_id: str, for_update: bool = False) -> Optional[Transaction]:
        """
        Retrieve transaction by reference id

        Args:
            ref_id: Merchant reference id
            for_update: If True, lock the row until the unit of work ends

        Returns:
            Transaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, ref_id: str, changes: dict[str, Any]) -> Transaction:
        """
        Apply a partial update to a transaction

        Fields absent from changes are left untouched.

        Args:
            ref_id: Merchant reference id
            changes: Field name to new value

        Returns:
            Updated Transaction

        Raises:
            LookupError: If no transaction has the given ref_id
        """
        pass
