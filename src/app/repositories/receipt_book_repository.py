"""Receipt Book Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.receipt_book import ReceiptBook


class ReceiptBookRepository(ABC):
    """
    Repository interface for ReceiptBook rows

    The row of a receipt book acts as the lock that serializes invoice
    number allocation for that book across concurrent transactions.
    """

    @abstractmethod
    async def ensure(self, code: str) -> ReceiptBook:
        """
        Get the receipt book row, creating it if missing

        Safe under concurrent creation of the same code.

        Args:
            code: Receipt book code

        Returns:
            The existing or newly created ReceiptBook
        """
        pass

    @abstractmethod
    async def lock(self, code: str) -> Optional[ReceiptBook]:
        """
        Lock the receipt book row until the current transaction ends

        Must be the first write of the transaction that allocates numbers.
        Other transactions calling lock() for the same code block until
        this one commits or rolls back.

        Args:
            code: Receipt book code

        Returns:
            The locked ReceiptBook, or None if it does not exist
        """
        pass
