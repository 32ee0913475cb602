"""Billing Batch Repository Interface

Defines the contract for billing batch persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Optional, List, Tuple
from src.domain.billing_batch import BillingBatch, BatchStatus


class BillingBatchRepository(ABC):
    """
    Repository interface for BillingBatch persistence

    Provides access to batches for submission, processing and reporting.
    """

    @abstractmethod
    async def create(self, batch: BillingBatch) -> BillingBatch:
        """
        Create a new billing batch

        Args:
            batch: BillingBatch entity to persist

        Returns:
            Created BillingBatch with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, batch_id: int, for_update: bool = False) -> Optional[BillingBatch]:
        """
        Retrieve batch by ID

        Args:
            batch_id: Batch ID
            for_update: Lock the row until the transaction ends

        Returns:
            BillingBatch if found, None otherwise
        """
        pass

    @abstractmethod
    async def mark_in_process(self, batch_id: int, started_at: datetime) -> bool:
        """
        Atomically move a batch to IN_PROCESS

        Only PENDING_PROCESSING or ERROR batches are moved (ERROR covers the
        automatic re-attempts of a queued job).

        Args:
            batch_id: Batch ID
            started_at: Processing start timestamp

        Returns:
            True if the batch was moved, False if it was in another status
        """
        pass

    @abstractmethod
    async def update(self, batch: BillingBatch) -> BillingBatch:
        """
        Update an existing batch

        Args:
            batch: BillingBatch entity with updated values

        Returns:
            Updated BillingBatch
        """
        pass

    @abstractmethod
    async def list(
        self,
        status: Optional[BatchStatus] = None,
        receipt_book: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[BillingBatch], int]:
        """
        List batches with optional filters, newest first

        The date range filters on issue_date.

        Returns:
            Tuple of (batches page, total matching count)
        """
        pass

    @abstractmethod
    async def list_receipt_books(self) -> List[str]:
        """
        Distinct receipt books used by any batch

        Returns:
            Receipt book codes in ascending order
        """
        pass
