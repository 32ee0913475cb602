"""SQLAlchemy Billing Batch Repository Implementation

Implements billing batch persistence using SQLAlchemy async session.
"""

from datetime import date, datetime
from typing import Optional, List, Tuple
from sqlalchemy import update
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.billing_batch_repository import BillingBatchRepository
from src.domain.billing_batch import BillingBatch, BatchStatus


class SqlAlchemyBillingBatchRepository(BillingBatchRepository):
    """
    SQLAlchemy implementation of BillingBatchRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, batch: BillingBatch) -> BillingBatch:
        """
        Create a new billing batch

        Args:
            batch: BillingBatch entity to persist

        Returns:
            Created BillingBatch with generated ID
        """
        self.session.add(batch)
        await self.session.flush()
        await self.session.refresh(batch)
        return batch

    async def get_by_id(self, batch_id: int, for_update: bool = False) -> Optional[BillingBatch]:
        """
        Retrieve batch by ID

        Args:
            batch_id: Batch ID
            for_update: Lock the row until the transaction ends

        Returns:
            BillingBatch if found, None otherwise
        """
        statement = select(BillingBatch).where(BillingBatch.id == batch_id)
        if for_update:
            statement = statement.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def mark_in_process(self, batch_id: int, started_at: datetime) -> bool:
        """
        Atomically move a batch to IN_PROCESS

        Conditional UPDATE, so two callers racing on the same batch cannot
        both succeed.

        Returns:
            True if the batch was moved, False otherwise
        """
        statement = (
            update(BillingBatch)
            .where(BillingBatch.id == batch_id)
            .where(BillingBatch.status.in_([BatchStatus.PENDING_PROCESSING, BatchStatus.ERROR]))
            .values(
                status=BatchStatus.IN_PROCESS,
                processing_started_at=started_at,
                processing_completed_at=None,
                updated_at=started_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        moved = result.rowcount == 1

        if moved:
            # Keep an already loaded instance in sync with the row
            batch = await self.session.get(BillingBatch, batch_id)
            if batch is not None:
                await self.session.refresh(batch)

        return moved

    async def update(self, batch: BillingBatch) -> BillingBatch:
        """
        Update an existing batch

        Args:
            batch: BillingBatch entity with updated values

        Returns:
            Updated BillingBatch
        """
        batch.updated_at = datetime.utcnow()
        self.session.add(batch)
        await self.session.flush()
        await self.session.refresh(batch)
        return batch

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

        Returns:
            Tuple of (batches page, total matching count)
        """
        conditions = []
        if status:
            conditions.append(BillingBatch.status == status)
        if receipt_book:
            conditions.append(BillingBatch.receipt_book == receipt_book)
        if date_from:
            conditions.append(BillingBatch.issue_date >= date_from)
        if date_to:
            conditions.append(BillingBatch.issue_date <= date_to)

        count_statement = select(func.count()).select_from(BillingBatch).where(*conditions)
        total = (await self.session.execute(count_statement)).scalar_one()

        statement = (
            select(BillingBatch)
            .where(*conditions)
            .order_by(BillingBatch.created_at.desc(), BillingBatch.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all()), total

    async def list_receipt_books(self) -> List[str]:
        statement = (
            select(BillingBatch.receipt_book)
            .distinct()
            .order_by(BillingBatch.receipt_book.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())
