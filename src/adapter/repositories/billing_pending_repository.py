"""SQLAlchemy Billing Pending Repository Implementation

Implements billing pending persistence using SQLAlchemy async session.
"""

from datetime import date, datetime
from typing import Optional, List, Tuple
from sqlalchemy import delete
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.billing_pending_repository import (
    BillingPendingRepository,
    PendingWithService,
)
from src.domain.billing_pending import BillingPending, PendingStatus
from src.domain.service import Service


class SqlAlchemyBillingPendingRepository(BillingPendingRepository):
    """
    SQLAlchemy implementation of BillingPendingRepository

    Pendings are always read with an outer join on their service.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _joined(self):
        return select(BillingPending, Service).outerjoin(
            Service, Service.id == BillingPending.service_id
        )

    async def create(self, pending: BillingPending) -> BillingPending:
        """
        Create a new billing pending

        Args:
            pending: BillingPending entity to persist

        Returns:
            Created BillingPending with generated ID
        """
        self.session.add(pending)
        await self.session.flush()
        await self.session.refresh(pending)
        return pending

    async def get_with_service(
        self, pending_id: int, for_update: bool = False
    ) -> Optional[PendingWithService]:
        statement = self._joined().where(BillingPending.id == pending_id)
        if for_update:
            statement = statement.with_for_update(of=BillingPending).execution_options(
                populate_existing=True
            )
        result = await self.session.execute(statement)
        row = result.first()
        if row is None:
            return None
        return PendingWithService(pending=row[0], service=row[1])

    async def get_by_ids_with_service(
        self, pending_ids: List[int], for_update: bool = False
    ) -> List[PendingWithService]:
        """
        Retrieve pendings and their services in one batched read

        Args:
            pending_ids: Pending IDs to look up
            for_update: Lock the pending rows (FOR UPDATE OF billing_pendings)

        Returns:
            Found pendings ordered by ID
        """
        if not pending_ids:
            return []

        statement = (
            self._joined()
            .where(BillingPending.id.in_(pending_ids))
            .order_by(BillingPending.id)
        )
        if for_update:
            # The service side of the outer join is nullable and cannot be locked.
            # Rows already in the session are overwritten with the locked state.
            statement = statement.with_for_update(of=BillingPending).execution_options(
                populate_existing=True
            )

        result = await self.session.execute(statement)
        return [PendingWithService(pending=row[0], service=row[1]) for row in result.all()]

    async def get_by_service_id(self, service_id: int) -> Optional[BillingPending]:
        statement = select(BillingPending).where(BillingPending.service_id == service_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list(
        self,
        status: Optional[PendingStatus] = None,
        customer_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[PendingWithService], int]:
        """
        List pendings with optional filters, newest first

        Returns:
            Tuple of (page, total matching count)
        """
        conditions = []
        if status:
            conditions.append(BillingPending.status == status)
        if customer_id is not None:
            conditions.append(Service.customer_id == customer_id)
        if date_from:
            conditions.append(Service.service_date >= date_from)
        if date_to:
            conditions.append(Service.service_date <= date_to)

        count_statement = (
            select(func.count(BillingPending.id))
            .select_from(BillingPending)
            .outerjoin(Service, Service.id == BillingPending.service_id)
            .where(*conditions)
        )
        total = (await self.session.execute(count_statement)).scalar_one()

        statement = (
            self._joined()
            .where(*conditions)
            .order_by(BillingPending.created_at.desc(), BillingPending.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(statement)
        items = [PendingWithService(pending=row[0], service=row[1]) for row in result.all()]
        return items, total

    async def list_available(self) -> List[PendingWithService]:
        statement = (
            self._joined()
            .where(BillingPending.status == PendingStatus.PENDING)
            .order_by(BillingPending.created_at.asc(), BillingPending.id.asc())
        )
        result = await self.session.execute(statement)
        return [PendingWithService(pending=row[0], service=row[1]) for row in result.all()]

    async def update(self, pending: BillingPending) -> BillingPending:
        """
        Update an existing pending

        Args:
            pending: BillingPending with updated values

        Returns:
            Updated BillingPending
        """
        pending.updated_at = datetime.utcnow()
        self.session.add(pending)
        await self.session.flush()
        await self.session.refresh(pending)
        return pending

    async def delete_if_pending(self, pending_id: int) -> bool:
        # Conditional delete: SQLite ignores FOR UPDATE
        statement = delete(BillingPending).where(
            BillingPending.id == pending_id,
            BillingPending.status == PendingStatus.PENDING,
        )
        result = await self.session.execute(statement)
        return result.rowcount == 1
