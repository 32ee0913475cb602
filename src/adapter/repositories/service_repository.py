"""SQLAlchemy Service Repository Implementation"""

from datetime import date, datetime
from typing import Optional, List, Tuple
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.service_repository import ServiceRepository
from src.domain.service import Service, ServiceStatus


class SqlAlchemyServiceRepository(ServiceRepository):
    """
    SQLAlchemy implementation of ServiceRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, service: Service) -> Service:
        self.session.add(service)
        await self.session.flush()
        await self.session.refresh(service)
        return service

    async def get_by_id(self, service_id: int) -> Optional[Service]:
        statement = select(Service).where(Service.id == service_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_ids(self, service_ids: List[int]) -> List[Service]:
        if not service_ids:
            return []
        statement = select(Service).where(Service.id.in_(service_ids)).order_by(Service.id)
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list(
        self,
        customer_id: Optional[int] = None,
        status: Optional[ServiceStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Service], int]:
        conditions = []
        if customer_id is not None:
            conditions.append(Service.customer_id == customer_id)
        if status:
            conditions.append(Service.status == status)
        if date_from:
            conditions.append(Service.service_date >= date_from)
        if date_to:
            conditions.append(Service.service_date <= date_to)

        count_statement = select(func.count()).select_from(Service).where(*conditions)
        total = (await self.session.execute(count_statement)).scalar_one()

        statement = (
            select(Service)
            .where(*conditions)
            .order_by(Service.created_at.desc(), Service.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all()), total

    async def list_by_status(self, status: ServiceStatus) -> List[Service]:
        statement = (
            select(Service)
            .where(Service.status == status)
            .order_by(Service.created_at.asc(), Service.id.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list_by_customer(self, customer_id: int) -> List[Service]:
        statement = (
            select(Service)
            .where(Service.customer_id == customer_id)
            .order_by(Service.service_date.desc(), Service.id.desc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update(self, service: Service) -> Service:
        service.updated_at = datetime.utcnow()
        self.session.add(service)
        await self.session.flush()
        await self.session.refresh(service)
        return service

    async def delete(self, service: Service) -> None:
        await self.session.delete(service)
        await self.session.flush()
