import logging
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(UnitOfWork):
    """Unit of work over a single AsyncSession shared with the repositories"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is not None:
            logger.debug(f"Rolling back unit of work after {exc_type.__name__}: {exc}")
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
