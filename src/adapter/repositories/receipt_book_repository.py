"""SQLAlchemy Receipt Book Repository Implementation

The receipt book row is the lock that serializes invoice number allocation:
the allocating transaction updates it first, so a concurrent transaction
for the same book waits (row lock on PostgreSQL, write lock on SQLite)
until the first one commits or rolls back.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.receipt_book_repository import ReceiptBookRepository
from src.domain.receipt_book import ReceiptBook

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SqlAlchemyReceiptBookRepository(ReceiptBookRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get(self, code: str, for_update: bool = False) -> Optional[ReceiptBook]:
        statement = select(ReceiptBook).where(ReceiptBook.code == code)
        if for_update:
            statement = statement.with_for_update()
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def ensure(self, code: str) -> ReceiptBook:
        """
        Get the receipt book row, creating it if missing

        Uses INSERT ... ON CONFLICT DO NOTHING where the dialect supports it
        so that concurrent creators of the same code do not fail.
        """
        existing = await self._get(code)
        if existing is not None:
            return existing

        insert = _UPSERT_DIALECTS.get(self.session.get_bind().dialect.name)
        if insert is not None:
            statement = (
                insert(ReceiptBook)
                .values(code=code, created_at=datetime.utcnow())
                .on_conflict_do_nothing(index_elements=["code"])
            )
            await self.session.execute(statement)
        else:
            self.session.add(ReceiptBook(code=code))
            await self.session.flush()

        return await self._get(code)

    async def lock(self, code: str) -> Optional[ReceiptBook]:
        """
        Lock the receipt book row until the current transaction ends

        The UPDATE comes first: it takes the row lock on PostgreSQL and the
        database write lock on SQLite, where a plain SELECT would not block.
        """
        now = datetime.utcnow()
        statement = (
            update(ReceiptBook)
            .where(ReceiptBook.code == code)
            .values(last_used_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        if result.rowcount == 0:
            return None

        book = await self._get(code, for_update=True)
        if book is not None:
            await self.session.refresh(book)
        return book
