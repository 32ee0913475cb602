"""Unit of Work Interface

Groups repository writes into one atomic transaction.
"""

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """
    Abstract unit of work

    Repositories built on the same unit of work share its transaction.
    Nothing they write is visible to other readers before commit().
    Leaving the context without committing rolls the work back.
    """

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.rollback()

    @abstractmethod
    async def commit(self):
        """Commit every pending write"""
        pass

    @abstractmethod
    async def rollback(self):
        """Discard every uncommitted write"""
        pass
