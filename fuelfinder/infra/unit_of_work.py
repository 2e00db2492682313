"""Unit of Work abstraction used by the service layer."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fuelfinder.repositories.interfaces import DistanceRepository
from fuelfinder.repositories.sqlalchemy import (
    SqlAlchemyDistanceRepository,
    translate_store_errors,
)


class UnitOfWork(Protocol, AbstractAsyncContextManager["UnitOfWork"]):
    """Defines the repository boundary exposed to services.

    Leaving the context commits on success and rolls back on error.
    """

    distances: DistanceRepository


class SqlAlchemyUnitOfWork(UnitOfWork):
    """Unit of Work backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: AsyncSession | None = None
        self.distances: DistanceRepository

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        session = self._session_factory()
        self._session = session
        self.distances = SqlAlchemyDistanceRepository(session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._session is None:
            return
        try:
            # a lost connection can fail the rollback as well as the commit
            async with translate_store_errors():
                if exc_type:
                    await self._session.rollback()
                else:
                    await self._session.commit()
        finally:
            await self._session.close()
            self._session = None
