"""Base repository shared by every cache kind.

Provides the bounded database call used by all reads and writes and the
translation of driver failures into cache exceptions. Repositories keep no
mutable state of their own; coordination is left to the database.
"""

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Type, TypeVar, TYPE_CHECKING

from sqlalchemy import delete, func, select
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from core.database import DatabaseNotInitialized
from core.logging import get_logger
from .exceptions import ConstraintViolation, PersistenceUnavailable
from .policy import CachePolicy, utcnow

if TYPE_CHECKING:
    from core.config import Settings
    from core.database import Database

logger = get_logger(__name__)

T = TypeVar("T")

UNAVAILABLE_ERRORS = (
    OperationalError,
    InterfaceError,
    DisconnectionError,
    PoolTimeoutError,
    OSError,
    DatabaseNotInitialized,
)


class CacheRepository:
    """Bounded, error-translating access to one cache table."""

    kind: str = ""
    model: Type[SQLModel]
    policy: CachePolicy

    def __init__(self, database: "Database", settings: "Settings"):
        self.database = database
        self.settings = settings

    @property
    def table(self):
        return self.model.__table__

    async def _run(self, operation: str, key: str,
                   work: Callable[[AsyncSession], Awaitable[T]],
                   timeout: Optional[float] = None) -> T:
        """Run ``work`` in its own session, bounded by ``timeout`` seconds."""
        limit = timeout if timeout is not None else self.settings.database_timeout

        async def bounded():
            async with self.database.get_session() as session:
                return await work(session)

        try:
            return await asyncio.wait_for(bounded(), timeout=limit)
        except asyncio.TimeoutError as e:
            logger.error("Cache operation timed out", kind=self.kind, operation=operation,
                         cache_key=key, timeout=limit)
            raise PersistenceUnavailable(self.kind, operation, f"timed out after {limit}s") from e
        except IntegrityError as e:
            logger.error("Cache constraint violated", kind=self.kind, operation=operation,
                         cache_key=key, error=str(e.orig))
            raise ConstraintViolation(self.kind, key, str(e.orig)) from e
        except UNAVAILABLE_ERRORS as e:
            logger.error("Cache storage unavailable", kind=self.kind, operation=operation,
                         cache_key=key, error=str(e))
            raise PersistenceUnavailable(self.kind, operation, str(e)) from e

    async def _write(self, operation: str, key: str, stmt,
                     timeout: Optional[float] = None) -> None:
        async def work(session: AsyncSession) -> None:
            await session.execute(stmt)
            await session.commit()

        await self._run(operation, key, work, timeout)

    async def _delete_where(self, operation: str, key: str, *criteria,
                            timeout: Optional[float] = None) -> int:
        """Delete matching rows in one statement and return the count."""
        async def work(session: AsyncSession) -> int:
            stmt = delete(self.model).where(*criteria).execution_options(synchronize_session=False)
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount or 0

        return await self._run(operation, key, work, timeout)

    async def _first(self, operation: str, key: str, stmt,
                     timeout: Optional[float] = None) -> Optional[Any]:
        async def work(session: AsyncSession):
            result = await session.execute(stmt)
            return result.scalars().first()

        return await self._run(operation, key, work, timeout)

    async def count(self, timeout: Optional[float] = None) -> int:
        """Number of rows physically present, fresh or not."""
        async def work(session: AsyncSession) -> int:
            result = await session.execute(select(func.count()).select_from(self.table))
            return result.scalar_one()

        return await self._run("count", "*", work, timeout)

    @staticmethod
    def _now(now: Optional[datetime]) -> datetime:
        return now or utcnow()
