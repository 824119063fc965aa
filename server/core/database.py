"""Async database service with SQLModel and SQLAlchemy 2.0."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, Optional

from sqlmodel import SQLModel
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from core.config import Settings
from core.logging import get_logger
import models.cache  # noqa: F401  registers cache tables on SQLModel.metadata

logger = get_logger(__name__)

# Dialects offering a single-statement INSERT ... ON CONFLICT DO UPDATE
UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class DatabaseNotInitialized(RuntimeError):
    """A session was requested before startup() or after shutdown()."""


class Database:
    """Async database service with SQLModel."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine = None
        self.async_session = None

    async def startup(self):
        """Initialize database connection and create tables."""
        try:
            logging.getLogger("aiosqlite").setLevel(logging.WARNING)
            logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

            engine_options: Dict[str, Any] = {
                "echo": self.settings.database_echo,
                "future": True,
            }
            if not self.settings.is_sqlite:
                engine_options["pool_size"] = self.settings.database_pool_size
                engine_options["max_overflow"] = self.settings.database_max_overflow
                engine_options["pool_pre_ping"] = True

            self.engine = create_async_engine(self.settings.database_url, **engine_options)

            if self.engine.dialect.name not in UPSERT_DIALECTS:
                raise ValueError(
                    f"Unsupported database dialect '{self.engine.dialect.name}', "
                    f"expected one of {sorted(UPSERT_DIALECTS)}"
                )

            self.async_session = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )

            async with self.engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)

            logger.info("Database initialized successfully", dialect=self.engine.dialect.name)

        except Exception as e:
            logger.error("Database startup failed", error=str(e))
            raise

    async def shutdown(self):
        """Close database connections."""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database connections closed")
        self.async_session = None
        self.engine = None

    @property
    def is_ready(self) -> bool:
        return self.async_session is not None

    @asynccontextmanager
    async def get_session(self):
        """Get async database session."""
        if not self.async_session:
            raise DatabaseNotInitialized("Database not initialized")

        async with self.async_session() as session:
            try:
                yield session
            except BaseException:
                # Includes CancelledError so an abandoned write never commits
                await session.rollback()
                raise
            finally:
                await session.close()

    def upsert(self, table, values: Dict[str, Any], conflict_columns: Iterable[str],
               preserve_columns: Optional[Iterable[str]] = None):
        """Build an atomic insert-or-replace statement for ``table``.

        Every column in ``values`` except the conflict columns and
        ``preserve_columns`` is overwritten on conflict.
        """
        insert = UPSERT_DIALECTS[make_url(self.settings.database_url).get_backend_name()]
        conflict = list(conflict_columns)
        keep = set(conflict) | set(preserve_columns or ())

        stmt = insert(table).values(values)
        return stmt.on_conflict_do_update(
            index_elements=conflict,
            set_={name: stmt.excluded[name] for name in values if name not in keep}
        )

    async def ping(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed", error=str(e))
            return False
