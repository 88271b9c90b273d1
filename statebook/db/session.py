"""Database engine and session factory.

The engine is created lazily on first use and owned by the ``Database``
holder; request handlers receive sessions through ``api.deps.get_db``.
"""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from statebook.common.logging import get_logger
from statebook.config import settings

logger = get_logger("db")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    engine = create_async_engine(url, echo=echo, pool_pre_ping=not url.startswith("sqlite"))
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


class Database:
    def __init__(self, url: str | None = None, echo: bool | None = None) -> None:
        self._url = url
        self._echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            url = self._url or settings.DATABASE_URL
            echo = settings.DB_ECHO if self._echo is None else self._echo
            self._engine = build_engine(url, echo=echo)
            logger.info("Database engine created (dialect=%s)", self._engine.dialect.name)
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._session_factory

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None


database = Database()
