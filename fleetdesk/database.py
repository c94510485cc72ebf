from functools import lru_cache

from sqlalchemy import Boolean, Column, Integer, event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from fleetdesk.config import settings
from fleetdesk.transaction import Transaction


def normalize_database_url(url: str) -> str:
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Base(DeclarativeBase):
    pass


class SoftDeleteMixin:
    """Surrogate key plus the logical-deletion flag shared by every table."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    deleted = Column("eliminado", Boolean, nullable=False, default=False)

    @classmethod
    def active(cls):
        """Predicate selecting rows that have not been soft-deleted."""
        return cls.deleted.is_(False)


class Database:
    """Connection provider handed explicitly to stores and services."""

    def __init__(self, url: str, echo: bool = False):
        self.url = normalize_database_url(url)
        self.is_sqlite = self.url.startswith("sqlite")

        engine_kwargs: dict = {"echo": echo}
        if not self.is_sqlite:
            engine_kwargs.update(pool_size=5, max_overflow=10, pool_pre_ping=True)

        self.engine = create_async_engine(self.url, **engine_kwargs)
        self.sessions = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

        if self.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _set_sqlite_pragma)

    def transaction(self) -> Transaction:
        return Transaction(self.sessions)

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            from fleetdesk.models import vehicle, policy  # noqa: F401
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


@lru_cache
def get_database() -> Database:
    """Default instance built from settings on first use."""
    return Database(settings.database_url)
