"""Scoped transaction handling shared by the record stores and the fleet service."""
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fleetdesk.utils.exceptions import StorageError, UsageError

logger = logging.getLogger(__name__)


class TxState(str, Enum):
    NOT_STARTED = "not_started"
    OPEN = "open"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Transaction:
    """One session wrapped in a single commit/rollback boundary.

    Use as ``async with database.transaction() as tx``. Leaving the block
    without calling ``commit()`` rolls the work back, whether or not an
    exception is propagating.
    """

    def __init__(self, sessions: async_sessionmaker):
        self._sessions = sessions
        self.session: AsyncSession | None = None
        self.state = TxState.NOT_STARTED
        self.steps: list[str] = []

    @property
    def is_open(self) -> bool:
        return self.state is TxState.OPEN

    async def begin(self) -> None:
        if self.state is not TxState.NOT_STARTED:
            raise UsageError(f"Transaction cannot be started from state '{self.state.value}'")
        self.session = self._sessions()
        try:
            await self.session.begin()
        except SQLAlchemyError as exc:
            await self.session.close()
            self.session = None
            raise StorageError(f"Could not start transaction: {exc}") from exc
        self.state = TxState.OPEN

    def record_step(self, name: str) -> None:
        self.steps.append(name)

    async def commit(self) -> None:
        if not self.is_open:
            raise UsageError("No active transaction to commit")
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.rollback()
            raise StorageError(f"Commit failed: {exc}") from exc
        self.state = TxState.COMMITTED

    async def rollback(self) -> None:
        if not self.is_open:
            return
        try:
            await self.session.rollback()
            logger.info("Transaction rolled back after steps: %s", self.steps or "none")
        except SQLAlchemyError:
            logger.exception("Rollback failed after steps: %s", self.steps or "none")
        finally:
            self.state = TxState.ROLLED_BACK

    async def close(self) -> None:
        if self.is_open:
            logger.warning("Transaction closed without commit, rolling back")
            await self.rollback()
        if self.session is not None:
            await self.session.close()
            self.session = None

    async def __aenter__(self) -> "Transaction":
        await self.begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None and self.is_open:
            logger.debug("Rolling back on %s", exc_type.__name__)
            await self.rollback()
        await self.close()


@asynccontextmanager
async def session_scope(
    sessions: async_sessionmaker, tx: Transaction | None = None
) -> AsyncIterator[AsyncSession]:
    """Yield the caller's transactional session, or a self-committing one."""
    if tx is not None:
        if not tx.is_open:
            raise UsageError("Transaction is not open")
        try:
            yield tx.session
        except SQLAlchemyError as exc:
            raise StorageError(f"Database operation failed: {exc}") from exc
        return

    try:
        async with sessions() as session, session.begin():
            yield session
    except SQLAlchemyError as exc:
        raise StorageError(f"Database operation failed: {exc}") from exc
