"""Storage interface for server-side sessions."""

import logging
from typing import Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import StorageFailureException
from .models import Session

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """What the session manager needs from storage.

    Implementations raise ``StorageFailureException`` when the backend fails.
    """

    async def add(self, session: Session) -> Session: ...

    async def get_by_session_id(self, session_id: str) -> Session | None: ...

    async def mark_revoked(self, session_id: str) -> bool: ...

    async def commit(self) -> None: ...


class SQLAlchemySessionStore:
    """SessionStore backed by the request's SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, session: Session) -> Session:
        try:
            self.db.add(session)
            await self.db.flush()
        except SQLAlchemyError as err:
            logger.error(f"Failed to insert session for user {session.user_id}: {err}")
            raise StorageFailureException("Failed to create session") from err
        return session

    async def get_by_session_id(self, session_id: str) -> Session | None:
        try:
            stmt = select(Session).where(Session.session_id == session_id)
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as err:
            logger.error(f"Failed to look up session {session_id}: {err}")
            raise StorageFailureException("Failed to validate session") from err

    async def mark_revoked(self, session_id: str) -> bool:
        """Set revoked on the matching row. Returns False when no row matched."""
        try:
            stmt = (
                update(Session)
                .where(Session.session_id == session_id)
                .values(revoked=True)
                .execution_options(synchronize_session="fetch")
            )
            result = await self.db.execute(stmt)
        except SQLAlchemyError as err:
            logger.error(f"Failed to revoke session {session_id}: {err}")
            raise StorageFailureException("Failed to revoke session") from err
        return result.rowcount > 0

    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as err:
            logger.error(f"Failed to commit session changes: {err}")
            await self.db.rollback()
            raise StorageFailureException() from err
