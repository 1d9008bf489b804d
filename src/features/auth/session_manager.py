"""Lifecycle of server-side login sessions."""

import logging
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from src.config.settings import settings

from .exceptions import (
    SessionExpiredException,
    SessionNotFoundException,
    SessionRevokedException,
    StorageFailureException,
)
from .models import Session
from .session_store import SessionStore

logger = logging.getLogger(__name__)


def generate_session_id() -> str:
    """Random, unguessable session token (uuid4 draws from os.urandom)."""
    return str(uuid4())


class SessionManager:
    """Create, validate and revoke sessions through an injected store."""

    def __init__(self, store: SessionStore):
        self.store = store

    async def create(
        self,
        user_id: int,
        ip_address: str | None = None,
        user_agent: str | None = None,
        now: datetime | None = None,
    ) -> Session:
        """Persist a new session for ``user_id``.

        The expiry is fixed here and never extended afterwards.

        Raises:
            StorageFailureException: If the row cannot be written

        """
        created_at = now or datetime.now(UTC)
        session = Session(
            session_id=generate_session_id(),
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent,
            device=user_agent,
            expires_at=created_at + timedelta(days=settings.session_expire_days),
            revoked=False,
        )
        await self.store.add(session)
        logger.info(f"Session created for user {user_id}: {session.session_id}")
        return session

    async def validate(self, session_id: str, now: datetime | None = None) -> Session:
        """Return the session if it is usable.

        Checks run in a fixed order: existence, then revocation, then expiry.

        Raises:
            SessionNotFoundException: No session has this id
            SessionRevokedException: The session was revoked
            SessionExpiredException: ``now`` is at or past ``expires_at``
            StorageFailureException: The lookup itself failed

        """
        session = await self.store.get_by_session_id(session_id)

        if session is None:
            logger.warning(f"Session not found: {session_id}")
            raise SessionNotFoundException()

        if session.revoked:
            logger.warning(f"Session is revoked: {session_id}")
            raise SessionRevokedException()

        if session.is_expired(now):
            logger.warning(f"Session has expired: {session_id} (expires_at={session.expires_at.isoformat()})")
            raise SessionExpiredException()

        return session

    async def revoke(self, session_id: str) -> bool:
        """Revoke a session, best effort.

        Never raises: a missing row or a storage failure is logged and
        reported as False so logout can always complete.
        """
        try:
            revoked = await self.store.mark_revoked(session_id)
            await self.store.commit()
        except StorageFailureException as err:
            logger.error(f"Failed to revoke session {session_id}: {err.detail}")
            return False

        if revoked:
            logger.info(f"Session revoked: {session_id}")
        else:
            logger.warning(f"No session to revoke: {session_id}")
        return revoked
