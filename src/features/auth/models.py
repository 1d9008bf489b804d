"""Authentication models (server-side login sessions)."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base import Base, TimestampMixin, as_utc


class Session(Base, TimestampMixin):
    """One authenticated client login.

    ``session_id`` is the opaque random token embedded in JWTs; it is distinct
    from the numeric primary key. ``expires_at`` is fixed at creation and
    ``revoked`` only ever moves from False to True.
    """

    __tablename__ = "sessions"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Correlation key carried in access and refresh tokens
    session_id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False, index=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Client metadata, audit only
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)  # IPv6 max length is 45
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    device: Mapped[str | None] = mapped_column(String(256), nullable=True)

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

    def is_expired(self, now: datetime | None = None) -> bool:
        """A session is expired from ``expires_at`` onwards."""
        current = now or datetime.now(UTC)
        return current >= as_utc(self.expires_at)
