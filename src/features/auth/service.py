"""Authentication service layer."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.features.user.models import User, pwd_hasher

from .exceptions import InvalidCredentialsException, InvalidTokenException, TokenIssueException
from .jwt_utils import (
    TokenClaims,
    TokenDecodeError,
    TokenKind,
    TokenSigningError,
    decode_token,
    encode_token,
    token_lifetime,
)
from .models import Session
from .schemas import UserLoginRequest
from .session_manager import SessionManager

logger = logging.getLogger(__name__)

# Verified against on unknown users so both login failure paths cost one Argon2 check
_DUMMY_PASSWORD_HASH = pwd_hasher.hash("crux-dummy-password")


@dataclass(frozen=True)
class LoginResult:
    """Everything the login endpoint needs to answer."""

    user: User
    session: Session
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class RenewalResult:
    """A freshly issued access token and the refresh claims it was derived from."""

    claims: TokenClaims
    access_token: str
    expires_at: datetime


class AuthService:
    """Service for login, token renewal and logout."""

    @staticmethod
    async def authenticate_user(session: AsyncSession, data: UserLoginRequest) -> User | None:
        """Look up the user by username or email and verify the password.

        Args:
            session: Database session
            data: Validated login request (exactly one identifier, normalized)

        Returns:
            User object if authentication successful, None otherwise

        """
        if data.email:
            stmt = select(User).where(User.email == data.email)
        else:
            stmt = select(User).where(User.username == data.username)

        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if user is None:
            pwd_hasher.verify(data.password, _DUMMY_PASSWORD_HASH)
            logger.warning(f"Login failed, user not found: username={data.username} email={data.email}")
            return None

        if not user.verify_password(data.password):
            logger.warning(f"Login failed, invalid password for user {user.id}")
            return None

        return user

    @staticmethod
    def issue_token(
        kind: TokenKind,
        user_id: int,
        username: str,
        email: str,
        session_id: str,
        now: datetime | None = None,
    ) -> str:
        """Encode a token, turning signing failures into a 500."""
        try:
            return encode_token(kind, user_id, username, email, session_id, now=now)
        except TokenSigningError as err:
            raise TokenIssueException(detail=f"Failed to generate {kind.value} token") from err

    @staticmethod
    async def login(
        session: AsyncSession,
        manager: SessionManager,
        data: UserLoginRequest,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> LoginResult:
        """Authenticate, open a session and issue both tokens.

        Raises:
            InvalidCredentialsException: Unknown user or wrong password
            StorageFailureException: The session row could not be written
            TokenIssueException: A token could not be signed

        """
        user = await AuthService.authenticate_user(session, data)
        if user is None:
            raise InvalidCredentialsException()

        login_session = await manager.create(user.id, ip_address, user_agent)

        access_token = AuthService.issue_token(
            TokenKind.ACCESS, user.id, user.username, user.email, login_session.session_id
        )
        refresh_token = AuthService.issue_token(
            TokenKind.REFRESH, user.id, user.username, user.email, login_session.session_id
        )

        logger.info(f"User logged in: {user.username} (session {login_session.session_id})")
        return LoginResult(user=user, session=login_session, access_token=access_token, refresh_token=refresh_token)

    @staticmethod
    async def renew_access_token(manager: SessionManager, refresh_token: str) -> RenewalResult:
        """Mint a new access token from a refresh token.

        The refresh token must verify as a refresh token and the session it
        names must still be usable. Nothing is written: the session and the
        refresh token are left as they are.

        Returns:
            RenewalResult with the refresh claims, the new access token and its expiry

        Raises:
            InvalidTokenException: The refresh token is not acceptable
            SessionNotFoundException, SessionRevokedException, SessionExpiredException:
                The session is not usable
            TokenIssueException: The access token could not be signed

        """
        try:
            claims = decode_token(refresh_token, TokenKind.REFRESH)
        except TokenDecodeError as err:
            logger.warning(f"Invalid refresh token: {err.reason}")
            raise InvalidTokenException() from err

        await manager.validate(claims.session_id)

        # JWT times have whole-second precision
        issued_at = datetime.now(UTC).replace(microsecond=0)
        access_token = AuthService.issue_token(
            TokenKind.ACCESS, claims.user_id, claims.username, claims.email, claims.session_id, now=issued_at
        )
        logger.info(f"Access token renewed for user {claims.user_id} (session {claims.session_id})")
        return RenewalResult(
            claims=claims,
            access_token=access_token,
            expires_at=issued_at + token_lifetime(TokenKind.ACCESS),
        )

    @staticmethod
    async def logout(manager: SessionManager, access_token: str | None, refresh_token: str | None = None) -> bool:
        """Revoke the session named by the caller's tokens, best effort.

        The access token is tried first; when it does not decode (expired,
        say) the refresh token is tried. Nothing here raises.

        Returns:
            True if a session was revoked

        """
        for kind, token in ((TokenKind.ACCESS, access_token), (TokenKind.REFRESH, refresh_token)):
            if not token:
                continue
            try:
                claims = decode_token(token, kind)
            except TokenDecodeError as err:
                logger.warning(f"Ignoring undecodable {kind.value} token during logout: {err.reason}")
                continue
            return await manager.revoke(claims.session_id)

        logger.info("No usable token found during logout")
        return False
