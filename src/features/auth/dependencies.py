"""Authentication dependencies for FastAPI."""

import logging

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session
from src.features.user.exceptions import UserNotFound
from src.features.user.models import User

from .cookies import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, set_access_cookie
from .exceptions import MissingTokenException
from .jwt_utils import TokenDecodeError, TokenKind, decode_token
from .schemas import AuthenticatedIdentity
from .service import AuthService
from .session_manager import SessionManager
from .session_store import SQLAlchemySessionStore

logger = logging.getLogger(__name__)


async def get_session_manager(session: AsyncSession = Depends(get_db_session)) -> SessionManager:
    """Session manager bound to the request's database session."""
    return SessionManager(SQLAlchemySessionStore(session))


async def get_current_identity(
    request: Request,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
) -> AuthenticatedIdentity:
    """Authenticate the request from its token cookies.

    A valid access token is enough and costs no I/O. Otherwise the refresh
    token is verified, its session is re-validated against storage, and a new
    access token is issued and set as a cookie on the response. The refresh
    cookie is never rotated here and session state is never written.

    Raises:
        MissingTokenException: Access token unusable and no refresh cookie
        InvalidTokenException: Refresh token unusable
        SessionNotFoundException, SessionRevokedException, SessionExpiredException:
            The refresh token's session is not usable

    """
    access_token = request.cookies.get(ACCESS_TOKEN_COOKIE)

    try:
        claims = decode_token(access_token, TokenKind.ACCESS)
    except TokenDecodeError as err:
        logger.info(f"Access token rejected ({err.reason}), attempting refresh on {request.url.path}")
    else:
        identity = AuthenticatedIdentity(
            user_id=claims.user_id,
            username=claims.username,
            email=claims.email,
            session_id=claims.session_id,
        )
        request.state.identity = identity
        return identity

    refresh_token = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not refresh_token:
        logger.warning(f"No refresh token found on {request.url.path}")
        raise MissingTokenException()

    renewal = await AuthService.renew_access_token(manager, refresh_token)
    set_access_cookie(response, renewal.access_token)
    claims = renewal.claims

    identity = AuthenticatedIdentity(
        user_id=claims.user_id,
        username=claims.username,
        email=claims.email,
        session_id=claims.session_id,
        renewed=True,
    )
    request.state.identity = identity
    return identity


async def get_current_user(
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    """Load the authenticated user's row.

    Raises:
        UserNotFound: The user was deleted after the token was issued

    """
    user = await session.get(User, identity.user_id)
    if user is None:
        raise UserNotFound()
    return user
