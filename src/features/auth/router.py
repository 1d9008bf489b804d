"""Authentication router (login, logout, refresh)."""

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.database.dependencies import get_db_session
from src.features.user.schemas import UserResponse
from src.shared.rate_limit import limiter
from src.shared.responses.envelope import APIResponse, success_response

from .cookies import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, clear_auth_cookies, set_access_cookie, set_auth_cookies
from .dependencies import get_session_manager
from .exceptions import MissingTokenException
from .schemas import LoginResponse, LogoutResponse, RefreshResponse, UserLoginRequest
from .service import AuthService
from .session_manager import SessionManager

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Authentication"])


@router.post("/login", response_model=APIResponse, response_model_exclude_none=True)
@limiter.limit(settings.login_rate_limit)
async def login(
    data: UserLoginRequest,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
    manager: SessionManager = Depends(get_session_manager),
):
    """Log in with username or email and password.

    - **username**: Username (either username or email, not both)
    - **email**: Email address (either username or email, not both)
    - **password**: Password

    Sets the `access_token` and `refresh_token` HttpOnly cookies.
    """
    ip_address = request.client.host if request.client else None
    user_agent = request.headers.get("user-agent", "unknown")

    result = await AuthService.login(session, manager, data, ip_address, user_agent)
    await session.commit()

    set_auth_cookies(response, result.access_token, result.refresh_token)

    body = LoginResponse(
        user=UserResponse.model_validate(result.user),
        session_id=result.session.session_id,
        expires_at=result.session.expires_at,
    )
    return success_response("login", body, "Login successful")


@router.post("/logout", response_model=APIResponse, response_model_exclude_none=True)
async def logout(
    request: Request,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
):
    """Log out: revoke the current session if possible and clear both cookies.

    Always succeeds.
    """
    await AuthService.logout(
        manager,
        request.cookies.get(ACCESS_TOKEN_COOKIE),
        request.cookies.get(REFRESH_TOKEN_COOKIE),
    )
    clear_auth_cookies(response)
    return success_response("logout", LogoutResponse(), "Logout successful")


@router.post("/refresh", response_model=APIResponse, response_model_exclude_none=True)
async def refresh(
    request: Request,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
):
    """Issue a new access token from the `refresh_token` cookie.

    The refresh token and the session are left untouched.
    """
    refresh_token = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not refresh_token:
        logger.warning("No refresh token found in cookies")
        raise MissingTokenException(detail="No refresh token provided")

    renewal = await AuthService.renew_access_token(manager, refresh_token)
    set_access_cookie(response, renewal.access_token)

    body = RefreshResponse(expires_at=renewal.expires_at)
    return success_response("refresh", body, "Access token refreshed successfully")
