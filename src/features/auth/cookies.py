"""Token cookies: the whole wire contract of the auth core."""

from datetime import UTC, datetime

from fastapi import Response

from src.config.settings import settings

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"

EXPIRED = datetime(1970, 1, 1, tzinfo=UTC)


def _set_token_cookie(response: Response, name: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key=name,
        value=value,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


def set_access_cookie(response: Response, access_token: str) -> None:
    """Set the short-lived access token cookie."""
    _set_token_cookie(response, ACCESS_TOKEN_COOKIE, access_token, settings.access_token_max_age)


def set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    """Set both token cookies (login only)."""
    set_access_cookie(response, access_token)
    _set_token_cookie(response, REFRESH_TOKEN_COOKIE, refresh_token, settings.refresh_token_max_age)


def clear_auth_cookies(response: Response) -> None:
    """Expire both token cookies immediately."""
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.set_cookie(
            key=name,
            value="",
            max_age=0,
            expires=EXPIRED,
            path="/",
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
        )
