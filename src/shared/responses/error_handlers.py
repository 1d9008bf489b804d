"""Exception handlers that render every failure through the response envelope."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .envelope import ErrorCode, error_response

logger = logging.getLogger(__name__)

STATUS_CODES: dict[int, ErrorCode] = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.INVALID_INPUT,
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_422_UNPROCESSABLE_CONTENT: ErrorCode.VALIDATION_FAILED,
    status.HTTP_429_TOO_MANY_REQUESTS: ErrorCode.RATE_LIMITED,
}


def api_name_for(request: Request) -> str:
    """Name of the endpoint function that handled the request."""
    endpoint = request.scope.get("endpoint")
    return getattr(endpoint, "__name__", "unknown")


def envelope_json(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details=None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Serialize an error envelope into a JSONResponse."""
    body = error_response(api_name_for(request), code, message, details)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body, exclude_none=True),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTPException (and the auth/user subclasses) as an error envelope."""
    default_code = ErrorCode.INTERNAL_ERROR if exc.status_code >= 500 else ErrorCode.INVALID_INPUT
    code = getattr(exc, "code", None) or STATUS_CODES.get(exc.status_code, default_code)
    return envelope_json(
        request,
        exc.status_code,
        code,
        str(exc.detail),
        details=getattr(exc, "details", None),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors (400)."""
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        message = str(errors[0].get("msg", message)).removeprefix("Value error, ")

    logger.warning(f"Request validation failed on {request.url.path}: {message}")
    return envelope_json(
        request,
        status.HTTP_400_BAD_REQUEST,
        ErrorCode.VALIDATION_FAILED,
        message,
        details=jsonable_encoder(errors, exclude={"input", "ctx", "url"}),
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors."""
    return envelope_json(
        request,
        status.HTTP_429_TOO_MANY_REQUESTS,
        ErrorCode.RATE_LIMITED,
        f"Rate limit exceeded: {exc.detail}",
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Storage failures that escaped the services are server faults."""
    logger.error(f"Unhandled database error on {request.url.path}: {exc}")
    return envelope_json(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.DATABASE_ERROR,
        "Database error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach every envelope-producing handler to the application."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
