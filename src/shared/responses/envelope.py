"""Uniform response envelope shared by every endpoint."""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from src.config.settings import settings


class ResponseStatus(StrEnum):
    """Envelope status values."""

    SUCCESS = "success"
    ERROR = "error"


class ErrorCode(StrEnum):
    """Machine-readable error codes carried in ``APIError.code``."""

    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    RATE_LIMITED = "RATE_LIMITED"


class APIError(BaseModel):
    """Structured error information."""

    code: str
    message: str
    details: Any | None = None


class APIResponse(BaseModel):
    """Standard response body: service metadata plus either data or an error."""

    service_name: str = Field(default_factory=lambda: settings.app_name)
    version: str = Field(default_factory=lambda: settings.app_version)
    environment: str = Field(default_factory=lambda: settings.environment)
    api_name: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    status: ResponseStatus = ResponseStatus.SUCCESS
    message: str | None = None
    data: Any | None = None
    error: APIError | None = None


def success_response(api_name: str, data: Any = None, message: str | None = None) -> APIResponse:
    """Build a success envelope."""
    return APIResponse(api_name=api_name, data=data, message=message)


def error_response(api_name: str, code: str, message: str, details: Any = None) -> APIResponse:
    """Build an error envelope."""
    return APIResponse(
        api_name=api_name,
        status=ResponseStatus.ERROR,
        message=message,
        error=APIError(code=code, message=message, details=details),
    )
