"""Authentication exceptions."""

from fastapi import HTTPException, status

from src.shared.responses.envelope import ErrorCode


class AuthenticationException(HTTPException):
    """Base authentication exception (401)."""

    code = ErrorCode.UNAUTHORIZED

    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class InvalidCredentialsException(AuthenticationException):
    """Raised for an unknown user and for a wrong password alike."""

    def __init__(self):
        super().__init__(detail="Invalid credentials")


class MissingTokenException(AuthenticationException):
    """Raised when the required token cookie is absent."""

    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(detail=detail)


class InvalidTokenException(AuthenticationException):
    """Raised when a token fails signature, format, kind or time-window checks."""

    def __init__(self, detail: str = "Invalid or expired refresh token"):
        super().__init__(detail=detail)


class SessionException(AuthenticationException):
    """Base for a refresh token whose session is not usable."""


class SessionNotFoundException(SessionException):
    """Raised when no session matches the token's session id."""

    def __init__(self):
        super().__init__(detail="Session not found")


class SessionRevokedException(SessionException):
    """Raised when the session was revoked (logout)."""

    def __init__(self):
        super().__init__(detail="Session has been revoked")


class SessionExpiredException(SessionException):
    """Raised when the session passed its absolute expiry."""

    def __init__(self):
        super().__init__(detail="Session has expired")


class StorageFailureException(HTTPException):
    """Raised when the credential store cannot be read or written."""

    code = ErrorCode.DATABASE_ERROR

    def __init__(self, detail: str = "Storage operation failed"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class TokenIssueException(HTTPException):
    """Raised when a token cannot be signed."""

    code = ErrorCode.INTERNAL_ERROR

    def __init__(self, detail: str = "Failed to generate access token"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
