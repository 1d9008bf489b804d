"""User-related exceptions."""

from fastapi import HTTPException, status

from src.shared.responses.envelope import ErrorCode


class UserException(HTTPException):
    """Base user exception."""

    def __init__(
        self,
        detail: str = "User operation failed",
        status_code: int = status.HTTP_400_BAD_REQUEST,
        code: str = ErrorCode.INVALID_INPUT,
        details: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code
        self.details = details


class UserNotFound(UserException):
    """Raised when user is not found."""

    def __init__(self):
        super().__init__(detail="User not found", status_code=status.HTTP_404_NOT_FOUND, code=ErrorCode.NOT_FOUND)


class UserAlreadyExists(UserException):
    """Raised when trying to create a user that already exists."""

    def __init__(self, field: str, value: str):
        super().__init__(
            detail=f"User with this {field} already exists",
            details={"field": field, "value": value},
        )


class UsernameAlreadyExists(UserAlreadyExists):
    """Raised when username already exists."""

    def __init__(self, username: str):
        super().__init__(field="username", value=username)


class EmailAlreadyExists(UserAlreadyExists):
    """Raised when email already exists."""

    def __init__(self, email: str):
        super().__init__(field="email", value=email)
