"""Authentication schemas (DTOs)."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from src.features.user.models import normalize_email, normalize_username
from src.features.user.schemas import UserResponse


# Request schemas
class UserLoginRequest(BaseModel):
    """Login with exactly one of username or email, plus password."""

    username: str | None = Field(None, max_length=50, description="Username (mutually exclusive with email)")
    email: str | None = Field(None, max_length=100, description="Email address (mutually exclusive with username)")
    password: str = Field(..., min_length=1, description="Account password")

    @model_validator(mode="after")
    def exactly_one_identifier(self) -> "UserLoginRequest":
        """Normalize identifiers and require exactly one of them."""
        self.username = normalize_username(self.username) if self.username else None
        self.email = normalize_email(self.email) if self.email else None

        if not self.username and not self.email:
            raise ValueError("Username or email is required")
        if self.username and self.email:
            raise ValueError("Provide either username or email, not both")
        return self


# Response schemas
class LoginResponse(BaseModel):
    """Login result: the profile plus the new session's metadata."""

    user: UserResponse
    session_id: str
    expires_at: datetime
    message: str = "Login successful"


class RefreshResponse(BaseModel):
    """Refresh result."""

    message: str = "Access token refreshed successfully"
    expires_at: datetime


class LogoutResponse(BaseModel):
    """Logout result."""

    message: str = "Logout successful"


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Who the current request is authenticated as.

    ``renewed`` is True when the access token was re-issued from the refresh
    token during this request.
    """

    user_id: int
    username: str
    email: str
    session_id: str
    renewed: bool = False
