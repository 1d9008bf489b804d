"""User schemas (DTOs)."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.shared.validators.password import validate_password_strength

from .models import normalize_email, normalize_username

USERNAME_PATTERN = r"^[a-zA-Z0-9._-]+$"
MAX_EMAIL_LENGTH = 100


def check_email_length(email: str) -> str:
    if len(email) > MAX_EMAIL_LENGTH:
        raise ValueError(f"Email must be at most {MAX_EMAIL_LENGTH} characters")
    return email


# Request schemas
class UserRegisterRequest(BaseModel):
    """User registration request."""

    username: str = Field(..., min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(..., description="8-72 characters with at least one letter and one digit")
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value):
        """Trim before length and pattern checks."""
        return normalize_username(value) if isinstance(value, str) else value

    @field_validator("email", mode="after")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return check_email_length(normalize_email(value))

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        """Validate password using shared validator."""
        return validate_password_strength(value)


class UserUpdateRequest(BaseModel):
    """Update of the current user's profile. Omitted fields are left alone."""

    username: str | None = Field(None, min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: EmailStr | None = None
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value):
        return normalize_username(value) if isinstance(value, str) else value

    @field_validator("email", mode="after")
    @classmethod
    def lower_email(cls, value: str | None) -> str | None:
        return check_email_length(normalize_email(value)) if value else value


# Response schemas
class UserResponse(BaseModel):
    """User profile. Never includes the password hash."""

    id: int
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
