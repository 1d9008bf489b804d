"""User service layer."""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import EmailAlreadyExists, UsernameAlreadyExists
from .models import User
from .schemas import UserRegisterRequest, UserUpdateRequest

logger = logging.getLogger(__name__)


class UserService:
    """Service for user operations."""

    @staticmethod
    async def get_by_username(session: AsyncSession, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(session: AsyncSession, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def register_user(session: AsyncSession, data: UserRegisterRequest) -> User:
        """Register a new user.

        Args:
            session: Database session
            data: User registration data (username and email already normalized)

        Returns:
            Created User object

        Raises:
            EmailAlreadyExists: If email already exists
            UsernameAlreadyExists: If username already exists

        """
        if await UserService.get_by_email(session, data.email):
            logger.warning(f"User creation rejected, email already exists: {data.email}")
            raise EmailAlreadyExists(data.email)

        if await UserService.get_by_username(session, data.username):
            logger.warning(f"User creation rejected, username already exists: {data.username}")
            raise UsernameAlreadyExists(data.username)

        # Hash password (salt handled automatically by pwdlib using Argon2)
        user = User(
            username=data.username,
            email=data.email,
            hashed_password=User.hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
        )

        session.add(user)
        await session.flush()
        logger.info(f"New user registered: {user.username} ({user.email})")

        return user

    @staticmethod
    async def update_user(session: AsyncSession, user: User, data: UserUpdateRequest) -> User:
        """Update the given fields of a user's profile.

        Raises:
            EmailAlreadyExists: If email is being changed to an existing email
            UsernameAlreadyExists: If username is being changed to an existing username

        """
        if data.email is not None and data.email != user.email:
            if await UserService.get_by_email(session, data.email):
                raise EmailAlreadyExists(data.email)

        if data.username is not None and data.username != user.username:
            if await UserService.get_by_username(session, data.username):
                raise UsernameAlreadyExists(data.username)

        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(user, key, value)

        user.updated_at = datetime.now(UTC)
        await session.flush()
        logger.info(f"User updated: {user.username}")
        return user
