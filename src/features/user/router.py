"""User router (registration and the current user's profile)."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session
from src.features.auth.dependencies import get_current_user
from src.shared.responses.envelope import APIResponse, success_response

from .models import User
from .schemas import UserRegisterRequest, UserResponse, UserUpdateRequest
from .service import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=APIResponse, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
async def create_user(data: UserRegisterRequest, session: AsyncSession = Depends(get_db_session)):
    """Register a new user (public)."""
    user = await UserService.register_user(session, data)
    await session.commit()
    return success_response("create_user", UserResponse.model_validate(user), "User created successfully")


@router.get("", response_model=APIResponse, response_model_exclude_none=True)
async def get_user(current_user: User = Depends(get_current_user)):
    """Get the authenticated user's profile."""
    return success_response("get_user", UserResponse.model_validate(current_user), "User retrieved successfully")


@router.put("", response_model=APIResponse, response_model_exclude_none=True)
async def update_user(
    data: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Update the authenticated user's profile (username, email, first and last name)."""
    user = await UserService.update_user(session, current_user, data)
    await session.commit()
    return success_response("update_user", UserResponse.model_validate(user), "User updated successfully")
