"""
Mesto Backend - User Route Handlers
====================================

Every route here requires a session. `/users/me` routes always act on the
caller's own record (the id comes from the Identity, never from the path),
which is what makes profile edits owner-only.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mesto.auth.session import Identity, require_identity
from mesto.database import get_db_session
from mesto.schemas.common import ErrorResponse
from mesto.schemas.user import AvatarUpdate, ProfileUpdate, UserResponse
from mesto.services.user_service import user_service

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(require_identity)],
    responses={401: {"description": "Authorization required", "model": ErrorResponse}},
)


@router.get("", response_model=List[UserResponse], summary="List all users")
async def list_users(db: AsyncSession = Depends(get_db_session)) -> List[UserResponse]:
    return await user_service.list_users(db)


@router.get("/me", response_model=UserResponse, summary="Current user's profile")
async def get_me(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_user(db, identity.user_id)


@router.patch(
    "/me",
    response_model=UserResponse,
    responses={400: {"description": "Invalid input", "model": ErrorResponse}},
    summary="Update name and about",
)
async def update_me(
    payload: ProfileUpdate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.update_profile(db, identity.user_id, payload)


@router.patch(
    "/me/avatar",
    response_model=UserResponse,
    responses={400: {"description": "Invalid avatar URL", "model": ErrorResponse}},
    summary="Update avatar",
)
async def update_avatar(
    payload: AvatarUpdate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.update_avatar(db, identity.user_id, payload)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user by ID",
)
async def get_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_user(db, user_id)
