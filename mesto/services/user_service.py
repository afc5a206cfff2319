"""
Mesto Backend - User Service
=============================

What:  Registration, sign-in credential checks and profile operations.
Why:   Keeps hashing, uniqueness and not-found rules out of the routers.
How:   Stateless methods that receive the request's AsyncSession. Every store
       call goes through `store_call` so a hung database becomes a 503.

Error Translation:
    IntegrityError on insert    → ConflictError (duplicate email, 409)
    no row for an id            → NotFoundError (404)
    unknown email / bad password → AuthenticationError (401), same message
    anything else from the store → DatabaseError (500, details logged only)
"""

import asyncio
import logging
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mesto.auth.passwords import burn_verification, hash_password, verify_password
from mesto.database import store_call
from mesto.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    MestoError,
    NotFoundError,
)
from mesto.models.user import DEFAULT_ABOUT, DEFAULT_AVATAR, DEFAULT_NAME, User
from mesto.schemas.user import AvatarUpdate, ProfileUpdate, SignUpRequest, UserResponse

logger = logging.getLogger(__name__)

BAD_CREDENTIALS_MESSAGE = "Incorrect email or password"


class UserService:
    """
    Business logic for user accounts.

    Passwords are hashed and verified in a worker thread: argon2 is
    deliberately slow and would otherwise stall the event loop.
    """

    async def register(self, db: AsyncSession, payload: SignUpRequest) -> UserResponse:
        """
        Create a user from a validated sign-up payload.

        Returns:
            UserResponse (never contains the password or its hash)

        Raises:
            ConflictError: the email is already registered
            DatabaseError: insert failed for another reason
        """
        password_hash = await asyncio.to_thread(hash_password, payload.password)
        user = User(
            email=payload.email.lower(),
            password_hash=password_hash,
            name=payload.name or DEFAULT_NAME,
            about=payload.about or DEFAULT_ABOUT,
            avatar=payload.avatar or DEFAULT_AVATAR,
        )

        try:
            db.add(user)
            await store_call(db, db.flush())
        except IntegrityError:
            logger.info("Sign-up rejected: email already registered")
            raise ConflictError(message="A user with this email already exists")
        except MestoError:
            raise
        except Exception as e:
            logger.error("Database error during sign-up: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("User registered: %s", user.id)
        return UserResponse.from_model(user)

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        """
        Return the user whose credentials match, or raise.

        Raises:
            AuthenticationError: with one message for both the unknown-email
                and the wrong-password case
        """
        user = await self._find_by_email(db, email.lower())

        if user is None:
            await asyncio.to_thread(burn_verification)
            raise AuthenticationError(message=BAD_CREDENTIALS_MESSAGE)

        matches = await asyncio.to_thread(verify_password, password, user.password_hash)
        if not matches:
            raise AuthenticationError(message=BAD_CREDENTIALS_MESSAGE)

        return user

    async def get_user(self, db: AsyncSession, user_id: UUID) -> UserResponse:
        try:
            user = await store_call(db, db.get(User, user_id))
        except MestoError:
            raise
        except Exception as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": str(user_id)})

        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return UserResponse.from_model(user)

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        try:
            result = await store_call(db, db.execute(select(User).order_by(User.email)))
            users = list(result.scalars().all())
        except MestoError:
            raise
        except Exception as e:
            logger.error("Database error listing users: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        return [UserResponse.from_model(u) for u in users]

    async def update_profile(
        self, db: AsyncSession, user_id: UUID, payload: ProfileUpdate
    ) -> UserResponse:
        return await self._update_fields(
            db, user_id, name=payload.name, about=payload.about
        )

    async def update_avatar(
        self, db: AsyncSession, user_id: UUID, payload: AvatarUpdate
    ) -> UserResponse:
        return await self._update_fields(db, user_id, avatar=payload.avatar)

    async def _update_fields(self, db: AsyncSession, user_id: UUID, **values) -> UserResponse:
        """
        Set the given columns on one user row.

        The flush emits a single UPDATE ... WHERE id = :user_id. Callers
        always pass the session's own user id, so this only ever touches the
        caller's record.
        """
        try:
            user = await store_call(db, db.get(User, user_id))
            if user is None:
                raise NotFoundError(resource="user", resource_id=str(user_id))

            for field, value in values.items():
                setattr(user, field, value)
            await store_call(db, db.flush())
        except MestoError:
            raise
        except Exception as e:
            logger.error("Database error updating user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(context={"user_id": str(user_id)})

        logger.info("User %s updated fields: %s", user_id, ", ".join(sorted(values)))
        return UserResponse.from_model(user)

    async def _find_by_email(self, db: AsyncSession, email: str):
        try:
            result = await store_call(db, db.execute(select(User).where(User.email == email)))
            return result.scalar_one_or_none()
        except MestoError:
            raise
        except Exception as e:
            logger.error("Database error looking up user by email: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})


user_service = UserService()
