"""
Mesto Backend - Sign-up / Sign-in / Sign-out Routes
====================================================

What:  The three endpoints reachable without a session.
How:   /signin verifies credentials, issues an Identity Token and sets it as
       an HTTP-only cookie; /signout clears that cookie. The token is not
       revocable server-side, so sign-out is purely client-side state and is
       safe to call with or without a valid cookie.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from mesto.auth.session import get_token_codec
from mesto.auth.tokens import TokenCodec
from mesto.database import get_db_session
from mesto.schemas.common import ErrorResponse, MessageResponse
from mesto.schemas.user import SignInRequest, SignUpRequest, UserResponse
from mesto.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/signup",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def signup(
    payload: SignUpRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.register(db, payload)


@router.post(
    "/signin",
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        401: {"description": "Incorrect email or password", "model": ErrorResponse},
    },
    summary="Sign in and receive the session cookie",
)
async def signin(
    payload: SignInRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    codec: TokenCodec = Depends(get_token_codec),
) -> MessageResponse:
    """
    Verify credentials and set the session cookie.

    Cookie attributes:
        httponly: page scripts cannot read the token
        max_age:  matches the token's own expiry
        secure / samesite: from settings (secure must be on in production)
    """
    user = await user_service.authenticate(db, payload.email, payload.password)
    token = codec.issue(user.id)

    config = request.app.state.settings
    response.set_cookie(
        key=config.cookie_name,
        value=token,
        max_age=codec.ttl_seconds,
        httponly=True,
        secure=config.cookie_secure,
        samesite=config.cookie_samesite,
    )
    logger.info("User %s signed in", user.id)
    return MessageResponse(message="Signed in")


@router.delete(
    "/signout",
    response_model=MessageResponse,
    summary="Clear the session cookie",
)
async def signout(request: Request, response: Response) -> MessageResponse:
    config = request.app.state.settings
    response.delete_cookie(
        key=config.cookie_name,
        httponly=True,
        secure=config.cookie_secure,
        samesite=config.cookie_samesite,
    )
    return MessageResponse(message="Signed out")
