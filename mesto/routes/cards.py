"""
Mesto Backend - Card Route Handlers
====================================

All routes require a session. Deletion is owner-only (403 otherwise);
likes are open to any authenticated user and are idempotent.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from mesto.auth.session import Identity, require_identity
from mesto.database import get_db_session
from mesto.schemas.card import CardCreate, CardResponse
from mesto.schemas.common import ErrorResponse, MessageResponse
from mesto.services.card_service import card_service

router = APIRouter(
    prefix="/cards",
    tags=["Cards"],
    dependencies=[Depends(require_identity)],
    responses={401: {"description": "Authorization required", "model": ErrorResponse}},
)


@router.get("", response_model=List[CardResponse], summary="Card feed, newest first")
async def list_cards(db: AsyncSession = Depends(get_db_session)) -> List[CardResponse]:
    return await card_service.list_cards(db)


@router.post(
    "",
    response_model=CardResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid input", "model": ErrorResponse}},
    summary="Create a card",
)
async def create_card(
    payload: CardCreate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CardResponse:
    return await card_service.create_card(db, identity.user_id, payload)


@router.delete(
    "/{card_id}",
    response_model=MessageResponse,
    responses={
        403: {"description": "Not the card owner", "model": ErrorResponse},
        404: {"description": "Card not found", "model": ErrorResponse},
    },
    summary="Delete own card",
)
async def delete_card(
    card_id: UUID,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await card_service.delete_card(db, identity.user_id, card_id)


@router.put(
    "/{card_id}/likes",
    response_model=CardResponse,
    responses={404: {"description": "Card not found", "model": ErrorResponse}},
    summary="Like a card (idempotent)",
)
async def like_card(
    card_id: UUID,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CardResponse:
    return await card_service.like_card(db, identity.user_id, card_id)


@router.delete(
    "/{card_id}/likes",
    response_model=CardResponse,
    responses={404: {"description": "Card not found", "model": ErrorResponse}},
    summary="Remove like (idempotent)",
)
async def unlike_card(
    card_id: UUID,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CardResponse:
    return await card_service.unlike_card(db, identity.user_id, card_id)
