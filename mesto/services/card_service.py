"""
Mesto Backend - Card Service
=============================

What:  Card feed, creation, owner-only deletion and idempotent likes.
Why:   Ownership and like semantics are business rules; routes stay thin.
How:   Stateless methods receiving the request's AsyncSession.

Like Semantics (set, not toggle):
    PUT    /cards/{id}/likes → INSERT (card_id, user_id) ON CONFLICT DO NOTHING
    DELETE /cards/{id}/likes → DELETE WHERE card_id = :id AND user_id = :user
    Both are single statements, so repeating a call converges on the same
    membership and two concurrent likes cannot double-count.

Deletion:
    fetch → NotFoundError if absent → owner check (403) → delete likes → delete card
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mesto.auth.guard import ensure_can_mutate
from mesto.database import store_call
from mesto.exceptions import DatabaseError, MestoError, NotFoundError
from mesto.models.card import Card, card_likes
from mesto.models.user import User
from mesto.schemas.card import CardCreate, CardResponse
from mesto.schemas.common import MessageResponse

logger = logging.getLogger(__name__)


class CardService:
    """Business logic layer for card operations."""

    async def list_cards(self, db: AsyncSession) -> List[CardResponse]:
        """Return every card, newest first, with owner and likers embedded."""
        query = (
            select(Card)
            .options(selectinload(Card.owner), selectinload(Card.likes))
            .order_by(Card.created_at.desc())
        )
        try:
            result = await store_call(db, db.execute(query))
            cards = list(result.scalars().all())
        except MestoError:
            raise
        except Exception as e:
            logger.error("Database error listing cards: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve cards. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [CardResponse.from_model(card) for card in cards]

    async def get_card(self, db: AsyncSession, card_id: UUID) -> CardResponse:
        card = await self._require_card(db, card_id)
        return CardResponse.from_model(card)

    async def create_card(
        self, db: AsyncSession, owner_id: UUID, payload: CardCreate
    ) -> CardResponse:
        """
        Create a card owned by `owner_id`.

        Raises:
            NotFoundError: the owner no longer resolves to a user
        """
        try:
            owner = await store_call(db, db.get(User, owner_id))
            if owner is None:
                raise NotFoundError(resource="user", resource_id=str(owner_id))

            card = Card(name=payload.name, link=payload.link, owner_id=owner_id)
            db.add(card)
            await store_call(db, db.flush())
        except MestoError:
            raise
        except Exception as e:
            logger.error("Database error creating card: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the card. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Card %s created by %s", card.id, owner_id)
        return await self.get_card(db, card.id)

    async def delete_card(
        self, db: AsyncSession, actor_id: UUID, card_id: UUID
    ) -> MessageResponse:
        """
        Delete a card on behalf of `actor_id`.

        Raises:
            NotFoundError: no such card
            AuthorizationError: `actor_id` is not the owner
        """
        card = await self._require_card(db, card_id)
        ensure_can_mutate(actor_id, card.owner_id, resource="cards")

        try:
            drop_likes = delete(card_likes).where(card_likes.c.card_id == card_id)
            await store_call(db, db.execute(drop_likes))
            await store_call(db, db.execute(delete(Card).where(Card.id == card_id)))
        except MestoError:
            raise
        except Exception as e:
            logger.error("Database error deleting card %s: %s", card_id, str(e), exc_info=True)
            raise DatabaseError(context={"card_id": str(card_id)})

        logger.info("Card %s deleted by owner %s", card_id, actor_id)
        return MessageResponse(message="Card deleted")

    async def like_card(self, db: AsyncSession, user_id: UUID, card_id: UUID) -> CardResponse:
        """Add `user_id` to the card's likers. Liking twice is a no-op."""
        await self._require_card(db, card_id)
        try:
            await self._insert_like(db, card_id, user_id)
        except MestoError:
            raise
        except Exception as e:
            logger.error("Database error liking card %s: %s", card_id, str(e), exc_info=True)
            raise DatabaseError(context={"card_id": str(card_id)})
        return await self.get_card(db, card_id)

    async def unlike_card(self, db: AsyncSession, user_id: UUID, card_id: UUID) -> CardResponse:
        """Remove `user_id` from the card's likers. Unliking a never-liked card is a no-op."""
        await self._require_card(db, card_id)
        stmt = delete(card_likes).where(
            card_likes.c.card_id == card_id,
            card_likes.c.user_id == user_id,
        )
        try:
            await store_call(db, db.execute(stmt))
        except MestoError:
            raise
        except Exception as e:
            logger.error("Database error unliking card %s: %s", card_id, str(e), exc_info=True)
            raise DatabaseError(context={"card_id": str(card_id)})
        return await self.get_card(db, card_id)

    async def _insert_like(self, db: AsyncSession, card_id: UUID, user_id: UUID) -> None:
        values = {"card_id": card_id, "user_id": user_id}
        dialect = db.get_bind().dialect.name

        if dialect == "postgresql":
            stmt = pg_insert(card_likes).values(**values).on_conflict_do_nothing()
        elif dialect == "sqlite":
            stmt = sqlite_insert(card_likes).values(**values).on_conflict_do_nothing()
        else:
            # No portable upsert; check membership first
            exists = await store_call(
                db,
                db.execute(
                    select(card_likes.c.user_id).where(
                        card_likes.c.card_id == card_id,
                        card_likes.c.user_id == user_id,
                    )
                )
            )
            if exists.first() is not None:
                return
            stmt = card_likes.insert().values(**values)

        await store_call(db, db.execute(stmt))

    async def _find_card(self, db: AsyncSession, card_id: UUID) -> Optional[Card]:
        # populate_existing: likes may have changed under this session via core statements
        query = (
            select(Card)
            .options(selectinload(Card.owner), selectinload(Card.likes))
            .where(Card.id == card_id)
            .execution_options(populate_existing=True)
        )
        try:
            result = await store_call(db, db.execute(query))
            return result.scalar_one_or_none()
        except MestoError:
            raise
        except Exception as e:
            logger.error("Database error fetching card %s: %s", card_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the card. Please try again.",
                context={"card_id": str(card_id)},
            )

    async def _require_card(self, db: AsyncSession, card_id: UUID) -> Card:
        card = await self._find_card(db, card_id)
        if card is None:
            raise NotFoundError(resource="card", resource_id=str(card_id))
        return card


card_service = CardService()
