"""
Mesto Backend - Card SQLAlchemy Model
======================================

What:  ORM model for the `cards` table and the `card_likes` association.
Why:   Likes are a set, not a counter. Storing them as rows keyed by
       (card_id, user_id) lets like/unlike be single atomic statements
       (insert-if-absent / delete) with no read-modify-write race.

Query Patterns:
    - Card feed: ORDER BY created_at DESC, owner and likes loaded with
      SELECT IN (lazy="selectin") so async code never lazy-loads.
    - Like membership: primary key lookup on (card_id, user_id).
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Table, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mesto.database import Base

card_likes = Table(
    "card_likes",
    Base.metadata,
    Column("card_id", Uuid, ForeignKey("cards.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Card(Base):
    __tablename__ = "cards"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(30), nullable=False)
    link: Mapped[str] = mapped_column(String(2048), nullable=False)

    # Set once at creation; no code path updates it
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    owner: Mapped["User"] = relationship("User", lazy="selectin")  # noqa: F821
    likes: Mapped[List["User"]] = relationship(  # noqa: F821
        "User",
        secondary=card_likes,
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_cards_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Card(id={self.id}, owner_id={self.owner_id}, name='{self.name}')>"
