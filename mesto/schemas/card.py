"""
Mesto Backend - Card Schemas
=============================

CardCreate validates POST /cards bodies. CardResponse is what the feed and
every card mutation return: owner and likers are embedded as full users so
the frontend can check `card.owner._id` and `card.likes[i]._id` directly.
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mesto.schemas.common import validate_url
from mesto.schemas.user import UserResponse


class CardCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=30)
    link: str = Field(max_length=2048)

    @field_validator("link")
    @classmethod
    def check_link(cls, v: str) -> str:
        return validate_url(v)


class CardResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID = Field(alias="_id")
    name: str
    link: str
    owner: UserResponse
    likes: List[UserResponse] = Field(default_factory=list)
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_model(cls, card) -> "CardResponse":
        return cls(
            id=card.id,
            name=card.name,
            link=card.link,
            owner=UserResponse.from_model(card.owner),
            likes=[UserResponse.from_model(u) for u in card.likes],
            created_at=card.created_at,
        )
