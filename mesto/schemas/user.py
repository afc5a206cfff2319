"""
Mesto Backend - User Schemas
=============================

Request models:
    SignUpRequest   POST /signup     email + password, optional profile fields
    SignInRequest   POST /signin     email + password
    ProfileUpdate   PATCH /users/me  name + about
    AvatarUpdate    PATCH /users/me/avatar

Response model:
    UserResponse    every endpoint that returns a user; has no password field
"""

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from mesto.schemas.common import validate_url


class SignUpRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    name: Optional[str] = Field(default=None, min_length=2, max_length=30)
    about: Optional[str] = Field(default=None, min_length=2, max_length=30)
    avatar: Optional[str] = Field(default=None, max_length=2048)

    @field_validator("avatar")
    @classmethod
    def check_avatar(cls, v: Optional[str]) -> Optional[str]:
        return validate_url(v) if v is not None else v


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=30)
    about: str = Field(min_length=2, max_length=30)


class AvatarUpdate(BaseModel):
    avatar: str = Field(max_length=2048)

    @field_validator("avatar")
    @classmethod
    def check_avatar(cls, v: str) -> str:
        return validate_url(v)


class UserResponse(BaseModel):
    """
    What:  Public representation of a user.
    Why:   `_id` is the key the frontend compares against card owners/likes.
           The alias is used for both input and output so FastAPI's response
           re-validation round-trips; populate_by_name lets services build
           it with `id=`.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID = Field(alias="_id")
    name: str
    about: str
    avatar: str
    email: EmailStr

    @classmethod
    def from_model(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            about=user.about,
            avatar=user.avatar,
            email=user.email,
        )
