"""
Mesto Backend - User SQLAlchemy Model
======================================

What:  ORM model for the `users` table.
How:   Email uniqueness is enforced by a unique index, so a duplicate
       registration surfaces as an IntegrityError that UserService maps to
       ConflictError. The password column only ever holds an argon2 hash.

Lifecycle:
    1. Created on POST /signup (name/about/avatar fall back to defaults)
    2. name/about/avatar updated only through /users/me endpoints
    3. Never deleted
"""

import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from mesto.database import Base

DEFAULT_NAME = "Жак-Ив Кусто"
DEFAULT_ABOUT = "Исследователь"
DEFAULT_AVATAR = (
    "https://pictures.s3.yandex.net/resources/jacques-cousteau_1604399756.png"
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(30), nullable=False, default=DEFAULT_NAME)
    about: Mapped[str] = mapped_column(String(30), nullable=False, default=DEFAULT_ABOUT)
    avatar: Mapped[str] = mapped_column(String(2048), nullable=False, default=DEFAULT_AVATAR)

    # Stored lower-cased by UserService so the unique index is case-insensitive
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True, index=True)

    # Write-only: no response schema has a field for it
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
