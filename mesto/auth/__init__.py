"""
Mesto Backend - Authentication & Authorization
===============================================

Request lifecycle:
    cookie ──▶ TokenCodec.verify ──▶ Identity ──▶ handler ──▶ guard (owner check)

    tokens.py    Identity Token codec (PyJWT, HS256, 7-day expiry)
    passwords.py argon2 hashing via passlib
    session.py   `require_identity` dependency: cookie → Identity or 401
    guard.py     owner-only mutation check: 403 when actor != owner
"""

from mesto.auth.guard import can_mutate, ensure_can_mutate
from mesto.auth.session import Identity, require_identity
from mesto.auth.tokens import TokenCodec

__all__ = [
    "Identity",
    "TokenCodec",
    "can_mutate",
    "ensure_can_mutate",
    "require_identity",
]
