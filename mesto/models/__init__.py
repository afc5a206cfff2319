"""
Mesto Backend - ORM Models
===========================

Tables:
    users       User accounts (email unique, password stored as argon2 hash)
    cards       Photo posts, each with an immutable owner
    card_likes  (card_id, user_id) membership; the composite primary key
                makes "a user likes a card at most once" a rule the database enforces
"""

from mesto.models.card import Card, card_likes
from mesto.models.user import User

__all__ = ["Card", "User", "card_likes"]
