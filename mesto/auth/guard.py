"""Owner-only mutation check."""

import uuid

from mesto.exceptions import AuthorizationError


def can_mutate(actor_id: uuid.UUID, owner_id: uuid.UUID) -> bool:
    """A resource may be mutated only by the identity that owns it."""
    return actor_id == owner_id


def ensure_can_mutate(actor_id: uuid.UUID, owner_id: uuid.UUID, resource: str = "resource") -> None:
    """Raise AuthorizationError (403) unless `actor_id` owns the resource."""
    if not can_mutate(actor_id, owner_id):
        raise AuthorizationError(
            message=f"You can only modify your own {resource}",
            context={"actor_id": str(actor_id), "owner_id": str(owner_id)},
        )
