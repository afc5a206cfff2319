"""
Mesto Backend - Session Dependency
===================================

What:  Turns the session cookie of an inbound request into an Identity.
Why:   Every /users and /cards handler needs to know who is calling, and
       must never run for an anonymous caller.
How:   FastAPI dependency attached at router level. FastAPI caches a
       dependency per request, so the token is verified once and the same
       Identity value is handed to the handler that declares it.

Per-request states:
    Unauthenticated ──(valid token)──▶ Authenticated(user_id)
          │
          └──(missing / malformed / tampered / expired)──▶ 401, handler never runs

Exempt routes (no dependency): /signup, /signin, /signout, /health.
"""

import logging
import uuid
from dataclasses import dataclass

from fastapi import Depends, Request

from mesto.auth.tokens import TokenCodec
from mesto.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller of the current request."""
    user_id: uuid.UUID


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


async def require_identity(
    request: Request,
    codec: TokenCodec = Depends(get_token_codec),
) -> Identity:
    """
    Resolve the caller or reject the request.

    Raises:
        AuthenticationError: no cookie, or the token fails verification.
            The response is identical for every failure reason; the reason
            is only logged.
    """
    cookie_name = request.app.state.settings.cookie_name
    token = request.cookies.get(cookie_name)

    try:
        user_id = codec.verify(token)
    except AuthenticationError as e:
        logger.warning(
            "Session rejected on %s %s: %s",
            request.method,
            request.url.path,
            e.context.get("reason", "unknown"),
        )
        raise

    request.state.user_id = user_id
    return Identity(user_id=user_id)
