"""
Mesto API Client
=================

What:  Async client for the Mesto HTTP API, the programmatic counterpart
       of the browser's fetch wrapper.
How:   One request primitive (`_request`) on top of httpx.AsyncClient. The
       client keeps a cookie jar, so the session cookie set by /signin
       travels with every later call (the `credentials: "include"`
       behaviour of the browser).

Contract:
    2xx      → parsed JSON body
    non-2xx  → ApiError carrying only the status code; the server's error
               body is not parsed. Nothing is retried.

Usage:
    async with MestoApi("http://localhost:3000") as api:
        await api.authorize("a@b.com", "secret1")
        cards, me = await api.get_app_info()
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Content-Type": "application/json"}


class ApiError(Exception):
    """A request finished with a non-2xx status."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"Error: {status_code}")


class MestoApi:
    """
    Thin wrapper over the Mesto endpoints.

    Args:
        base_url: API root, e.g. "https://api.mesto.example"
        headers: sent with every request (defaults to JSON content type)
        credentials: keep and resend cookies; False drops them after each call
        timeout: per-request timeout in seconds
        transport: optional httpx transport (tests use MockTransport/ASGITransport)
    """

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        credentials: bool = True,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._headers = dict(headers or DEFAULT_HEADERS)
        self._credentials = credentials
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> "MestoApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Request primitive ─────────────────────────────────────────────────

    async def _request(self, path: str, method: str, json: Optional[dict] = None) -> Any:
        response = await self._client.request(
            method,
            f"{self._base_url}/{path}",
            headers=self._headers,
            json=json,
        )
        if not self._credentials:
            self._client.cookies.clear()
        return self._render_response(response)

    @staticmethod
    def _render_response(response: httpx.Response) -> Any:
        if response.is_success:
            return response.json()
        logger.debug("%s %s → %d", response.request.method, response.request.url, response.status_code)
        raise ApiError(response.status_code)

    # ── Profile ───────────────────────────────────────────────────────────

    async def get_user_info(self) -> dict:
        return await self._request("users/me", "GET")

    async def edit_profile(self, name: str, about: str) -> dict:
        return await self._request("users/me", "PATCH", {"name": name, "about": about})

    async def update_avatar(self, avatar: str) -> dict:
        return await self._request("users/me/avatar", "PATCH", {"avatar": avatar})

    # ── Cards ─────────────────────────────────────────────────────────────

    async def get_initial_cards(self) -> List[dict]:
        return await self._request("cards", "GET")

    async def get_app_info(self) -> Tuple[List[dict], dict]:
        """
        Fetch the card feed and the current user concurrently.

        Fails if either request fails.
        """
        cards, user = await asyncio.gather(self.get_initial_cards(), self.get_user_info())
        return cards, user

    async def add_card(self, name: str, link: str) -> dict:
        return await self._request("cards", "POST", {"name": name, "link": link})

    async def delete_card(self, card_id: str) -> dict:
        return await self._request(f"cards/{card_id}", "DELETE")

    async def set_like(self, card_id: str) -> dict:
        return await self._request(f"cards/{card_id}/likes", "PUT")

    async def remove_like(self, card_id: str) -> dict:
        return await self._request(f"cards/{card_id}/likes", "DELETE")

    async def change_like_card_status(self, card_id: str, is_liked: bool) -> dict:
        """Remove the like if the card is currently liked, otherwise add it."""
        if is_liked:
            return await self.remove_like(card_id)
        return await self.set_like(card_id)

    # ── Auth ──────────────────────────────────────────────────────────────

    async def register(self, email: str, password: str) -> dict:
        return await self._request("signup", "POST", {"password": password, "email": email})

    async def authorize(self, email: str, password: str) -> dict:
        return await self._request("signin", "POST", {"password": password, "email": email})

    async def sign_out(self) -> dict:
        return await self._request("signout", "DELETE")
