"""
Mesto Backend - API Integration Tests
======================================

End-to-end flows through the real application: routing, cookie sessions,
validation, ownership rules and like semantics, against an in-memory
SQLite store. Each client fixture is a separate cookie jar (a browser).
"""

import time
import uuid
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from mesto.auth.tokens import TokenCodec
from mesto.database import create_all, dispose_engine
from mesto.main import create_app
from mesto.services.user_service import user_service


def _assert_error(response, status_code: int, error: str) -> dict:
    assert response.status_code == status_code, response.text
    body = response.json()
    assert body["error"] == error
    assert body["message"]
    return body


# ══════════════════════════════════════════════════════════════════════════
# Sign-up / Sign-in / Sign-out
# ══════════════════════════════════════════════════════════════════════════

class TestAuthFlow:

    @pytest.mark.asyncio
    async def test_signup_returns_user_without_password(self, test_client: AsyncClient):
        response = await test_client.post("/signup", json={"email": "a@b.com", "password": "secret1"})

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "a@b.com"
        assert uuid.UUID(body["_id"])
        assert body["name"] == "Жак-Ив Кусто"
        assert body["about"] == "Исследователь"
        assert body["avatar"].startswith("https://")
        assert "password" not in body
        assert "password_hash" not in body

    @pytest.mark.asyncio
    async def test_full_session_lifecycle(self, test_client: AsyncClient):
        signup = await test_client.post("/signup", json={"email": "a@b.com", "password": "secret1"})
        user_id = signup.json()["_id"]

        signin = await test_client.post("/signin", json={"email": "a@b.com", "password": "secret1"})
        assert signin.status_code == 200
        cookie_header = signin.headers["set-cookie"]
        assert cookie_header.startswith("jwt=")
        assert "httponly" in cookie_header.lower()
        assert "Max-Age=604800" in cookie_header

        me = await test_client.get("/users/me")
        assert me.status_code == 200
        assert me.json()["_id"] == user_id

        signout = await test_client.delete("/signout")
        assert signout.status_code == 200

        after = await test_client.get("/users/me")
        _assert_error(after, 401, "unauthorized")

    @pytest.mark.asyncio
    async def test_signout_without_session_succeeds(self, test_client: AsyncClient):
        response = await test_client.delete("/signout")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict(self, test_client: AsyncClient):
        payload = {"email": "a@b.com", "password": "secret1"}
        assert (await test_client.post("/signup", json=payload)).status_code == 201

        response = await test_client.post("/signup", json={"email": "A@B.com", "password": "other12"})
        _assert_error(response, 409, "conflict")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "not-an-email", "password": "secret1"},
            {"email": "a@b.com", "password": "123"},
            {"email": "a@b.com"},
            {"email": "a@b.com", "password": "secret1", "avatar": "not a url"},
        ],
    )
    async def test_invalid_signup_is_400(self, test_client: AsyncClient, payload):
        body = _assert_error(await test_client.post("/signup", json=payload), 400, "validation_error")
        assert body["details"]

    @pytest.mark.asyncio
    async def test_validation_details_name_the_field(self, test_client: AsyncClient):
        response = await test_client.post("/signup", json={"email": "a@b.com", "password": "123"})

        body = _assert_error(response, 400, "validation_error")
        assert body["message"] == "Invalid request data"
        assert [d["field"] for d in body["details"]] == ["password"]

    @pytest.mark.asyncio
    async def test_bad_credentials_share_one_response(self, test_client: AsyncClient):
        await test_client.post("/signup", json={"email": "a@b.com", "password": "secret1"})

        wrong_password = await test_client.post(
            "/signin", json={"email": "a@b.com", "password": "wrong-one"}
        )
        unknown_email = await test_client.post(
            "/signin", json={"email": "nobody@b.com", "password": "secret1"}
        )

        _assert_error(wrong_password, 401, "unauthorized")
        _assert_error(unknown_email, 401, "unauthorized")
        assert wrong_password.json()["message"] == unknown_email.json()["message"]
        assert "set-cookie" not in wrong_password.headers


# ══════════════════════════════════════════════════════════════════════════
# Session Cookie Verification
# ══════════════════════════════════════════════════════════════════════════

class TestSessionGuard:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/users/me", "/users", "/cards"])
    async def test_protected_routes_require_cookie(self, test_client: AsyncClient, path):
        _assert_error(await test_client.get(path), 401, "unauthorized")

    @pytest.mark.asyncio
    async def test_auth_is_checked_before_body_validation(self, test_client: AsyncClient):
        response = await test_client.post("/cards", json={"name": "x"})
        _assert_error(response, 401, "unauthorized")

    @pytest.mark.asyncio
    async def test_expired_and_forged_cookies_are_rejected(
        self, app, client_factory, sign_up_and_in
    ):
        owner = client_factory()
        user = await sign_up_and_in(owner, "a@b.com")
        user_id = uuid.UUID(user["_id"])

        expired = app.state.token_codec.issue(user_id, now=time.time() - 8 * 24 * 3600)
        foreign = TokenCodec(secret="some-other-secret-value-0123456789abcdef").issue(user_id)

        messages = set()
        for token in [expired, foreign, "garbage"]:
            anonymous = client_factory()
            response = await anonymous.get("/users/me", headers={"Cookie": f"jwt={token}"})
            _assert_error(response, 401, "unauthorized")
            messages.add(response.json()["message"])
        assert len(messages) == 1

    @pytest.mark.asyncio
    async def test_valid_token_in_cookie_header_is_accepted(
        self, app, client_factory, sign_up_and_in
    ):
        user = await sign_up_and_in(client_factory(), "a@b.com")
        token = app.state.token_codec.issue(uuid.UUID(user["_id"]))

        response = await client_factory().get("/users/me", headers={"Cookie": f"jwt={token}"})
        assert response.status_code == 200
        assert response.json()["email"] == "a@b.com"


# ══════════════════════════════════════════════════════════════════════════
# Users
# ══════════════════════════════════════════════════════════════════════════

class TestUsers:

    @pytest.mark.asyncio
    async def test_update_profile_and_avatar(self, test_client: AsyncClient, sign_up_and_in):
        await sign_up_and_in(test_client, "a@b.com")

        profile = await test_client.patch("/users/me", json={"name": "Jacques", "about": "Diver"})
        assert profile.status_code == 200
        assert profile.json()["name"] == "Jacques"
        assert profile.json()["about"] == "Diver"

        avatar = await test_client.patch(
            "/users/me/avatar", json={"avatar": "https://example.com/me.png"}
        )
        assert avatar.status_code == 200
        assert avatar.json()["avatar"] == "https://example.com/me.png"

        me = (await test_client.get("/users/me")).json()
        assert me["name"] == "Jacques"
        assert me["avatar"] == "https://example.com/me.png"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path,payload",
        [
            ("/users/me", {"name": "J", "about": "Diver"}),
            ("/users/me", {"name": "Jacques"}),
            ("/users/me/avatar", {"avatar": "ftp://example.com/me.png"}),
        ],
    )
    async def test_invalid_updates_are_400(self, test_client, sign_up_and_in, path, payload):
        await sign_up_and_in(test_client, "a@b.com")
        _assert_error(await test_client.patch(path, json=payload), 400, "validation_error")

    @pytest.mark.asyncio
    async def test_lookup_other_users(self, client_factory, sign_up_and_in):
        alice, bob = client_factory(), client_factory()
        await sign_up_and_in(alice, "a@b.com")
        bob_user = await sign_up_and_in(bob, "bob@b.com")

        response = await alice.get(f"/users/{bob_user['_id']}")
        assert response.status_code == 200
        assert response.json()["email"] == "bob@b.com"

        listing = await alice.get("/users")
        assert {u["email"] for u in listing.json()} == {"a@b.com", "bob@b.com"}

        _assert_error(await alice.get(f"/users/{uuid.uuid4()}"), 404, "not_found")
        _assert_error(await alice.get("/users/not-a-uuid"), 400, "validation_error")


# ══════════════════════════════════════════════════════════════════════════
# Cards & Likes
# ══════════════════════════════════════════════════════════════════════════

class TestCards:

    @pytest.mark.asyncio
    async def test_create_card_embeds_owner(self, test_client, sign_up_and_in, valid_card):
        user = await sign_up_and_in(test_client, "a@b.com")

        response = await test_client.post("/cards", json=valid_card)

        assert response.status_code == 201
        card = response.json()
        assert card["name"] == valid_card["name"]
        assert card["link"] == valid_card["link"]
        assert card["owner"]["_id"] == user["_id"]
        assert card["likes"] == []
        assert "createdAt" in card

        feed = (await test_client.get("/cards")).json()
        assert [c["_id"] for c in feed] == [card["_id"]]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "A", "link": "https://example.com/a.png"},
            {"name": "Valid name", "link": "not-a-link"},
            {"link": "https://example.com/a.png"},
        ],
    )
    async def test_invalid_card_is_400(self, test_client, sign_up_and_in, payload):
        await sign_up_and_in(test_client, "a@b.com")
        _assert_error(await test_client.post("/cards", json=payload), 400, "validation_error")

    @pytest.mark.asyncio
    async def test_only_owner_can_delete(self, client_factory, sign_up_and_in, valid_card):
        alice, bob = client_factory(), client_factory()
        await sign_up_and_in(alice, "a@b.com")
        await sign_up_and_in(bob, "bob@b.com")

        card_id = (await alice.post("/cards", json=valid_card)).json()["_id"]

        _assert_error(await bob.delete(f"/cards/{card_id}"), 403, "forbidden")
        assert len((await alice.get("/cards")).json()) == 1

        deleted = await alice.delete(f"/cards/{card_id}")
        assert deleted.status_code == 200

        assert (await bob.get("/cards")).json() == []
        _assert_error(await alice.delete(f"/cards/{card_id}"), 404, "not_found")
        _assert_error(await bob.put(f"/cards/{card_id}/likes"), 404, "not_found")

    @pytest.mark.asyncio
    async def test_delete_liked_card(self, client_factory, sign_up_and_in, valid_card):
        alice, bob = client_factory(), client_factory()
        await sign_up_and_in(alice, "a@b.com")
        await sign_up_and_in(bob, "bob@b.com")
        card_id = (await alice.post("/cards", json=valid_card)).json()["_id"]
        await bob.put(f"/cards/{card_id}/likes")

        assert (await alice.delete(f"/cards/{card_id}")).status_code == 200
        assert (await alice.get("/cards")).json() == []

    @pytest.mark.asyncio
    async def test_like_is_idempotent(self, client_factory, sign_up_and_in, valid_card):
        alice, bob = client_factory(), client_factory()
        await sign_up_and_in(alice, "a@b.com")
        bob_user = await sign_up_and_in(bob, "bob@b.com")
        card_id = (await alice.post("/cards", json=valid_card)).json()["_id"]

        first = await bob.put(f"/cards/{card_id}/likes")
        second = await bob.put(f"/cards/{card_id}/likes")

        assert first.status_code == second.status_code == 200
        likes = second.json()["likes"]
        assert len(likes) == 1
        assert likes[0]["_id"] == bob_user["_id"]

        both = await alice.put(f"/cards/{card_id}/likes")
        assert len(both.json()["likes"]) == 2

    @pytest.mark.asyncio
    async def test_unlike_is_idempotent(self, client_factory, sign_up_and_in, valid_card):
        alice, bob = client_factory(), client_factory()
        await sign_up_and_in(alice, "a@b.com")
        await sign_up_and_in(bob, "bob@b.com")
        card_id = (await alice.post("/cards", json=valid_card)).json()["_id"]
        await bob.put(f"/cards/{card_id}/likes")

        # Alice never liked it; Bob's like stays
        untouched = await alice.delete(f"/cards/{card_id}/likes")
        assert untouched.status_code == 200
        assert len(untouched.json()["likes"]) == 1

        removed = await bob.delete(f"/cards/{card_id}/likes")
        again = await bob.delete(f"/cards/{card_id}/likes")
        assert removed.json()["likes"] == []
        assert again.json()["likes"] == []

    @pytest.mark.asyncio
    async def test_unknown_and_malformed_card_ids(self, test_client, sign_up_and_in):
        await sign_up_and_in(test_client, "a@b.com")

        _assert_error(await test_client.delete(f"/cards/{uuid.uuid4()}"), 404, "not_found")
        _assert_error(await test_client.put(f"/cards/{uuid.uuid4()}/likes"), 404, "not_found")
        _assert_error(await test_client.delete("/cards/123/likes"), 400, "validation_error")


# ══════════════════════════════════════════════════════════════════════════
# Infrastructure
# ══════════════════════════════════════════════════════════════════════════

class TestInfrastructure:

    @pytest.mark.asyncio
    async def test_health(self, test_client: AsyncClient):
        response = await test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client: AsyncClient):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, test_client: AsyncClient):
        response = await test_client.get("/cards")
        assert response.json()["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_unknown_route_is_structured_404(self, test_client: AsyncClient):
        _assert_error(await test_client.get("/nowhere"), 404, "not_found")


# ══════════════════════════════════════════════════════════════════════════
# Store Failures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def slow_store_app(test_settings):
    """An app whose store bound is far shorter than any real query."""
    config = test_settings.model_copy(update={"store_timeout_seconds": 0.000001})
    application = create_app(config)
    await create_all(application.state.engine)
    yield application
    await dispose_engine(application.state.engine)


class TestStoreFailures:

    @pytest.mark.asyncio
    async def test_store_timeout_is_503_with_retry_after(self, slow_store_app):
        transport = ASGITransport(app=slow_store_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post(
                "/signup", json={"email": "a@b.com", "password": "secret1"}
            )
            body = _assert_error(response, 503, "service_unavailable")
            assert response.headers["Retry-After"] == "1"
            assert "SELECT" not in body["message"] and "INSERT" not in body["message"]

            health = await client.get("/health")
            assert health.status_code == 503
            assert health.json()["status"] == "unhealthy"
            assert health.json()["database"] == "disconnected"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic_500(self, app, sign_up_and_in, monkeypatch):
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            await sign_up_and_in(client, "a@b.com")
            monkeypatch.setattr(
                user_service, "list_users", AsyncMock(side_effect=RuntimeError("pool exploded"))
            )

            response = await client.get("/users")

        body = _assert_error(response, 500, "server_error")
        assert "pool exploded" not in response.text
        assert "details" not in body
