"""Auth endpoint tests — sign-in, refresh rotation, sign-out, session, password."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from grofast.auth.models import UserSession
from grofast.common.rate_limit import SIGN_IN_LIMIT
from grofast.config import settings
from tests.conftest import DEFAULT_PASSWORD, create_access_token, make_auth_user


# ═════════════════════════════════════════════════════════════════════
# Sign-in
# ═════════════════════════════════════════════════════════════════════


class TestSignIn:
    async def test_valid_credentials_return_token_pair(self, client, admin):
        resp = await client.post(
            "/api/v1/auth/sign-in",
            json={"email": "admin@grofast.app", "password": DEFAULT_PASSWORD},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["access_token"]
        assert body["refresh_token"]
        assert body["token_type"] == "bearer"
        assert body["user"]["id"] == str(admin.id)
        assert body["user"]["last_sign_in_at"] is not None

    async def test_email_is_case_insensitive(self, client, admin):
        resp = await client.post(
            "/api/v1/auth/sign-in",
            json={"email": "Admin@GroFast.app", "password": DEFAULT_PASSWORD},
        )
        assert resp.status_code == 200

    async def test_wrong_password_and_unknown_email_look_the_same(self, client, admin):
        wrong = await client.post(
            "/api/v1/auth/sign-in",
            json={"email": "admin@grofast.app", "password": "not-it"},
        )
        unknown = await client.post(
            "/api/v1/auth/sign-in",
            json={"email": "nobody@grofast.app", "password": "not-it"},
        )
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json()["detail"] == unknown.json()["detail"] == "Invalid login credentials"
        assert wrong.headers["content-type"].startswith("application/problem+json")

    async def test_malformed_email_is_422(self, client):
        resp = await client.post(
            "/api/v1/auth/sign-in",
            json={"email": "not-an-email", "password": "x"},
        )
        assert resp.status_code == 422
        assert "email" in resp.json()["errors"]

    async def test_sign_in_is_rate_limited(self, client, admin):
        """Failed attempts count toward the limit; the next one is refused."""
        limit = int(SIGN_IN_LIMIT.split("/")[0])
        for i in range(limit):
            resp = await client.post(
                "/api/v1/auth/sign-in",
                json={"email": "admin@grofast.app", "password": f"guess-{i}"},
            )
            assert resp.status_code == 401, f"Attempt {i + 1} should not be limited"

        resp = await client.post(
            "/api/v1/auth/sign-in",
            json={"email": "admin@grofast.app", "password": DEFAULT_PASSWORD},
        )
        assert resp.status_code == 429


# ═════════════════════════════════════════════════════════════════════
# Refresh
# ═════════════════════════════════════════════════════════════════════


async def _sign_in(client, email: str = "admin@grofast.app") -> dict:
    resp = await client.post(
        "/api/v1/auth/sign-in",
        json={"email": email, "password": DEFAULT_PASSWORD},
    )
    assert resp.status_code == 200
    return resp.json()


class TestRefresh:
    async def test_refresh_rotates_tokens(self, client, admin):
        tokens = await _sign_in(client)
        resp = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]},
        )
        assert resp.status_code == 200
        fresh = resp.json()
        assert fresh["refresh_token"] != tokens["refresh_token"]
        assert fresh["access_token"] != tokens["access_token"]

    async def test_reused_refresh_token_revokes_everything(self, client, db, admin):
        tokens = await _sign_in(client)
        first = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]},
        )
        assert first.status_code == 200

        replay = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]},
        )
        assert replay.status_code == 401

        result = await db.execute(
            select(UserSession).where(
                UserSession.user_id == admin.id,
                UserSession.is_revoked.is_(False),
            )
        )
        assert result.scalars().all() == []

    async def test_access_token_is_not_a_refresh_token(self, client, admin):
        tokens = await _sign_in(client)
        resp = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]},
        )
        assert resp.status_code == 401


# ═════════════════════════════════════════════════════════════════════
# Session / sign-out
# ═════════════════════════════════════════════════════════════════════


class TestSession:
    async def test_session_includes_profile(self, client, member, member_headers):
        resp = await client.get("/api/v1/auth/session", headers=member_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["email"] == "member@grofast.app"
        assert body["employee"]["id"] == str(member.id)
        assert body["employee"]["role"] == "member"

    async def test_session_without_profile(self, client, db):
        await make_auth_user(db, email="orphan@grofast.app")
        tokens = await _sign_in(client, "orphan@grofast.app")
        resp = await client.get(
            "/api/v1/auth/session",
            headers={"Authorization": f"Bearer {tokens['access_token']}"},
        )
        assert resp.status_code == 200
        assert resp.json()["employee"] is None

    async def test_profile_less_user_is_forbidden_elsewhere(self, client, db):
        await make_auth_user(db, email="orphan@grofast.app")
        tokens = await _sign_in(client, "orphan@grofast.app")
        resp = await client.get(
            "/api/v1/tasks",
            headers={"Authorization": f"Bearer {tokens['access_token']}"},
        )
        assert resp.status_code == 403

    async def test_missing_token_is_401(self, client):
        resp = await client.get("/api/v1/auth/session")
        assert resp.status_code == 401

    async def test_token_without_session_row_is_401(self, client, admin):
        token = create_access_token(admin.id)
        resp = await client.get(
            "/api/v1/auth/session", headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 401

    async def test_expired_token_is_401(self, client, admin):
        token = create_access_token(admin.id, expired=True)
        resp = await client.get(
            "/api/v1/auth/session", headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 401

    async def test_sign_out_revokes_the_session(self, client, admin):
        tokens = await _sign_in(client)
        headers = {"Authorization": f"Bearer {tokens['access_token']}"}
        resp = await client.post("/api/v1/auth/sign-out", headers=headers)
        assert resp.status_code == 200

        again = await client.get("/api/v1/auth/session", headers=headers)
        assert again.status_code == 401


# ═════════════════════════════════════════════════════════════════════
# Password
# ═════════════════════════════════════════════════════════════════════


class TestPassword:
    async def test_update_password_then_sign_in(self, client, admin, admin_headers):
        resp = await client.put(
            "/api/v1/auth/password", json={"password": "brand-new-pass"}, headers=admin_headers,
        )
        assert resp.status_code == 200

        old = await client.post(
            "/api/v1/auth/sign-in",
            json={"email": "admin@grofast.app", "password": DEFAULT_PASSWORD},
        )
        assert old.status_code == 401
        new = await client.post(
            "/api/v1/auth/sign-in",
            json={"email": "admin@grofast.app", "password": "brand-new-pass"},
        )
        assert new.status_code == 200

    async def test_short_password_is_rejected(self, client, admin_headers):
        resp = await client.put(
            "/api/v1/auth/password", json={"password": "abc"}, headers=admin_headers,
        )
        assert resp.status_code == 422
        assert "password" in resp.json()["errors"]


# ═════════════════════════════════════════════════════════════════════
# API key
# ═════════════════════════════════════════════════════════════════════


class TestApiKey:
    async def test_missing_api_key_is_401_when_configured(self, client, monkeypatch):
        monkeypatch.setattr(settings, "ANON_KEY", "anon-123")
        resp = await client.get("/api/v1/channels")
        assert resp.status_code == 401

    async def test_matching_api_key_passes_through(self, client, admin_headers, monkeypatch):
        monkeypatch.setattr(settings, "ANON_KEY", "anon-123")
        resp = await client.get(
            "/api/v1/channels", headers={**admin_headers, "apikey": "anon-123"},
        )
        assert resp.status_code == 200

    async def test_health_needs_no_key(self, client, monkeypatch):
        monkeypatch.setattr(settings, "ANON_KEY", "anon-123")
        resp = await client.get("/api/v1/health")
        assert resp.status_code == 200


@pytest.mark.parametrize("path", ["/api/v1/employees", "/api/v1/dashboard", "/api/v1/reports"])
async def test_protected_routes_need_a_token(client, path):
    resp = await client.get(path)
    assert resp.status_code == 401
