"""Chat tests — default channels, message history, realtime fan-out."""

from __future__ import annotations

import uuid

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from grofast.realtime.hub import EVENT_INSERT, RealtimeHub
from grofast.realtime.router import CLOSE_UNAUTHORIZED, CLOSE_UNKNOWN_TABLE, session_is_active
from tests.conftest import TestSessionFactory, build_app, create_access_token


async def _general(client, headers) -> dict:
    resp = await client.get("/api/v1/channels", headers=headers)
    return next(c for c in resp.json() if c["name"] == "General")


# ═════════════════════════════════════════════════════════════════════
# Channels
# ═════════════════════════════════════════════════════════════════════


class TestChannels:
    async def test_defaults_seeded_on_first_listing(self, client, member_headers):
        resp = await client.get("/api/v1/channels", headers=member_headers)
        assert resp.status_code == 200
        assert sorted(c["name"] for c in resp.json()) == ["Announcements", "General"]

        again = await client.get("/api/v1/channels", headers=member_headers)
        assert len(again.json()) == 2

    async def test_admin_creates_channel(self, client, admin_headers):
        resp = await client.post(
            "/api/v1/channels", json={"name": "Design", "type": "department"}, headers=admin_headers,
        )
        assert resp.status_code == 201
        listed = await client.get("/api/v1/channels", headers=admin_headers)
        assert [c["name"] for c in listed.json()] == ["Design"]

    async def test_member_cannot_create_channel(self, client, member_headers):
        resp = await client.post("/api/v1/channels", json={"name": "Mine"}, headers=member_headers)
        assert resp.status_code == 403


# ═════════════════════════════════════════════════════════════════════
# Messages
# ═════════════════════════════════════════════════════════════════════


class TestMessages:
    async def test_post_and_read_history(self, client, member, member_headers, other_headers):
        general = await _general(client, member_headers)
        for text in ("first", "second", "third"):
            resp = await client.post(
                "/api/v1/messages",
                json={"channel_id": general["id"], "content": text},
                headers=member_headers if text != "second" else other_headers,
            )
            assert resp.status_code == 201

        history = await client.get(
            "/api/v1/messages", params={"channel_id": general["id"]}, headers=member_headers,
        )
        rows = history.json()
        assert [m["content"] for m in rows] == ["first", "second", "third"]
        assert rows[0]["sender"]["name"] == "Manu Member"
        assert rows[0]["sender_id"] == str(member.id)

    async def test_sender_comes_from_the_token(self, client, member, other_member, member_headers):
        general = await _general(client, member_headers)
        resp = await client.post(
            "/api/v1/messages",
            json={
                "channel_id": general["id"],
                "content": "hi",
                "sender_id": str(other_member.id),
            },
            headers=member_headers,
        )
        assert resp.json()["sender_id"] == str(member.id)

    async def test_blank_message_is_422(self, client, member_headers):
        general = await _general(client, member_headers)
        resp = await client.post(
            "/api/v1/messages",
            json={"channel_id": general["id"], "content": ""},
            headers=member_headers,
        )
        assert resp.status_code == 422

    async def test_unknown_channel_is_422(self, client, member_headers):
        resp = await client.post(
            "/api/v1/messages",
            json={"channel_id": str(uuid.uuid4()), "content": "hello?"},
            headers=member_headers,
        )
        assert resp.status_code == 422

    async def test_history_is_capped(self, client, member_headers):
        general = await _general(client, member_headers)
        for i in range(3):
            await client.post(
                "/api/v1/messages",
                json={"channel_id": general["id"], "content": f"m{i}"},
                headers=member_headers,
            )
        resp = await client.get(
            "/api/v1/messages",
            params={"channel_id": general["id"], "limit": 2},
            headers=member_headers,
        )
        assert [m["content"] for m in resp.json()] == ["m0", "m1"]

    async def test_only_sender_edits(self, client, member_headers, other_headers):
        general = await _general(client, member_headers)
        msg = (
            await client.post(
                "/api/v1/messages",
                json={"channel_id": general["id"], "content": "typo"},
                headers=member_headers,
            )
        ).json()

        denied = await client.patch(
            f"/api/v1/messages/{msg['id']}", json={"content": "nope"}, headers=other_headers,
        )
        assert denied.status_code == 403
        fixed = await client.patch(
            f"/api/v1/messages/{msg['id']}", json={"content": "fixed"}, headers=member_headers,
        )
        assert fixed.json()["content"] == "fixed"

    async def test_post_publishes_after_commit(self, app, client, member_headers):
        received = []
        hub: RealtimeHub = app.state.realtime
        general = await _general(client, member_headers)
        unsubscribe = hub.subscribe("messages", received.append, {"channel_id": general["id"]})

        resp = await client.post(
            "/api/v1/messages",
            json={"channel_id": general["id"], "content": "live"},
            headers=member_headers,
        )
        unsubscribe()

        assert len(received) == 1
        assert received[0].event == EVENT_INSERT
        assert received[0].row["id"] == resp.json()["id"]


# ═════════════════════════════════════════════════════════════════════
# Hub
# ═════════════════════════════════════════════════════════════════════


class TestRealtimeHub:
    async def test_filters_and_unsubscribe(self):
        hub = RealtimeHub()
        seen = []
        stop = hub.subscribe("messages", seen.append, {"channel_id": "a"})

        assert await hub.publish("messages", EVENT_INSERT, {"id": 1, "channel_id": "a"}) == 1
        assert await hub.publish("messages", EVENT_INSERT, {"id": 2, "channel_id": "b"}) == 0
        assert await hub.publish("announcements", EVENT_INSERT, {"id": 3}) == 0
        stop()
        assert await hub.publish("messages", EVENT_INSERT, {"id": 4, "channel_id": "a"}) == 0
        assert [e.row["id"] for e in seen] == [1]
        assert hub.subscriber_count() == 0

    async def test_failing_subscriber_does_not_block_others(self):
        hub = RealtimeHub()
        seen = []

        def boom(event):
            raise RuntimeError("subscriber bug")

        hub.subscribe("messages", boom)
        hub.subscribe("messages", seen.append)
        assert await hub.publish("messages", EVENT_INSERT, {"id": 1}) == 1
        assert len(seen) == 1


# ═════════════════════════════════════════════════════════════════════
# Websocket
# ═════════════════════════════════════════════════════════════════════


def _socket_app(active: bool = True):
    """App whose session-row lookup is stubbed; TestClient runs its own loop."""
    application = build_app()
    application.dependency_overrides[session_is_active] = lambda: active
    return application


class TestRealtimeWebsocket:
    def test_streams_matching_inserts(self):
        token = create_access_token(uuid.uuid4())
        channel = str(uuid.uuid4())
        with TestClient(_socket_app()) as tc:
            url = f"/api/v1/realtime/ws?table=messages&token={token}&channel_id={channel}"
            with tc.websocket_connect(url) as ws:
                hello = ws.receive_json()
                assert hello == {
                    "type": "subscribed",
                    "table": "messages",
                    "filters": {"channel_id": channel},
                }

                hub = tc.app.state.realtime
                tc.portal.call(hub.publish, "messages", EVENT_INSERT, {"id": "x", "channel_id": "other"})
                tc.portal.call(hub.publish, "messages", EVENT_INSERT, {"id": "y", "channel_id": channel})

                frame = ws.receive_json()
                assert frame == {
                    "table": "messages",
                    "event": "INSERT",
                    "row": {"id": "y", "channel_id": channel},
                }

    def test_bad_token_closes_with_4001(self):
        with TestClient(_socket_app()) as tc:
            with pytest.raises(WebSocketDisconnect) as exc_info:
                with tc.websocket_connect("/api/v1/realtime/ws?table=messages&token=garbage"):
                    pass
            assert exc_info.value.code == CLOSE_UNAUTHORIZED

    def test_expired_token_closes_with_4001(self):
        token = create_access_token(uuid.uuid4(), expired=True)
        with TestClient(_socket_app()) as tc:
            with pytest.raises(WebSocketDisconnect) as exc_info:
                with tc.websocket_connect(f"/api/v1/realtime/ws?table=messages&token={token}"):
                    pass
            assert exc_info.value.code == CLOSE_UNAUTHORIZED

    def test_revoked_session_closes_with_4001(self):
        token = create_access_token(uuid.uuid4())
        with TestClient(_socket_app(active=False)) as tc:
            with pytest.raises(WebSocketDisconnect) as exc_info:
                with tc.websocket_connect(f"/api/v1/realtime/ws?table=messages&token={token}"):
                    pass
            assert exc_info.value.code == CLOSE_UNAUTHORIZED

    def test_unknown_table_closes_with_4004(self):
        token = create_access_token(uuid.uuid4())
        with TestClient(_socket_app()) as tc:
            with pytest.raises(WebSocketDisconnect) as exc_info:
                with tc.websocket_connect(f"/api/v1/realtime/ws?table=salaries&token={token}"):
                    pass
            assert exc_info.value.code == CLOSE_UNKNOWN_TABLE


class TestSocketSession:
    async def test_live_session_is_active(self, member_headers):
        token = member_headers["Authorization"].removeprefix("Bearer ")
        assert await session_is_active(token, TestSessionFactory) is True

    async def test_signed_out_session_is_not_active(self, client, member_headers):
        token = member_headers["Authorization"].removeprefix("Bearer ")
        resp = await client.post("/api/v1/auth/sign-out", headers=member_headers)
        assert resp.status_code == 200
        assert await session_is_active(token, TestSessionFactory) is False

    async def test_token_without_session_row(self, member):
        assert await session_is_active(create_access_token(member.id), TestSessionFactory) is False
