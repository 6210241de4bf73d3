"""Channel feed tests — history, live merge, de-duplication, channel switch."""

from __future__ import annotations

import pytest

from grofast.client.chat import HISTORY_LIMIT, ChannelFeed
from grofast.client.result import BackendError, Err, Ok


class FakeSubscription:
    def __init__(self) -> None:
        self.closed = False

    def unsubscribe(self) -> None:
        self.closed = True


class FakeRealtime:
    def __init__(self) -> None:
        self.subscriptions: list[tuple[str, object, dict, FakeSubscription]] = []

    def subscribe(self, table, callback, filters=None):
        handle = FakeSubscription()
        self.subscriptions.append((table, callback, dict(filters or {}), handle))
        return handle

    def push(self, row: dict) -> None:
        for _, callback, _, handle in self.subscriptions:
            if not handle.closed:
                callback(row)


class FakeMessages:
    def __init__(self, history: dict[str, list[dict]]) -> None:
        self.history = history
        self.list_calls = []
        self.created = []

    async def list(self, filters=None, *, order=None, limit=None):
        self.list_calls.append((dict(filters or {}), order, limit))
        return Ok(list(self.history.get(filters["channel_id"], [])))

    async def create(self, fields):
        row = {
            "id": f"m{len(self.created) + 100}",
            "channel_id": fields["channel_id"],
            "content": fields["content"],
            "created_at": "2026-10-18T12:00:00+00:00",
        }
        self.created.append(row)
        return Ok(row)


def _msg(msg_id: str, channel: str, at: str) -> dict:
    return {"id": msg_id, "channel_id": channel, "content": msg_id, "created_at": at}


@pytest.fixture
def history() -> dict[str, list[dict]]:
    return {
        "general": [
            _msg("m2", "general", "2026-10-18T10:05:00+00:00"),
            _msg("m1", "general", "2026-10-18T10:00:00+00:00"),
        ],
        "design": [_msg("d1", "design", "2026-10-18T09:00:00+00:00")],
    }


async def test_open_subscribes_then_loads_history(history):
    realtime, messages = FakeRealtime(), FakeMessages(history)
    feed = ChannelFeed(messages, realtime)

    result = await feed.open("general")
    assert [m["id"] for m in result.value] == ["m1", "m2"]
    assert realtime.subscriptions[0][0] == "messages"
    assert realtime.subscriptions[0][2] == {"channel_id": "general"}
    assert messages.list_calls == [({"channel_id": "general"}, "created_at", HISTORY_LIMIT)]


async def test_live_insert_is_appended(history):
    realtime = FakeRealtime()
    feed = ChannelFeed(FakeMessages(history), realtime, "general")
    await feed.open()

    realtime.push(_msg("m3", "general", "2026-10-18T10:10:00+00:00"))
    assert [m["id"] for m in feed.items] == ["m1", "m2", "m3"]


async def test_own_message_echo_is_not_duplicated(history):
    realtime = FakeRealtime()
    feed = ChannelFeed(FakeMessages(history), realtime, "general")
    await feed.open()

    sent = await feed.send("hello")
    realtime.push(dict(sent.value))
    assert [m["id"] for m in feed.items].count(sent.value["id"]) == 1
    assert len(feed.items) == 3


async def test_rows_from_other_channels_are_ignored(history):
    feed = ChannelFeed(FakeMessages(history), FakeRealtime(), "general")
    await feed.open()
    assert feed.merge(_msg("x", "design", "2026-10-18T11:00:00+00:00")) is False
    assert len(feed.items) == 2


async def test_switch_closes_old_subscription(history):
    realtime = FakeRealtime()
    feed = ChannelFeed(FakeMessages(history), realtime, "general")
    await feed.open()

    result = await feed.switch("design")
    assert [m["id"] for m in result.value] == ["d1"]
    assert realtime.subscriptions[0][3].closed is True
    assert realtime.subscriptions[1][3].closed is False

    realtime.push(_msg("late", "general", "2026-10-18T12:00:00+00:00"))
    assert [m["id"] for m in feed.items] == ["d1"]


async def test_history_error_is_kept(history):
    class Failing(FakeMessages):
        async def list(self, filters=None, *, order=None, limit=None):
            return Err(BackendError(message="down", status=503))

    feed = ChannelFeed(Failing(history), FakeRealtime(), "general")
    result = await feed.open()
    assert isinstance(result, Err)
    assert feed.error.status == 503


async def test_open_needs_a_channel():
    feed = ChannelFeed(FakeMessages({}), FakeRealtime())
    with pytest.raises(ValueError):
        await feed.open()


async def test_close_is_idempotent(history):
    realtime = FakeRealtime()
    feed = ChannelFeed(FakeMessages(history), realtime, "general")
    await feed.open()
    feed.close()
    feed.close()
    assert realtime.subscriptions[0][3].closed is True
