"""Realtime Subscriber — one websocket reader per subscription.

Each ``subscribe`` opens ``/realtime/ws`` for one table (and optional
equality filters) and calls ``callback(row)`` for every insert event. The
caller unsubscribes on channel switch or teardown. No reconnect.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

import websockets
from websockets.exceptions import WebSocketException

from grofast.client.backend import BackendClient, websocket_url

logger = logging.getLogger(__name__)

EVENT_INSERT = "INSERT"

RowCallback = Callable[[dict], Union[Awaitable[None], None]]
Connector = Callable[[str], Any]


class Subscription:
    """Handle returned by ``subscribe``; calling it unsubscribes."""

    def __init__(self, table: str, task: asyncio.Task, ready: asyncio.Event) -> None:
        self.table = table
        self.ready = ready
        self._task = task

    @property
    def active(self) -> bool:
        return not self._task.done()

    async def wait_ready(self, timeout: Optional[float] = None) -> bool:
        """Wait until the server confirmed the subscription."""
        try:
            await asyncio.wait_for(self.ready.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    def unsubscribe(self) -> None:
        self._task.cancel()

    __call__ = unsubscribe

    async def wait_closed(self) -> None:
        try:
            await self._task
        except asyncio.CancelledError:
            pass


class RealtimeSubscriber:
    def __init__(
        self,
        url: str,
        token: str,
        *,
        anon_key: str = "",
        connect: Connector = websockets.connect,
    ) -> None:
        self.url = url
        self.token = token
        self.anon_key = anon_key
        self._connect = connect
        self._subscriptions: list[Subscription] = []

    @classmethod
    def from_backend(cls, backend: BackendClient, **kwargs: Any) -> RealtimeSubscriber:
        return cls(
            backend.base_url,
            backend.access_token or "",
            anon_key=backend.anon_key,
            **kwargs,
        )

    def _socket_url(self, table: str, filters: Mapping[str, Any]) -> str:
        params = {"table": table, "token": self.token}
        if self.anon_key:
            params["apikey"] = self.anon_key
        params.update({key: str(value) for key, value in filters.items()})
        return websocket_url(self.url, "/realtime/ws", params)

    def subscribe(
        self,
        table: str,
        callback: RowCallback,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> Subscription:
        ready = asyncio.Event()
        url = self._socket_url(table, filters or {})
        task = asyncio.create_task(self._read(table, url, callback, ready))
        subscription = Subscription(table, task, ready)
        self._subscriptions.append(subscription)
        task.add_done_callback(lambda _: self._forget(subscription))
        return subscription

    def _forget(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    async def _read(
        self,
        table: str,
        url: str,
        callback: RowCallback,
        ready: asyncio.Event,
    ) -> None:
        try:
            async with self._connect(url) as ws:
                async for raw in ws:
                    message = json.loads(raw)
                    if message.get("type") == "subscribed":
                        ready.set()
                        continue
                    if message.get("event") != EVENT_INSERT:
                        continue
                    try:
                        outcome = callback(message.get("row") or {})
                        if inspect.isawaitable(outcome):
                            await outcome
                    except Exception:
                        logger.exception("Realtime callback failed for %s", table)
        except (OSError, WebSocketException) as exc:
            logger.warning("Realtime subscription to %s closed: %s", table, exc)
        except json.JSONDecodeError:
            logger.error("Malformed realtime frame on %s", table)

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    async def close(self) -> None:
        subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription.unsubscribe()
        for subscription in subscriptions:
            await subscription.wait_closed()
