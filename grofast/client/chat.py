"""Channel feed — message history plus live inserts, de-duplicated by id.

A message the caller posts comes back twice: once in the create response
and once as the realtime echo. Both land in the same id-keyed map.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from grofast.client.fetcher import EntityFetcher, RequestFence
from grofast.client.realtime import RealtimeSubscriber, Subscription
from grofast.client.result import Err, Ok, Result

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


class ChannelFeed:
    def __init__(
        self,
        messages: EntityFetcher,
        realtime: RealtimeSubscriber,
        channel_id: Optional[Any] = None,
    ) -> None:
        self.messages = messages
        self.realtime = realtime
        self.channel_id = str(channel_id) if channel_id is not None else None
        self.error = None
        self._rows: dict[str, dict] = {}
        self._subscription: Optional[Subscription] = None
        self._fence = RequestFence()

    @property
    def items(self) -> list[dict]:
        """Messages oldest first; ties broken by id."""
        return sorted(
            self._rows.values(),
            key=lambda row: (str(row.get("created_at") or ""), str(row["id"])),
        )

    def merge(self, row: dict) -> bool:
        """Add or replace ``row``; returns ``False`` for rows of another channel."""
        if self.channel_id is None or str(row.get("channel_id")) != self.channel_id:
            return False
        self._rows[str(row["id"])] = row
        return True

    async def open(self, channel_id: Optional[Any] = None) -> Result[list[dict]]:
        """Subscribe to inserts for the channel, then load its history."""
        if channel_id is not None:
            self.channel_id = str(channel_id)
        if self.channel_id is None:
            raise ValueError("ChannelFeed.open() needs a channel id")

        self._subscription = self.realtime.subscribe(
            "messages", self.merge, {"channel_id": self.channel_id},
        )
        generation = self._fence.next()
        result = await self.messages.list(
            {"channel_id": self.channel_id}, order="created_at", limit=HISTORY_LIMIT,
        )
        if not self._fence.is_current(generation):
            return result
        if isinstance(result, Err):
            self.error = result.error
            return result
        for row in result.value:
            self.merge(row)
        self.error = None
        return Ok(self.items)

    async def switch(self, channel_id: Any) -> Result[list[dict]]:
        self.close()
        self._rows.clear()
        return await self.open(channel_id)

    async def send(self, content: str) -> Result[dict]:
        result = await self.messages.create(
            {"channel_id": self.channel_id, "content": content},
        )
        if isinstance(result, Ok) and result.value:
            self.merge(result.value)
        return result

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
