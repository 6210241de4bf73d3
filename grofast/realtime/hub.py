"""In-process publish/subscribe for row-change events.

Services publish after the inserting transaction has committed; the
websocket endpoint subscribes on behalf of each connected client. The hub
does not buffer, replay or de-duplicate.
"""

from __future__ import annotations

import inspect
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Union

from fastapi import Request

logger = logging.getLogger(__name__)

EVENT_INSERT = "INSERT"


@dataclass(frozen=True)
class RealtimeEvent:
    table: str
    event: str
    row: dict[str, Any]

    def as_message(self) -> dict[str, Any]:
        return {"table": self.table, "event": self.event, "row": self.row}


Callback = Callable[[RealtimeEvent], Union[Awaitable[None], None]]


@dataclass
class _Subscription:
    table: str
    callback: Callback
    filters: dict[str, str] = field(default_factory=dict)

    def matches(self, event: RealtimeEvent) -> bool:
        if event.table != self.table:
            return False
        return all(
            str(event.row.get(key)) == value for key, value in self.filters.items()
        )


class RealtimeHub:
    """Routes published events to the subscriptions whose table and filters match."""

    def __init__(self) -> None:
        self._subscriptions: dict[int, _Subscription] = {}
        self._ids = itertools.count(1)

    def subscribe(
        self,
        table: str,
        callback: Callback,
        filters: Optional[dict[str, Any]] = None,
    ) -> Callable[[], None]:
        """Register ``callback`` and return a handle that removes it again."""
        sub_id = next(self._ids)
        self._subscriptions[sub_id] = _Subscription(
            table=table,
            callback=callback,
            filters={k: str(v) for k, v in (filters or {}).items() if v is not None},
        )
        logger.debug("Realtime subscription %d on %s %s", sub_id, table, filters or {})

        def unsubscribe() -> None:
            if self._subscriptions.pop(sub_id, None) is not None:
                logger.debug("Realtime subscription %d removed", sub_id)

        return unsubscribe

    async def publish(self, table: str, event: str, row: dict[str, Any]) -> int:
        """Deliver one event; returns how many subscribers received it.

        A failing subscriber is logged and skipped so it cannot starve the others.
        """
        message = RealtimeEvent(table=table, event=event, row=row)
        delivered = 0
        for sub_id, sub in list(self._subscriptions.items()):
            if not sub.matches(message):
                continue
            try:
                result = sub.callback(message)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception:
                logger.exception("Realtime subscriber %d failed on %s", sub_id, table)
        return delivered

    def subscriber_count(self, table: Optional[str] = None) -> int:
        if table is None:
            return len(self._subscriptions)
        return sum(1 for s in self._subscriptions.values() if s.table == table)


def get_realtime(request: Request) -> RealtimeHub:
    """FastAPI dependency: the hub created with the app."""
    return request.app.state.realtime
