"""Generic list/get/create/update/delete against one API resource.

Filter keys follow the service's list language: a bare column is ``==``,
suffixes ``__ne``, ``__from`` (``>=``), ``__to`` (``<=``), ``__in`` and
``__ilike`` select the other operators. ``None`` matches NULL.
"""

from __future__ import annotations

import enum
import itertools
import logging
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Mapping, Optional

from grofast.client.result import Err, Ok, Result

if TYPE_CHECKING:
    from grofast.client.backend import BackendClient

logger = logging.getLogger(__name__)


def _param(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return str(value.value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(_param(v) for v in value)
    return str(value)


def build_params(
    filters: Optional[Mapping[str, Any]] = None,
    *,
    order: Optional[str] = None,
    limit: Optional[int] = None,
) -> dict[str, str]:
    params = {key: _param(value) for key, value in (filters or {}).items()}
    if order:
        params["order"] = order
    if limit is not None:
        params["limit"] = str(limit)
    return params


class EntityFetcher:
    """One resource, one request per call, no retry."""

    def __init__(self, backend: BackendClient, resource: str) -> None:
        self.backend = backend
        self.resource = resource.strip("/")

    def _path(self, *parts: Any) -> str:
        return "/".join([f"/{self.resource}", *(str(p) for p in parts)])

    async def list(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Result[list[dict]]:
        result = await self.backend.request(
            "GET", self._path(), params=build_params(filters, order=order, limit=limit),
        )
        if isinstance(result, Ok) and result.value is None:
            return Ok([])
        return result

    async def get(self, row_id: uuid.UUID | str) -> Result[Optional[dict]]:
        return await self.backend.request("GET", self._path(row_id))

    async def create(self, fields: Mapping[str, Any]) -> Result[Optional[dict]]:
        return await self.backend.request("POST", self._path(), json=dict(fields))

    async def update(self, row_id: uuid.UUID | str, fields: Mapping[str, Any]) -> Result[Optional[dict]]:
        return await self.backend.request("PATCH", self._path(row_id), json=dict(fields))

    async def delete(self, row_id: uuid.UUID | str) -> Result[Optional[dict]]:
        return await self.backend.request("DELETE", self._path(row_id))

    async def action(
        self,
        name: str,
        row_id: uuid.UUID | str | None = None,
        fields: Optional[Mapping[str, Any]] = None,
    ) -> Result[Any]:
        """POST to a domain action, e.g. ``action("approve", leave_id)``."""
        path = self._path(row_id, name) if row_id is not None else self._path(name)
        return await self.backend.request(
            "POST", path, json=dict(fields) if fields is not None else None,
        )


# ── Request fencing ─────────────────────────────────────────────────

class RequestFence:
    """Monotonic generation numbers for one state slot.

    A response is applied only if its generation is still the latest
    dispatched; anything older lost the race and is dropped.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self.latest = 0

    def next(self) -> int:
        self.latest = next(self._counter)
        return self.latest

    def is_current(self, generation: int) -> bool:
        return generation == self.latest


class EntityStore:
    """The rows of one list slot, refreshed through a fence."""

    def __init__(
        self,
        fetcher: EntityFetcher,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> None:
        self.fetcher = fetcher
        self.filters = dict(filters or {})
        self.order = order
        self.limit = limit
        self.rows: list[dict] = []
        self.error = None
        self.is_loading = False
        self.fence = RequestFence()

    async def refresh(self, filters: Optional[Mapping[str, Any]] = None) -> bool:
        """Reload the slot. Returns ``False`` when a newer refresh superseded this one."""
        if filters is not None:
            self.filters = dict(filters)
        generation = self.fence.next()
        self.is_loading = True
        result = await self.fetcher.list(self.filters, order=self.order, limit=self.limit)
        if not self.fence.is_current(generation):
            logger.debug(
                "Dropping stale %s list (generation %d, latest %d)",
                self.fetcher.resource, generation, self.fence.latest,
            )
            return False
        self.is_loading = False
        if isinstance(result, Err):
            self.error = result.error
            return True
        self.rows = result.value
        self.error = None
        return True
