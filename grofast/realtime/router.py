"""Realtime websocket — forwards row-insert events to subscribed clients.

``/realtime/ws?table=messages&token=<access token>&channel_id=<uuid>``

Every query parameter other than ``table``, ``token`` and ``apikey`` is an
equality filter on the published row.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from sqlalchemy.ext.asyncio import async_sessionmaker

from grofast.auth.dependencies import find_active_session
from grofast.auth.service import decode_access_token
from grofast.common.exceptions import UnauthorizedException
from grofast.config import settings
from grofast.database import get_session_factory
from grofast.realtime.hub import RealtimeEvent, RealtimeHub

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["realtime"])

REALTIME_TABLES = frozenset({"messages", "announcements"})
CLOSE_UNAUTHORIZED = 4001
CLOSE_UNKNOWN_TABLE = 4004

_CONNECTION_PARAMS = frozenset({"table", "token", "apikey"})


async def session_is_active(
    token: str = Query(""),
    factory: async_sessionmaker = Depends(get_session_factory),
) -> bool:
    """Whether the socket's token still has a live session (not signed out)."""
    async with factory() as db:
        return await find_active_session(db, token) is not None


@router.websocket("/ws")
async def realtime_websocket(
    websocket: WebSocket,
    table: str = Query(...),
    token: str = Query(""),
    apikey: Optional[str] = Query(None),
    active: bool = Depends(session_is_active),
):
    """Stream ``{"table", "event", "row"}`` frames until the client leaves."""
    try:
        decode_access_token(token)
    except UnauthorizedException as exc:
        logger.info("realtime.ws rejected: %s", exc.detail)
        await websocket.close(code=CLOSE_UNAUTHORIZED, reason="Unauthorized")
        return
    if not active:
        logger.info("realtime.ws rejected: session revoked or expired")
        await websocket.close(code=CLOSE_UNAUTHORIZED, reason="Session invalid or expired")
        return
    if settings.ANON_KEY and apikey != settings.ANON_KEY:
        await websocket.close(code=CLOSE_UNAUTHORIZED, reason="Invalid API key")
        return
    if table not in REALTIME_TABLES:
        await websocket.close(code=CLOSE_UNKNOWN_TABLE, reason=f"Unknown table '{table}'")
        return

    await websocket.accept()
    hub: RealtimeHub = websocket.app.state.realtime
    filters = {
        key: value
        for key, value in websocket.query_params.items()
        if key not in _CONNECTION_PARAMS
    }
    queue: asyncio.Queue[RealtimeEvent] = asyncio.Queue()
    unsubscribe = hub.subscribe(table, queue.put_nowait, filters)
    logger.info("realtime.ws subscribed to %s %s", table, filters)

    async def hub_to_client() -> None:
        while True:
            event = await queue.get()
            await websocket.send_json(event.as_message())

    async def client_to_hub() -> None:
        # Nothing is accepted from the client; reading detects the disconnect.
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.info("realtime.ws client disconnected")

    try:
        await websocket.send_json({"type": "subscribed", "table": table, "filters": filters})
        tasks = [
            asyncio.create_task(hub_to_client()),
            asyncio.create_task(client_to_hub()),
        ]
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            if task.exception():
                raise task.exception()  # type: ignore[misc]
    except WebSocketDisconnect:
        logger.info("realtime.ws disconnected")
    finally:
        unsubscribe()
        logger.info("realtime.ws closed")
