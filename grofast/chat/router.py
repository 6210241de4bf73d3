"""Chat routers — channels and messages.

New messages are published to the realtime hub once their transaction has
committed, so subscribers never see a row that could still roll back.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.auth.dependencies import get_current_user, require_admin
from grofast.chat.schemas import (
    ChannelCreate,
    ChannelOut,
    ChannelUpdate,
    MessageCreate,
    MessageOut,
    MessageUpdate,
)
from grofast.chat.service import ChannelService, MessageService
from grofast.common.filters import ListParams
from grofast.database import get_db
from grofast.employees.models import Employee
from grofast.realtime.hub import EVENT_INSERT, RealtimeHub, get_realtime

channels_router = APIRouter(prefix="", tags=["chat"])
messages_router = APIRouter(prefix="", tags=["chat"])


# ═════════════════════════════════════════════════════════════════════
# /channels
# ═════════════════════════════════════════════════════════════════════


@channels_router.get("", response_model=list[ChannelOut])
async def list_channels(
    params: ListParams = Depends(),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """All channels; the default ones are created on first use."""
    return await ChannelService.list_channels(db, params)


@channels_router.get("/{channel_id}", response_model=ChannelOut)
async def get_channel(
    channel_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ChannelService.get_channel(db, channel_id)


@channels_router.post("", response_model=ChannelOut, status_code=201)
async def create_channel(
    body: ChannelCreate,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ChannelService.create_channel(db, body)


@channels_router.patch("/{channel_id}", response_model=ChannelOut)
async def update_channel(
    channel_id: uuid.UUID,
    body: ChannelUpdate,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ChannelService.update_channel(db, channel_id, body)


@channels_router.delete("/{channel_id}", status_code=204)
async def delete_channel(
    channel_id: uuid.UUID,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await ChannelService.delete_channel(db, channel_id)


# ═════════════════════════════════════════════════════════════════════
# /messages
# ═════════════════════════════════════════════════════════════════════


@messages_router.get("", response_model=list[MessageOut])
async def list_messages(
    params: ListParams = Depends(),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """History, usually ``?channel_id=...``; oldest first, 100 rows by default."""
    return await MessageService.list_messages(db, params)


@messages_router.get("/{message_id}", response_model=MessageOut)
async def get_message(
    message_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await MessageService.get_message(db, message_id)


@messages_router.post("", response_model=MessageOut, status_code=201)
async def post_message(
    body: MessageCreate,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_realtime),
):
    message = await MessageService.post_message(db, body, sender=current_user)
    out = MessageOut.model_validate(message)
    await db.commit()
    await hub.publish("messages", EVENT_INSERT, out.model_dump(mode="json"))
    return out


@messages_router.patch("/{message_id}", response_model=MessageOut)
async def edit_message(
    message_id: uuid.UUID,
    body: MessageUpdate,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await MessageService.edit_message(db, message_id, body.content, actor=current_user)


@messages_router.delete("/{message_id}", status_code=204)
async def delete_message(
    message_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await MessageService.delete_message(db, message_id, actor=current_user)
