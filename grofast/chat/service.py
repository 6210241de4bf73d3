"""Chat service layer — channels and message history."""

from __future__ import annotations

import logging
import uuid
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from grofast.chat.models import Channel, Message
from grofast.chat.schemas import ChannelCreate, ChannelUpdate, MessageCreate
from grofast.common.constants import DEFAULT_CHANNELS, MESSAGE_HISTORY_LIMIT
from grofast.common.exceptions import ForbiddenException, NotFoundException, ValidationException
from grofast.common.filters import ListParams, build_list_query
from grofast.employees.models import Employee

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# ChannelService
# ═════════════════════════════════════════════════════════════════════


class ChannelService:

    @staticmethod
    async def ensure_default_channels(db: AsyncSession) -> None:
        """Seed "General" and "Announcements" when no channel exists yet."""
        count = await db.execute(select(func.count()).select_from(Channel))
        if count.scalar():
            return
        for name, channel_type in DEFAULT_CHANNELS:
            db.add(Channel(name=name, type=channel_type))
        await db.flush()
        logger.info("Created default chat channels")

    @staticmethod
    async def list_channels(db: AsyncSession, params: ListParams) -> Sequence[Channel]:
        await ChannelService.ensure_default_channels(db)
        result = await db.execute(build_list_query(Channel, params, default_order="created_at"))
        return result.scalars().all()

    @staticmethod
    async def get_channel(db: AsyncSession, channel_id: uuid.UUID) -> Channel:
        channel = await db.get(Channel, channel_id)
        if channel is None:
            raise NotFoundException("Channel", str(channel_id))
        return channel

    @staticmethod
    async def create_channel(db: AsyncSession, data: ChannelCreate) -> Channel:
        channel = Channel(**data.model_dump())
        db.add(channel)
        await db.flush()
        return channel

    @staticmethod
    async def update_channel(
        db: AsyncSession,
        channel_id: uuid.UUID,
        data: ChannelUpdate,
    ) -> Channel:
        channel = await ChannelService.get_channel(db, channel_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(channel, field, value)
        await db.flush()
        return channel

    @staticmethod
    async def delete_channel(db: AsyncSession, channel_id: uuid.UUID) -> None:
        channel = await ChannelService.get_channel(db, channel_id)
        await db.delete(channel)
        await db.flush()


# ═════════════════════════════════════════════════════════════════════
# MessageService
# ═════════════════════════════════════════════════════════════════════


class MessageService:

    @staticmethod
    async def _load(db: AsyncSession, message_id: uuid.UUID) -> Message:
        result = await db.execute(
            select(Message)
            .where(Message.id == message_id)
            .options(selectinload(Message.sender))
            .execution_options(populate_existing=True)
        )
        message = result.scalars().first()
        if message is None:
            raise NotFoundException("Message", str(message_id))
        return message

    @staticmethod
    async def list_messages(db: AsyncSession, params: ListParams) -> Sequence[Message]:
        """Oldest first, at most ``MESSAGE_HISTORY_LIMIT`` unless a limit is given."""
        if params.limit is None:
            params.limit = MESSAGE_HISTORY_LIMIT
        query = build_list_query(
            Message, params, default_order="created_at",
        ).options(selectinload(Message.sender))
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def get_message(db: AsyncSession, message_id: uuid.UUID) -> Message:
        return await MessageService._load(db, message_id)

    @staticmethod
    async def post_message(
        db: AsyncSession,
        data: MessageCreate,
        *,
        sender: Employee,
    ) -> Message:
        if await db.get(Channel, data.channel_id) is None:
            raise ValidationException({"channel_id": ["Channel does not exist."]})
        message = Message(
            channel_id=data.channel_id,
            sender_id=sender.id,
            content=data.content.strip(),
        )
        db.add(message)
        await db.flush()
        return await MessageService._load(db, message.id)

    @staticmethod
    async def _own_message(db: AsyncSession, message_id: uuid.UUID, actor: Employee) -> Message:
        message = await MessageService._load(db, message_id)
        if message.sender_id != actor.id and not actor.is_admin:
            raise ForbiddenException(detail="You can only change your own messages.")
        return message

    @staticmethod
    async def edit_message(
        db: AsyncSession,
        message_id: uuid.UUID,
        content: str,
        *,
        actor: Employee,
    ) -> Message:
        message = await MessageService._own_message(db, message_id, actor)
        message.content = content.strip()
        await db.flush()
        return message

    @staticmethod
    async def delete_message(
        db: AsyncSession,
        message_id: uuid.UUID,
        *,
        actor: Employee,
    ) -> None:
        message = await MessageService._own_message(db, message_id, actor)
        await db.delete(message)
        await db.flush()
