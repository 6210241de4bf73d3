"""Chat Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from grofast.common.constants import ChannelType
from grofast.employees.schemas import EmployeeBrief


class ChannelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: ChannelType = ChannelType.group


class ChannelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[ChannelType] = None


class ChannelOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    type: ChannelType
    created_at: datetime


class MessageCreate(BaseModel):
    channel_id: uuid.UUID
    content: str = Field(..., min_length=1, max_length=4000)


class MessageUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=4000)


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    channel_id: uuid.UUID
    sender_id: Optional[uuid.UUID] = None
    sender: Optional[EmployeeBrief] = None
    content: str
    created_at: datetime
