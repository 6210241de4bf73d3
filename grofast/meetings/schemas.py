"""Meeting Pydantic v2 schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from grofast.employees.schemas import EmployeeBrief


class MeetingCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    datetime: dt.datetime
    meet_link: Optional[str] = Field(None, max_length=500)
    attendees: list[uuid.UUID] = []


class MeetingUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    datetime: Optional[dt.datetime] = None
    meet_link: Optional[str] = Field(None, max_length=500)
    attendees: Optional[list[uuid.UUID]] = None


class MeetingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: Optional[str] = None
    datetime: dt.datetime
    meet_link: Optional[str] = None
    created_by: Optional[uuid.UUID] = None
    creator: Optional[EmployeeBrief] = None
    attendees: list[uuid.UUID] = []
    created_at: dt.datetime
