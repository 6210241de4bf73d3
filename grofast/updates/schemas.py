"""Work / learning update Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from grofast.common.constants import HOUR_SLOTS


def _check_slot(value: str) -> str:
    if value not in HOUR_SLOTS:
        raise ValueError(f"hour must be one of: {', '.join(HOUR_SLOTS)}")
    return value


HourSlot = Annotated[str, AfterValidator(_check_slot)]


# ── Work updates ────────────────────────────────────────────────────

class WorkUpdateCreate(BaseModel):
    hour: HourSlot
    description: str = Field(..., min_length=1)
    file_url: Optional[str] = Field(None, max_length=2048)


class WorkUpdateEdit(BaseModel):
    hour: Optional[HourSlot] = None
    description: Optional[str] = Field(None, min_length=1)
    file_url: Optional[str] = Field(None, max_length=2048)


class WorkUpdateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    hour: str
    description: str
    file_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ── Learning updates ────────────────────────────────────────────────

class LearningUpdateCreate(BaseModel):
    hour: HourSlot
    topic: str = Field(..., min_length=1, max_length=200)
    notes: Optional[str] = None


class LearningUpdateEdit(BaseModel):
    hour: Optional[HourSlot] = None
    topic: Optional[str] = Field(None, min_length=1, max_length=200)
    notes: Optional[str] = None


class LearningUpdateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    hour: str
    topic: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
