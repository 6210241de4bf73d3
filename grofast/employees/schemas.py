"""Employee Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from grofast.common.constants import EmployeeRole


class EmployeeBrief(BaseModel):
    """Minimal employee info embedded in other responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    department: Optional[str] = None


class EmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    role: EmployeeRole
    department: Optional[str] = None
    designation: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True
    created_at: datetime


class EmployeeCreate(BaseModel):
    """Admin onboarding: creates the login and the profile together."""

    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: EmployeeRole = EmployeeRole.member
    department: Optional[str] = Field(None, max_length=100)
    designation: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)


class EmployeeUpdate(BaseModel):
    """Profile edit. ``role`` and ``is_active`` are honoured for admins only."""

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    department: Optional[str] = Field(None, max_length=100)
    designation: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    role: Optional[EmployeeRole] = None
    is_active: Optional[bool] = None


ADMIN_ONLY_FIELDS = frozenset({"role", "is_active"})
