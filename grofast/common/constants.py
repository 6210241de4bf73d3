"""Enums and constants for GROFAST — matching the database ENUM types."""

from __future__ import annotations

import enum


# ── Employees / Roles ───────────────────────────────────────────────

class EmployeeRole(str, enum.Enum):
    admin = "admin"
    member = "member"


# ── Tasks ───────────────────────────────────────────────────────────

class TaskPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


class TaskStatus(str, enum.Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveType(str, enum.Enum):
    casual = "casual"
    sick = "sick"
    annual = "annual"
    emergency = "emergency"
    other = "other"


class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# ── Attendance ──────────────────────────────────────────────────────

class CheckInState(str, enum.Enum):
    not_checked_in = "not_checked_in"
    checked_in = "checked_in"
    checked_out = "checked_out"


# ── Chat ────────────────────────────────────────────────────────────

class ChannelType(str, enum.Enum):
    department = "department"
    direct = "direct"
    group = "group"


DEFAULT_CHANNELS: list[tuple[str, ChannelType]] = [
    ("General", ChannelType.department),
    ("Announcements", ChannelType.department),
]


# ── Reports ─────────────────────────────────────────────────────────

class ReportRange(str, enum.Enum):
    today = "today"
    week = "week"
    month = "month"


# ── Misc constants ──────────────────────────────────────────────────

MESSAGE_HISTORY_LIMIT = 100
MAX_LIST_LIMIT = 500


# ── Work / learning updates ─────────────────────────────────────────

HOUR_SLOTS: tuple[str, ...] = tuple(
    f"{h:02d}:00 - {h + 1:02d}:00" for h in range(9, 21)
)
