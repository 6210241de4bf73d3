"""Hourly log ORM models: WorkUpdate, LearningUpdate."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from grofast.common.timeutil import utcnow
from grofast.database import Base


class HourlyLogMixin:
    """Columns shared by both logs: owner, hour slot label, timestamps."""

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    hour: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, server_default=sa.func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=sa.func.now(),
    )


class WorkUpdate(HourlyLogMixin, Base):
    __tablename__ = "work_updates"

    description: Mapped[str] = mapped_column(sa.Text, nullable=False)
    # Reference to a file stored elsewhere
    file_url: Mapped[Optional[str]] = mapped_column(sa.Text)


class LearningUpdate(HourlyLogMixin, Base):
    __tablename__ = "learning_updates"

    topic: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)
