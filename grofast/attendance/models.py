"""Attendance ORM model: one row per employee per day."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from grofast.common.timeutil import minutes_between, utcnow
from grofast.database import Base
from grofast.employees.models import Employee


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    check_in: Mapped[dt.datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    check_out: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
    image_url: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, server_default=sa.func.now()
    )

    # Relationships
    employee: Mapped[Employee] = relationship()

    @property
    def duration_minutes(self) -> Optional[int]:
        """Worked minutes; never negative, ``None`` while still checked in."""
        return minutes_between(self.check_in, self.check_out)

    def __repr__(self) -> str:
        return f"<Attendance {self.employee_id} {self.date}>"
