"""Employee ORM model.

The row id equals the ``auth_users`` id of the same person; a signed-in user
without a row here is authenticated but has no profile.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from grofast.common.constants import EmployeeRole
from grofast.common.timeutil import utcnow
from grofast.database import Base


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("auth_users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    role: Mapped[EmployeeRole] = mapped_column(
        sa.Enum(EmployeeRole, name="employee_role"),
        nullable=False,
        default=EmployeeRole.member,
        server_default=EmployeeRole.member.value,
    )
    department: Mapped[Optional[str]] = mapped_column(sa.String(100))
    designation: Mapped[Optional[str]] = mapped_column(sa.String(100))
    phone: Mapped[Optional[str]] = mapped_column(sa.String(20))
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, default=True, server_default=sa.true()
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, server_default=sa.func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=sa.func.now(),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == EmployeeRole.admin

    def __repr__(self) -> str:
        return f"<Employee {self.name!r} ({self.role.value})>"
