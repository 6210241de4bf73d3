"""Client ORM model.

At most one row may carry ``is_client_of_month``; a partial unique index
enforces it in the database.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from grofast.common.timeutil import utcnow
from grofast.database import Base


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = (
        sa.Index(
            "uq_clients_client_of_month",
            "is_client_of_month",
            unique=True,
            postgresql_where=sa.text("is_client_of_month"),
            sqlite_where=sa.text("is_client_of_month = 1"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    company: Mapped[Optional[str]] = mapped_column(sa.String(200))
    email: Mapped[Optional[str]] = mapped_column(sa.String(255))
    phone: Mapped[Optional[str]] = mapped_column(sa.String(30))
    website: Mapped[Optional[str]] = mapped_column(sa.String(500))
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    is_client_of_month: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=False, server_default=sa.false()
    )
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=True, server_default=sa.true()
    )
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id", ondelete="SET NULL")
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, server_default=sa.func.now()
    )

    def __repr__(self) -> str:
        flag = " *" if self.is_client_of_month else ""
        return f"<Client {self.name!r}{flag}>"
