"""Client service layer — registry, soft delete, client of the month.

Setting the client of the month clears every other flag and sets the target
inside the caller's transaction. The partial unique index turns a concurrent
second writer into an IntegrityError, surfaced as 409.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.clients.models import Client
from grofast.clients.schemas import ClientCreate, ClientUpdate
from grofast.common.audit import create_audit_entry
from grofast.common.exceptions import ConflictError, NotFoundException, ValidationException
from grofast.common.filters import ListParams, build_list_query

logger = logging.getLogger(__name__)

CLIENT_OF_MONTH_CONFLICT = "Another client of the month was set concurrently. Reload and try again."


class ClientService:
    """Async client registry operations."""

    # ── Queries ─────────────────────────────────────────────────────

    @staticmethod
    async def list_clients(db: AsyncSession, params: ListParams) -> Sequence[Client]:
        """Active clients, client of the month first, newest next."""
        conditions = []
        if "is_active" not in params.filters:
            conditions.append(Client.is_active.is_(True))
        query = build_list_query(
            Client, params, *conditions, default_order="-is_client_of_month,-created_at",
        )
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def get_client(db: AsyncSession, client_id: uuid.UUID) -> Client:
        client = await db.get(Client, client_id)
        if client is None:
            raise NotFoundException("Client", str(client_id))
        return client

    @staticmethod
    async def get_client_of_month(db: AsyncSession) -> Optional[Client]:
        result = await db.execute(
            select(Client).where(Client.is_client_of_month.is_(True), Client.is_active.is_(True))
        )
        return result.scalars().first()

    # ── Writes ──────────────────────────────────────────────────────

    @staticmethod
    async def create_client(
        db: AsyncSession,
        data: ClientCreate,
        *,
        actor_id: uuid.UUID,
    ) -> Client:
        client = Client(
            **data.model_dump(exclude={"is_client_of_month"}),
            is_client_of_month=False,
            created_by=actor_id,
        )
        db.add(client)
        await db.flush()
        if data.is_client_of_month:
            client = await ClientService.set_client_of_month(db, client.id, actor_id=actor_id)
        return client

    @staticmethod
    async def update_client(
        db: AsyncSession,
        client_id: uuid.UUID,
        data: ClientUpdate,
        *,
        actor_id: uuid.UUID,
    ) -> Client:
        client = await ClientService.get_client(db, client_id)
        changes = data.model_dump(exclude_unset=True)
        flag = changes.pop("is_client_of_month", None)

        for field, value in changes.items():
            setattr(client, field, value)
        if changes.get("is_active") is False:
            client.is_client_of_month = False
        await db.flush()

        if flag is True:
            client = await ClientService.set_client_of_month(db, client_id, actor_id=actor_id)
        elif flag is False and client.is_client_of_month:
            client.is_client_of_month = False
            await db.flush()
        return client

    @staticmethod
    async def deactivate_client(
        db: AsyncSession,
        client_id: uuid.UUID,
        *,
        actor_id: uuid.UUID,
    ) -> Client:
        """Soft delete; a deactivated client also loses the monthly flag."""
        client = await ClientService.get_client(db, client_id)
        client.is_active = False
        client.is_client_of_month = False
        await db.flush()
        await create_audit_entry(
            db,
            action="deactivate",
            entity_type="client",
            entity_id=client.id,
            actor_id=actor_id,
            new_values={"is_active": False},
        )
        return client

    @staticmethod
    async def set_client_of_month(
        db: AsyncSession,
        client_id: uuid.UUID,
        *,
        actor_id: uuid.UUID,
    ) -> Client:
        """Make ``client_id`` the only flagged client."""
        client = await ClientService.get_client(db, client_id)
        if not client.is_active:
            raise ValidationException(
                {"is_client_of_month": ["An inactive client cannot be client of the month."]}
            )

        previous = await ClientService.get_client_of_month(db)
        try:
            await db.execute(
                update(Client)
                .where(Client.is_client_of_month.is_(True), Client.id != client_id)
                .values(is_client_of_month=False)
                .execution_options(synchronize_session=False)
            )
            await db.execute(
                update(Client)
                .where(Client.id == client_id)
                .values(is_client_of_month=True)
                .execution_options(synchronize_session=False)
            )
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("is_client_of_month", CLIENT_OF_MONTH_CONFLICT)

        await create_audit_entry(
            db,
            action="client_of_month",
            entity_type="client",
            entity_id=client_id,
            actor_id=actor_id,
            old_values={"client_id": str(previous.id)} if previous else None,
            new_values={"client_id": str(client_id)},
        )
        logger.info("Client of the month set to %s by %s", client_id, actor_id)

        result = await db.execute(
            select(Client)
            .where(Client.id == client_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().one()
