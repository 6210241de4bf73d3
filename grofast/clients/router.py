"""Clients router — registry and client-of-the-month.

Reads are open to every employee; writes require **admin**.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grofast.auth.dependencies import get_current_user, require_admin
from grofast.clients.schemas import ClientCreate, ClientOut, ClientUpdate
from grofast.clients.service import ClientService
from grofast.common.filters import ListParams
from grofast.database import get_db
from grofast.employees.models import Employee

router = APIRouter(prefix="", tags=["clients"])


@router.get("", response_model=list[ClientOut])
async def list_clients(
    params: ListParams = Depends(),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ClientService.list_clients(db, params)


@router.get("/client-of-month", response_model=Optional[ClientOut])
async def get_client_of_month(
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ClientService.get_client_of_month(db)


@router.get("/{client_id}", response_model=ClientOut)
async def get_client(
    client_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ClientService.get_client(db, client_id)


@router.post("", response_model=ClientOut, status_code=201)
async def create_client(
    body: ClientCreate,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ClientService.create_client(db, body, actor_id=current_user.id)


@router.patch("/{client_id}", response_model=ClientOut)
async def update_client(
    client_id: uuid.UUID,
    body: ClientUpdate,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ClientService.update_client(db, client_id, body, actor_id=current_user.id)


@router.delete("/{client_id}", response_model=ClientOut)
async def deactivate_client(
    client_id: uuid.UUID,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Soft delete: the client is hidden from the registry, not removed."""
    return await ClientService.deactivate_client(db, client_id, actor_id=current_user.id)


# ── POST /{id}/client-of-month ──────────────────────────────────────

@router.post("/{client_id}/client-of-month", response_model=ClientOut)
async def set_client_of_month(
    client_id: uuid.UUID,
    current_user: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Clear the flag everywhere else and set it on this client, atomically."""
    return await ClientService.set_client_of_month(db, client_id, actor_id=current_user.id)
