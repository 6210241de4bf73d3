"""Leave service layer — apply, edit, cancel, approve, reject.

Every state change is conditional on ``status = pending`` in the same
statement, so a request decided by someone else in the meantime is never
overwritten or deleted.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from grofast.common.audit import create_audit_entry
from grofast.common.constants import LeaveStatus
from grofast.common.exceptions import ConflictError, NotFoundException, ValidationException
from grofast.common.filters import ListParams, build_list_query
from grofast.common.timeutil import utcnow
from grofast.employees.models import Employee
from grofast.leave.models import LeaveRequest
from grofast.leave.schemas import LeaveRequestCreate, LeaveRequestUpdate

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave operations."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _visibility(actor: Employee) -> list:
        if actor.is_admin:
            return []
        return [LeaveRequest.employee_id == actor.id]

    @staticmethod
    async def _load(
        db: AsyncSession,
        request_id: uuid.UUID,
        actor: Optional[Employee] = None,
    ) -> LeaveRequest:
        conditions = [LeaveRequest.id == request_id]
        if actor is not None:
            conditions.extend(LeaveService._visibility(actor))
        result = await db.execute(
            select(LeaveRequest)
            .where(*conditions)
            .options(selectinload(LeaveRequest.employee))
            .execution_options(populate_existing=True)
        )
        leave = result.scalars().first()
        if leave is None:
            raise NotFoundException("LeaveRequest", str(request_id))
        return leave

    @staticmethod
    async def _decide(
        db: AsyncSession,
        request_id: uuid.UUID,
        *,
        approver_id: uuid.UUID,
        status: LeaveStatus,
        rejection_reason: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> LeaveRequest:
        decided_at = utcnow()
        result = await db.execute(
            update(LeaveRequest)
            .where(
                LeaveRequest.id == request_id,
                LeaveRequest.status == LeaveStatus.pending,
            )
            .values(
                status=status,
                approved_by=approver_id,
                approved_at=decided_at,
                rejection_reason=rejection_reason,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            current = await LeaveService._load(db, request_id)
            raise ConflictError(
                "status",
                f"Leave request is already {current.status.value}.",
            )

        await create_audit_entry(
            db,
            action=status.value,
            entity_type="leave_request",
            entity_id=request_id,
            actor_id=approver_id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={"status": status.value, "rejection_reason": rejection_reason},
            ip_address=ip_address,
        )
        logger.info("Leave request %s %s by %s", request_id, status.value, approver_id)
        return await LeaveService._load(db, request_id)

    # ─────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_requests(
        db: AsyncSession,
        params: ListParams,
        *,
        actor: Employee,
    ) -> Sequence[LeaveRequest]:
        """Members get their own requests; admins get everyone's."""
        query = build_list_query(
            LeaveRequest, params, *LeaveService._visibility(actor), default_order="-created_at",
        ).options(selectinload(LeaveRequest.employee))
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def get_request(
        db: AsyncSession,
        request_id: uuid.UUID,
        *,
        actor: Employee,
    ) -> LeaveRequest:
        return await LeaveService._load(db, request_id, actor)

    # ─────────────────────────────────────────────────────────────────
    # Owner operations
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def apply(
        db: AsyncSession,
        data: LeaveRequestCreate,
        *,
        actor: Employee,
    ) -> LeaveRequest:
        leave = LeaveRequest(
            employee_id=actor.id,
            status=LeaveStatus.pending,
            **data.model_dump(),
        )
        db.add(leave)
        await db.flush()
        return await LeaveService._load(db, leave.id)

    @staticmethod
    async def update_pending(
        db: AsyncSession,
        request_id: uuid.UUID,
        data: LeaveRequestUpdate,
        *,
        actor: Employee,
    ) -> LeaveRequest:
        """Edit the caller's own request while it is still pending."""
        leave = await LeaveService._load(db, request_id)
        if leave.employee_id != actor.id:
            raise NotFoundException("LeaveRequest", str(request_id))

        changes = data.model_dump(exclude_unset=True)
        start = changes.get("start_date", leave.start_date)
        end = changes.get("end_date", leave.end_date)
        if end < start:
            raise ValidationException({"end_date": ["end_date must be on or after start_date"]})
        if not changes:
            return leave

        result = await db.execute(
            update(LeaveRequest)
            .where(
                LeaveRequest.id == request_id,
                LeaveRequest.employee_id == actor.id,
                LeaveRequest.status == LeaveStatus.pending,
            )
            .values(**changes)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConflictError("status", f"Leave request is already {leave.status.value}.")
        return await LeaveService._load(db, request_id)

    @staticmethod
    async def cancel(
        db: AsyncSession,
        request_id: uuid.UUID,
        *,
        actor: Employee,
        ip_address: Optional[str] = None,
    ) -> bool:
        """Delete the caller's request only while it is pending.

        Returns whether a row was removed; decided requests stay unchanged.
        """
        result = await db.execute(
            delete(LeaveRequest)
            .where(
                LeaveRequest.id == request_id,
                LeaveRequest.employee_id == actor.id,
                LeaveRequest.status == LeaveStatus.pending,
            )
            .execution_options(synchronize_session=False)
        )
        cancelled = result.rowcount > 0
        if cancelled:
            await create_audit_entry(
                db,
                action="cancel",
                entity_type="leave_request",
                entity_id=request_id,
                actor_id=actor.id,
                old_values={"status": LeaveStatus.pending.value},
                ip_address=ip_address,
            )
        else:
            logger.info("Leave request %s not cancelled: not pending or not owned", request_id)
        return cancelled

    # ─────────────────────────────────────────────────────────────────
    # Admin decisions
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def approve(
        db: AsyncSession,
        request_id: uuid.UUID,
        *,
        approver_id: uuid.UUID,
        ip_address: Optional[str] = None,
    ) -> LeaveRequest:
        return await LeaveService._decide(
            db,
            request_id,
            approver_id=approver_id,
            status=LeaveStatus.approved,
            ip_address=ip_address,
        )

    @staticmethod
    async def reject(
        db: AsyncSession,
        request_id: uuid.UUID,
        *,
        approver_id: uuid.UUID,
        rejection_reason: str,
        ip_address: Optional[str] = None,
    ) -> LeaveRequest:
        return await LeaveService._decide(
            db,
            request_id,
            approver_id=approver_id,
            status=LeaveStatus.rejected,
            rejection_reason=rejection_reason,
            ip_address=ip_address,
        )
