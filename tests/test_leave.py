"""Leave request tests — apply, edit, cancel, approve and reject.

Decisions and cancellations only ever touch pending rows.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import select

from grofast.common.audit import AuditTrail
from grofast.common.constants import LeaveStatus, LeaveType
from grofast.leave.models import LeaveRequest


# ═════════════════════════════════════════════════════════════════════
# Helpers
# ═════════════════════════════════════════════════════════════════════


async def _apply(client, headers, **fields) -> dict:
    payload = {
        "leave_type": "casual",
        "start_date": "2026-11-02",
        "end_date": "2026-11-04",
        "reason": "Family function",
        **fields,
    }
    resp = await client.post("/api/v1/leave-requests", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _seed_leave(db, employee, status: LeaveStatus) -> LeaveRequest:
    leave = LeaveRequest(
        employee_id=employee.id,
        leave_type=LeaveType.sick,
        start_date=date(2026, 10, 1),
        end_date=date(2026, 10, 1),
        status=status,
    )
    db.add(leave)
    await db.commit()
    return leave


# ═════════════════════════════════════════════════════════════════════
# Apply / list
# ═════════════════════════════════════════════════════════════════════


class TestApply:
    async def test_apply_creates_pending_request(self, client, member, member_headers):
        leave = await _apply(client, member_headers)
        assert leave["status"] == "pending"
        assert leave["employee_id"] == str(member.id)
        assert leave["days"] == 3
        assert leave["employee"]["name"] == "Manu Member"

    async def test_end_before_start_is_422(self, client, member_headers):
        resp = await client.post(
            "/api/v1/leave-requests",
            json={"leave_type": "sick", "start_date": "2026-11-05", "end_date": "2026-11-01"},
            headers=member_headers,
        )
        assert resp.status_code == 422

    async def test_unknown_leave_type_is_422(self, client, member_headers):
        resp = await client.post(
            "/api/v1/leave-requests",
            json={"leave_type": "vacation", "start_date": "2026-11-05", "end_date": "2026-11-05"},
            headers=member_headers,
        )
        assert resp.status_code == 422

    async def test_members_see_only_their_own(
        self, client, member_headers, other_headers, admin_headers,
    ):
        mine = await _apply(client, member_headers)
        await _apply(client, other_headers)

        resp = await client.get("/api/v1/leave-requests", headers=member_headers)
        assert [r["id"] for r in resp.json()] == [mine["id"]]

        everyone = await client.get("/api/v1/leave-requests", headers=admin_headers)
        assert len(everyone.json()) == 2

    async def test_admin_filters_pending(self, client, db, member, member_headers, admin_headers):
        await _seed_leave(db, member, LeaveStatus.approved)
        pending = await _apply(client, member_headers)
        resp = await client.get(
            "/api/v1/leave-requests", params={"status": "pending"}, headers=admin_headers,
        )
        assert [r["id"] for r in resp.json()] == [pending["id"]]


# ═════════════════════════════════════════════════════════════════════
# Decisions
# ═════════════════════════════════════════════════════════════════════


class TestDecisions:
    async def test_approve_records_approver(self, client, db, admin, member_headers, admin_headers):
        leave = await _apply(client, member_headers)
        resp = await client.post(
            f"/api/v1/leave-requests/{leave['id']}/approve", headers=admin_headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "approved"
        assert body["approved_by"] == str(admin.id)
        assert body["approved_at"] is not None

        audit = await db.execute(select(AuditTrail).where(AuditTrail.action == "approved"))
        assert audit.scalars().one().actor_id == admin.id

    async def test_reject_needs_a_reason(self, client, member_headers, admin_headers):
        leave = await _apply(client, member_headers)
        missing = await client.post(
            f"/api/v1/leave-requests/{leave['id']}/reject", json={}, headers=admin_headers,
        )
        assert missing.status_code == 422

        blank = await client.post(
            f"/api/v1/leave-requests/{leave['id']}/reject",
            json={"rejection_reason": ""},
            headers=admin_headers,
        )
        assert blank.status_code == 422

        resp = await client.post(
            f"/api/v1/leave-requests/{leave['id']}/reject",
            json={"rejection_reason": "Release week"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "rejected"
        assert resp.json()["rejection_reason"] == "Release week"

    async def test_second_decision_is_409(self, client, member_headers, admin_headers):
        leave = await _apply(client, member_headers)
        await client.post(f"/api/v1/leave-requests/{leave['id']}/approve", headers=admin_headers)
        resp = await client.post(
            f"/api/v1/leave-requests/{leave['id']}/reject",
            json={"rejection_reason": "Too late"},
            headers=admin_headers,
        )
        assert resp.status_code == 409

        current = await client.get(f"/api/v1/leave-requests/{leave['id']}", headers=admin_headers)
        assert current.json()["status"] == "approved"

    async def test_member_cannot_approve(self, client, member_headers, other_headers):
        leave = await _apply(client, other_headers)
        resp = await client.post(
            f"/api/v1/leave-requests/{leave['id']}/approve", headers=member_headers,
        )
        assert resp.status_code == 403


# ═════════════════════════════════════════════════════════════════════
# Owner edits / cancellation
# ═════════════════════════════════════════════════════════════════════


class TestOwnerChanges:
    async def test_cancel_pending_request(self, client, member_headers):
        leave = await _apply(client, member_headers)
        resp = await client.delete(f"/api/v1/leave-requests/{leave['id']}", headers=member_headers)
        assert resp.status_code == 200
        assert resp.json() == {"id": leave["id"], "cancelled": True}

        gone = await client.get(f"/api/v1/leave-requests/{leave['id']}", headers=member_headers)
        assert gone.status_code == 404

    async def test_cancel_decided_request_is_a_no_op(self, client, db, member, member_headers):
        leave = await _seed_leave(db, member, LeaveStatus.approved)
        resp = await client.delete(f"/api/v1/leave-requests/{leave.id}", headers=member_headers)
        assert resp.status_code == 200
        assert resp.json()["cancelled"] is False

        still = await client.get(f"/api/v1/leave-requests/{leave.id}", headers=member_headers)
        assert still.status_code == 200
        assert still.json()["status"] == "approved"

    async def test_cannot_cancel_someone_elses(self, client, member_headers, other_headers):
        leave = await _apply(client, other_headers)
        resp = await client.delete(f"/api/v1/leave-requests/{leave['id']}", headers=member_headers)
        assert resp.json()["cancelled"] is False

    async def test_edit_pending_request(self, client, member_headers):
        leave = await _apply(client, member_headers)
        resp = await client.patch(
            f"/api/v1/leave-requests/{leave['id']}",
            json={"end_date": "2026-11-06"},
            headers=member_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["days"] == 5

    async def test_edit_decided_request_is_409(self, client, db, member, member_headers):
        leave = await _seed_leave(db, member, LeaveStatus.rejected)
        resp = await client.patch(
            f"/api/v1/leave-requests/{leave.id}",
            json={"reason": "Please reconsider"},
            headers=member_headers,
        )
        assert resp.status_code == 409

    async def test_edit_cannot_invert_dates(self, client, member_headers):
        leave = await _apply(client, member_headers)
        resp = await client.patch(
            f"/api/v1/leave-requests/{leave['id']}",
            json={"end_date": "2026-10-01"},
            headers=member_headers,
        )
        assert resp.status_code == 422
