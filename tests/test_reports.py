"""Report tests — range bounds, productivity math, per-employee filtering."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from grofast.attendance.models import Attendance
from grofast.common.constants import HOUR_SLOTS, ReportRange
from grofast.reports.service import ReportService, productivity, range_bounds
from grofast.updates.models import LearningUpdate, WorkUpdate


async def _seed_activity(db, member) -> None:
    """Three work updates and one learning update today; two attendance days this week."""
    now = datetime.now(timezone.utc)
    yesterday = now - timedelta(days=1)
    for slot in HOUR_SLOTS[:3]:
        db.add(WorkUpdate(employee_id=member.id, hour=slot, description="work"))
    db.add(LearningUpdate(employee_id=member.id, hour=HOUR_SLOTS[0], topic="Pydantic"))
    db.add(Attendance(
        employee_id=member.id,
        date=now.date(),
        check_in=now - timedelta(hours=8),
        check_out=now,
        created_at=now - timedelta(minutes=1),
    ))
    db.add(Attendance(
        employee_id=member.id,
        date=yesterday.date(),
        check_in=yesterday - timedelta(hours=8, minutes=30),
        check_out=yesterday,
        created_at=yesterday,
    ))
    await db.commit()


class TestMath:
    @pytest.mark.parametrize(
        "work, learning, days, expected",
        [
            (3, 1, 2, 2.0),
            (5, 0, 0, 5.0),
            (1, 1, 3, 0.67),
            (0, 0, 0, 0.0),
        ],
    )
    def test_productivity(self, work, learning, days, expected):
        assert productivity(work, learning, days) == expected

    def test_today_bounds(self):
        now = datetime(2026, 10, 18, 15, 30, tzinfo=timezone.utc)
        start, end = range_bounds(ReportRange.today, now)
        assert start == datetime(2026, 10, 18, tzinfo=timezone.utc)
        assert end.date() == now.date()
        assert end > now

    def test_week_bounds(self):
        now = datetime(2026, 10, 18, 15, 30, tzinfo=timezone.utc)
        start, end = range_bounds(ReportRange.week, now)
        assert (start, end) == (now - timedelta(days=7), now)

    def test_month_bounds(self):
        now = datetime(2026, 10, 18, 15, 30, tzinfo=timezone.utc)
        start, end = range_bounds(ReportRange.month, now)
        assert start == datetime(2026, 10, 1, tzinfo=timezone.utc)
        assert end == now


class TestReportEndpoint:
    async def test_week_report(self, client, db, admin, member, admin_headers):
        await _seed_activity(db, member)
        resp = await client.get("/api/v1/reports", params={"range": "week"}, headers=admin_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["range"] == "week"

        by_name = {row["name"]: row for row in body["employees"]}
        assert list(by_name) == ["Asha Admin", "Manu Member"]
        row = by_name["Manu Member"]
        assert row["work_updates"] == 3
        assert row["learning_updates"] == 1
        assert row["attendance_days"] == 2
        assert row["total_hours"] == 16.5
        assert row["productivity"] == 2.0
        assert by_name["Asha Admin"]["productivity"] == 0.0

        assert body["totals"] == {
            "total_employees": 2,
            "total_work_updates": 3,
            "total_learning_updates": 1,
            "total_attendance": 2,
            "avg_productivity": 1.0,
        }

    async def test_today_excludes_yesterday(self, client, db, member, admin_headers):
        await _seed_activity(db, member)
        resp = await client.get("/api/v1/reports", headers=admin_headers)
        assert resp.json()["range"] == "today"
        row = next(r for r in resp.json()["employees"] if r["name"] == "Manu Member")
        assert row["attendance_days"] == 1
        assert row["productivity"] == 4.0

    async def test_single_employee(self, client, db, admin, member, admin_headers):
        await _seed_activity(db, member)
        resp = await client.get(
            "/api/v1/reports",
            params={"range": "month", "employee_id": str(member.id)},
            headers=admin_headers,
        )
        body = resp.json()
        assert [r["employee_id"] for r in body["employees"]] == [str(member.id)]
        assert body["totals"]["total_employees"] == 1

    async def test_unknown_employee_is_404(self, client, admin_headers):
        resp = await client.get(
            "/api/v1/reports", params={"employee_id": str(uuid.uuid4())}, headers=admin_headers,
        )
        assert resp.status_code == 404

    async def test_bad_range_is_422(self, client, admin_headers):
        resp = await client.get("/api/v1/reports", params={"range": "year"}, headers=admin_headers)
        assert resp.status_code == 422

    async def test_members_cannot_read_reports(self, client, member_headers):
        resp = await client.get("/api/v1/reports", headers=member_headers)
        assert resp.status_code == 403

    async def test_failed_read_is_503(self, client, admin_headers, monkeypatch):
        async def broken(db, *args):
            raise RuntimeError("attendance unavailable")

        monkeypatch.setattr(ReportService, "_attendance", staticmethod(broken))
        resp = await client.get("/api/v1/reports", headers=admin_headers)
        assert resp.status_code == 503
        assert "attendance" in resp.json()["detail"]
