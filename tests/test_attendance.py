"""Attendance tests — check-in/check-out flow, today's state, admin corrections."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from grofast.attendance.models import Attendance
from grofast.common.timeutil import minutes_between, today


class TestCheckIn:
    async def test_check_in_opens_todays_record(self, client, member, member_headers):
        resp = await client.post(
            "/api/v1/attendance/check-in",
            json={"image_url": "https://cdn.grofast.app/selfies/1.jpg"},
            headers=member_headers,
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["employee_id"] == str(member.id)
        assert body["date"] == today().isoformat()
        assert body["check_out"] is None
        assert body["duration_minutes"] is None

    async def test_second_check_in_is_409(self, client, member_headers):
        first = await client.post("/api/v1/attendance/check-in", json={}, headers=member_headers)
        assert first.status_code == 201
        again = await client.post("/api/v1/attendance/check-in", json={}, headers=member_headers)
        assert again.status_code == 409

    async def test_plain_post_is_a_check_in(self, client, member_headers):
        resp = await client.post("/api/v1/attendance", json={}, headers=member_headers)
        assert resp.status_code == 201
        dup = await client.post("/api/v1/attendance/check-in", json={}, headers=member_headers)
        assert dup.status_code == 409


class TestCheckOut:
    async def test_check_out_without_check_in_is_422(self, client, member_headers):
        resp = await client.post("/api/v1/attendance/check-out", headers=member_headers)
        assert resp.status_code == 422
        assert "check_out" in resp.json()["errors"]

    async def test_check_out_closes_the_record(self, client, member_headers):
        await client.post("/api/v1/attendance/check-in", json={}, headers=member_headers)
        resp = await client.post("/api/v1/attendance/check-out", headers=member_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["check_out"] is not None
        assert body["duration_minutes"] >= 0

    async def test_double_check_out_is_422(self, client, member_headers):
        await client.post("/api/v1/attendance/check-in", json={}, headers=member_headers)
        await client.post("/api/v1/attendance/check-out", headers=member_headers)
        again = await client.post("/api/v1/attendance/check-out", headers=member_headers)
        assert again.status_code == 422


class TestToday:
    async def test_state_follows_the_day(self, client, member_headers):
        async def state():
            resp = await client.get("/api/v1/attendance/today", headers=member_headers)
            return resp.json()["state"]

        assert await state() == "not_checked_in"
        await client.post("/api/v1/attendance/check-in", json={}, headers=member_headers)
        assert await state() == "checked_in"
        await client.post("/api/v1/attendance/check-out", headers=member_headers)
        assert await state() == "checked_out"

    async def test_yesterdays_record_does_not_count(self, client, db, member, member_headers):
        yesterday = datetime.now(timezone.utc) - timedelta(days=1)
        db.add(Attendance(employee_id=member.id, date=yesterday.date(), check_in=yesterday))
        await db.commit()

        resp = await client.get("/api/v1/attendance/today", headers=member_headers)
        assert resp.json()["state"] == "not_checked_in"
        checked = await client.post("/api/v1/attendance/check-in", json={}, headers=member_headers)
        assert checked.status_code == 201


class TestHistory:
    async def test_members_see_their_own_history(
        self, client, member_headers, other_headers, admin_headers,
    ):
        await client.post("/api/v1/attendance/check-in", json={}, headers=member_headers)
        await client.post("/api/v1/attendance/check-in", json={}, headers=other_headers)

        mine = await client.get("/api/v1/attendance", headers=member_headers)
        assert len(mine.json()) == 1
        everyone = await client.get("/api/v1/attendance", headers=admin_headers)
        assert len(everyone.json()) == 2

    async def test_admin_correction_rejects_inverted_times(self, client, member_headers, admin_headers):
        record = (
            await client.post("/api/v1/attendance/check-in", json={}, headers=member_headers)
        ).json()
        resp = await client.patch(
            f"/api/v1/attendance/{record['id']}",
            json={"check_out": "2000-01-01T00:00:00Z"},
            headers=admin_headers,
        )
        assert resp.status_code == 422

    async def test_admin_correction_cannot_clear_check_in(self, client, member_headers, admin_headers):
        await client.post("/api/v1/attendance/check-in", json={}, headers=member_headers)
        record = (
            await client.post("/api/v1/attendance/check-out", json={}, headers=member_headers)
        ).json()
        resp = await client.patch(
            f"/api/v1/attendance/{record['id']}",
            json={"check_in": None},
            headers=admin_headers,
        )
        assert resp.status_code == 422
        assert "check_in" in resp.json()["errors"]

        today = (await client.get("/api/v1/attendance/today", headers=member_headers)).json()
        assert today["record"]["check_in"] is not None

    async def test_member_cannot_correct(self, client, member_headers):
        record = (
            await client.post("/api/v1/attendance/check-in", json={}, headers=member_headers)
        ).json()
        resp = await client.patch(
            f"/api/v1/attendance/{record['id']}",
            json={"check_out": "2030-01-01T00:00:00Z"},
            headers=member_headers,
        )
        assert resp.status_code == 403


class TestMinutesBetween:
    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (datetime(2026, 1, 1, 9, 0), datetime(2026, 1, 1, 17, 30), 510),
            (datetime(2026, 1, 1, 9, 0), datetime(2026, 1, 1, 8, 0), 0),
            (datetime(2026, 1, 1, 9, 0), None, None),
        ],
    )
    def test_minutes_between(self, start, end, expected):
        assert minutes_between(start, end) == expected

    def test_mixed_naive_and_aware(self):
        naive = datetime(2026, 1, 1, 9, 0)
        aware = datetime(2026, 1, 1, 10, 0, tzinfo=timezone.utc)
        assert minutes_between(naive, aware) == 60


def test_today_is_a_date():
    assert isinstance(today(), date)
