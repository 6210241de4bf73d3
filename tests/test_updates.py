"""Work and learning update tests — hour slots, ownership, day filters."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from grofast.common.constants import HOUR_SLOTS
from grofast.updates.models import LearningUpdate, WorkUpdate

SLOT = HOUR_SLOTS[0]
NEXT_SLOT = HOUR_SLOTS[1]


async def _log_work(client, headers, hour: str = SLOT, **fields) -> dict:
    resp = await client.post(
        "/api/v1/work-updates",
        json={"hour": hour, "description": "Fixed the export job", **fields},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_hour_slots_cover_the_working_day():
    assert HOUR_SLOTS[0] == "09:00 - 10:00"
    assert HOUR_SLOTS[-1] == "20:00 - 21:00"
    assert len(HOUR_SLOTS) == 12


class TestWorkUpdates:
    async def test_log_an_hour(self, client, member, member_headers):
        row = await _log_work(client, member_headers, file_url="https://cdn.grofast.app/f.pdf")
        assert row["employee_id"] == str(member.id)
        assert row["hour"] == SLOT

    async def test_unknown_slot_is_422(self, client, member_headers):
        resp = await client.post(
            "/api/v1/work-updates",
            json={"hour": "3pm", "description": "x"},
            headers=member_headers,
        )
        assert resp.status_code == 422
        assert "hour" in resp.json()["errors"]

    async def test_same_slot_twice_is_409(self, client, member_headers):
        await _log_work(client, member_headers)
        resp = await client.post(
            "/api/v1/work-updates",
            json={"hour": SLOT, "description": "again"},
            headers=member_headers,
        )
        assert resp.status_code == 409

    async def test_same_slot_different_people(self, client, member_headers, other_headers):
        await _log_work(client, member_headers)
        await _log_work(client, other_headers)

    async def test_yesterdays_slot_is_free_today(self, client, db, member, member_headers):
        yesterday = datetime.now(timezone.utc) - timedelta(days=1)
        db.add(WorkUpdate(
            employee_id=member.id, hour=SLOT, description="old", created_at=yesterday,
        ))
        await db.commit()
        await _log_work(client, member_headers)

    async def test_members_see_their_own(self, client, member_headers, other_headers, admin_headers):
        mine = await _log_work(client, member_headers)
        theirs = await _log_work(client, other_headers)

        resp = await client.get("/api/v1/work-updates", headers=member_headers)
        assert [r["id"] for r in resp.json()] == [mine["id"]]
        hidden = await client.get(f"/api/v1/work-updates/{theirs['id']}", headers=member_headers)
        assert hidden.status_code == 404

        everyone = await client.get("/api/v1/work-updates", headers=admin_headers)
        assert len(everyone.json()) == 2

    async def test_move_to_a_taken_slot_is_409(self, client, member_headers):
        await _log_work(client, member_headers, hour=SLOT)
        second = await _log_work(client, member_headers, hour=NEXT_SLOT)
        resp = await client.patch(
            f"/api/v1/work-updates/{second['id']}", json={"hour": SLOT}, headers=member_headers,
        )
        assert resp.status_code == 409

    async def test_edit_description(self, client, member_headers):
        row = await _log_work(client, member_headers)
        resp = await client.patch(
            f"/api/v1/work-updates/{row['id']}",
            json={"description": "Reviewed PRs"},
            headers=member_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["description"] == "Reviewed PRs"
        assert resp.json()["hour"] == SLOT

    async def test_admin_reads_but_cannot_edit(self, client, member_headers, admin_headers):
        row = await _log_work(client, member_headers)
        seen = await client.get(f"/api/v1/work-updates/{row['id']}", headers=admin_headers)
        assert seen.status_code == 200
        resp = await client.patch(
            f"/api/v1/work-updates/{row['id']}", json={"description": "x"}, headers=admin_headers,
        )
        assert resp.status_code == 403

    async def test_delete_own(self, client, member_headers):
        row = await _log_work(client, member_headers)
        resp = await client.delete(f"/api/v1/work-updates/{row['id']}", headers=member_headers)
        assert resp.status_code == 204


class TestLearningUpdates:
    async def test_log_and_filter_by_day(self, client, db, member, member_headers):
        last_week = datetime.now(timezone.utc) - timedelta(days=7)
        db.add(LearningUpdate(employee_id=member.id, hour=SLOT, topic="Old", created_at=last_week))
        await db.commit()

        resp = await client.post(
            "/api/v1/learning-updates",
            json={"hour": SLOT, "topic": "SQLAlchemy 2.0", "notes": "select() everywhere"},
            headers=member_headers,
        )
        assert resp.status_code == 201

        since = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
        today_only = await client.get(
            "/api/v1/learning-updates",
            params={"created_at__from": since},
            headers=member_headers,
        )
        assert [r["topic"] for r in today_only.json()] == ["SQLAlchemy 2.0"]

    @pytest.mark.parametrize("payload", [{"hour": SLOT}, {"hour": SLOT, "topic": ""}])
    async def test_topic_required(self, client, member_headers, payload):
        resp = await client.post("/api/v1/learning-updates", json=payload, headers=member_headers)
        assert resp.status_code == 422
