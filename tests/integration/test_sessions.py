"""Integration tests for sessions and the per-member calendar."""

import json

import pytest
from services.portal_service.app.main import app
from services.portal_service.models import CalendarEntry
from sqlalchemy import func, select
from tests.factories import (
    ActivityFactory,
    CalendarEntryFactory,
    EnrollmentFactory,
    MemberFactory,
    SessionFactory,
    make_member_user,
    override_auth,
)


async def _enrolled_activity(db, n_members=2):
    activity = ActivityFactory.create(name="Revy")
    members = [MemberFactory.create() for _ in range(n_members)]
    db.add(activity)
    db.add_all(members)
    db.add_all([EnrollmentFactory.create(m.id, activity.id) for m in members])
    await db.commit()
    return activity, members


async def _calendar_count(db, **filters) -> int:
    query = select(func.count()).select_from(CalendarEntry)
    for field, value in filters.items():
        query = query.where(getattr(CalendarEntry, field) == value)
    return (await db.execute(query)).scalar_one()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_session_targets_enrolled_members(client, db_session):
    activity, members = await _enrolled_activity(db_session)

    response = await client.post(
        f"/api/activities/{activity.id}/sessions",
        json={"title": "Øving", "start": "2026-05-01T16:00:00Z"},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["calendar_entries"] == 2
    assert set(data["target_member_ids"]) == {m.id for m in members}
    # default length is 90 minutes
    assert data["end"].startswith("2026-05-01T17:30:00")

    assert await _calendar_count(db_session, session_id=data["id"]) == 2
    entry = (
        await db_session.execute(
            select(CalendarEntry).where(CalendarEntry.member_id == members[0].id)
        )
    ).scalar_one()
    assert entry.title == "Revy: Øving"
    assert entry.source == "session"
    assert entry.activity_id == activity.id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_session_with_explicit_targets_and_end(client, db_session):
    activity, members = await _enrolled_activity(db_session)

    response = await client.post(
        f"/api/activities/{activity.id}/sessions",
        json={
            "title": "Generalprøve",
            "start": "2026-05-02T16:00:00Z",
            "end": "2026-05-02T20:00:00Z",
            "target_member_ids": [members[1].id, members[1].id],
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert data["target_member_ids"] == [members[1].id]
    assert data["calendar_entries"] == 1
    assert data["end"].startswith("2026-05-02T20:00:00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_session_without_targets_is_400(client, db_session):
    activity = ActivityFactory.create()
    db_session.add(activity)
    await db_session.commit()

    response = await client.post(
        f"/api/activities/{activity.id}/sessions",
        json={"title": "Øving", "start": "2026-05-01T16:00:00Z"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_session_rejects_non_positive_duration(client, db_session):
    activity, _ = await _enrolled_activity(db_session)
    response = await client.post(
        f"/api/activities/{activity.id}/sessions",
        json={"title": "Øving", "start": "2026-05-01T16:00:00Z", "duration_minutes": 0},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_and_delete_session(client, db_session):
    activity, members = await _enrolled_activity(db_session, n_members=1)
    created = await client.post(
        f"/api/activities/{activity.id}/sessions",
        json={"title": "Øving", "start": "2026-05-01T16:00:00Z"},
    )
    session_id = created.json()["id"]

    listed = await client.get(f"/api/activities/{activity.id}/sessions")
    assert [s["id"] for s in listed.json()] == [session_id]

    response = await client.delete(f"/api/sessions/{session_id}")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "calendar_entries_removed": 1}
    assert await _calendar_count(db_session, session_id=session_id) == 0

    response = await client.get(f"/api/sessions/{session_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_mirror_session(client, db_session):
    activity = ActivityFactory.create(name="Revy")
    member = MemberFactory.create()
    session = SessionFactory.create(activity.id, target_member_ids=[member.id])
    db_session.add_all([activity, member, session])
    await db_session.commit()

    response = await client.post(f"/api/sessions/{session.id}/mirror", json={"mirror": {}})
    assert response.status_code == 200
    snapshot = response.json()["mirror"]
    assert [s["id"] for s in json.loads(snapshot["follies.activitySessions.v1"])[activity.id]] == [
        session.id
    ]
    calendar = json.loads(snapshot["follies.calendar.v1"])
    assert [e["id"] for e in calendar] == [f"{session.id}:{member.id}"]
    assert calendar[0]["title"] == "Revy: Øving"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_calendar_for_member_and_for_signed_in_user(client, db_session):
    user = make_member_user()
    member = MemberFactory.create(email=user.email)
    db_session.add(member)
    db_session.add(CalendarEntryFactory.create(member.id))
    db_session.add(CalendarEntryFactory.create(MemberFactory.create().id))
    await db_session.commit()

    response = await client.get("/api/calendar", params={"member_id": member.id})
    assert len(response.json()) == 1

    with override_auth(app, user):
        response = await client.get("/api/calendar")
    assert [e["member_id"] for e in response.json()] == [member.id]

    # the admin has no member row
    response = await client.get("/api/calendar")
    assert response.json() == []

    response = await client.get(f"/api/members/{member.id}/calendar")
    assert len(response.json()) == 1
