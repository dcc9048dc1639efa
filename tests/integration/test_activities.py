"""Integration tests for /api/activities and activity sessions."""

import json

import pytest
from services.portal_service.app.main import app
from services.portal_service.models import Activity
from tests.factories import (
    ActivityFactory,
    EnrollmentFactory,
    MemberFactory,
    make_member_user,
    override_auth,
)

# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "portal"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_activity(client):
    response = await client.post(
        "/api/activities/",
        json={"name": "Revy 2026", "type": "offer", "season": "Høst", "code": ""},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["name"] == "Revy 2026"
    assert data["code"] is None
    assert data["archived"] is False
    assert data["id"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_activity_requires_name(client):
    response = await client.post("/api/activities/", json={"name": "", "type": "offer"})
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_activities_hides_archived_and_filters_type(client, db_session):
    db_session.add_all(
        [
            ActivityFactory.create(name="Revy"),
            ActivityFactory.create(name="Sommerfest", type="event"),
            ActivityFactory.create(name="Old", archived=True),
        ]
    )
    await db_session.commit()

    response = await client.get("/api/activities/")
    assert {a["name"] for a in response.json()} == {"Revy", "Sommerfest"}

    response = await client.get("/api/activities/", params={"type": "event"})
    assert [a["name"] for a in response.json()] == ["Sommerfest"]

    response = await client.get("/api/activities/", params={"include_archived": True})
    assert len(response.json()) == 3


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("field", ["id", "code", "slug", "legacy_id"])
async def test_get_activity_by_any_identifier(client, db_session, field):
    activity = ActivityFactory.create(code="REVY26", slug="revy-2026", legacy_id="17")
    db_session.add(activity)
    await db_session.commit()

    response = await client.get(f"/api/activities/{getattr(activity, field)}")
    assert response.status_code == 200
    assert response.json()["id"] == activity.id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_unknown_activity_returns_404(client):
    response = await client.get("/api/activities/nope")
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_activity_ignores_unknown_fields_and_null_required(client, db_session):
    activity = ActivityFactory.create(name="Revy", description="Old")
    db_session.add(activity)
    await db_session.commit()

    response = await client.patch(
        f"/api/activities/{activity.id}",
        json={"name": None, "description": "New", "id": "other", "bogus": 1},
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["id"] == activity.id
    assert data["name"] == "Revy"
    assert data["description"] == "New"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_activity_without_fields_is_400(client, db_session):
    activity = ActivityFactory.create()
    db_session.add(activity)
    await db_session.commit()

    response = await client.patch(f"/api/activities/{activity.id}", json={"bogus": 1})
    assert response.status_code == 400
    assert response.json()["detail"] == "No valid fields to update"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_activity_archives(client, db_session):
    activity = ActivityFactory.create()
    db_session.add(activity)
    await db_session.commit()

    response = await client.delete(f"/api/activities/{activity.id}")
    assert response.status_code == 200
    assert response.json()["archived"] is True
    assert (await db_session.get(Activity, activity.id)) is not None


# ---------------------------------------------------------------------------
# Participants & roles
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_participants_exclude_archived_members(client, db_session):
    activity = ActivityFactory.create()
    active = MemberFactory.create(first_name="Kari", last_name="Nordmann")
    nameless = MemberFactory.create(first_name=None, last_name=None)
    archived = MemberFactory.create(archived=True)
    db_session.add_all([activity, active, nameless, archived])
    db_session.add_all(
        [EnrollmentFactory.create(m.id, activity.id) for m in (active, nameless, archived)]
    )
    await db_session.commit()

    response = await client.get(f"/api/activities/{activity.id}/participants")
    assert response.status_code == 200
    names = {p["id"]: p["name"] for p in response.json()}
    assert names == {active.id: "Kari Nordmann", nameless.id: "Uten navn"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_activity_role(client, db_session):
    user = make_member_user()
    activity = ActivityFactory.create()
    member = MemberFactory.create(auth_id=user.user_id)
    db_session.add_all([activity, member])
    db_session.add(EnrollmentFactory.create(member.id, activity.id, role="leader"))
    await db_session.commit()

    response = await client.get(f"/api/activities/{activity.id}/role")
    assert response.json() == {"activity_id": activity.id, "role": "admin", "can_edit": True}

    with override_auth(app, user):
        response = await client.get(f"/api/activities/{activity.id}/role")
        assert response.json()["role"] == "leader"
        assert response.json()["can_edit"] is True

    with override_auth(app, make_member_user()):
        response = await client.get(f"/api/activities/{activity.id}/role")
        assert response.json() == {
            "activity_id": activity.id,
            "role": None,
            "can_edit": False,
        }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_mirror_saved_activity(client, db_session):
    activity = ActivityFactory.create(name="Revy")
    db_session.add(activity)
    await db_session.commit()

    mirror = {"follies.activities.v1": json.dumps([{"id": "x"}, {"id": activity.id}])}
    response = await client.post(
        f"/api/activities/{activity.id}/mirror", json={"mirror": mirror}
    )
    assert response.status_code == 200
    snapshot = response.json()["mirror"]
    for key in ("follies.activities.v1", "follies.activities"):
        items = json.loads(snapshot[key])
        assert [i["id"] for i in items] == [activity.id, "x"]
        assert items[0]["name"] == "Revy"
