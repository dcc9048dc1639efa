"""Integration tests for guest lists, guest children, volunteers and tasks."""

import pytest
from services.portal_service.models import ActivityGuestChild
from sqlalchemy import func, select
from tests.factories import (
    ActivityFactory,
    GuestChildFactory,
    GuestFactory,
    MemberFactory,
    TaskFactory,
    VolunteerFactory,
)

# ---------------------------------------------------------------------------
# Guests
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_and_list_guests_with_children(client, db_session):
    activity = ActivityFactory.create(has_guests=True)
    db_session.add(activity)
    await db_session.commit()

    response = await client.post(
        "/api/activity-guests/",
        json={
            "activity_id": activity.id,
            "first_name": "Kari",
            "last_name": "Nordmann",
            "phone": "+47 123 45 678",
            "email": "",
        },
    )
    assert response.status_code == 201, response.text
    guest = response.json()
    assert guest["email"] is None
    assert guest["present"] is False
    assert guest["children"] == []

    response = await client.post(
        f"/api/activity-guests/{guest['id']}/children",
        json={"first_name": "Ola", "age": 6, "gender": ""},
    )
    assert response.status_code == 201, response.text

    response = await client.get("/api/activity-guests/", params={"activity_id": activity.id})
    guests = response.json()
    assert len(guests) == 1
    assert [c["first_name"] for c in guests[0]["children"]] == ["Ola"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_guest_requires_phone(client, db_session):
    response = await client.post(
        "/api/activity-guests/",
        json={"activity_id": "a1", "first_name": "Kari", "last_name": "N", "phone": " "},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_child_age_must_be_numeric(client, db_session):
    guest = GuestFactory.create("a1")
    db_session.add(guest)
    await db_session.commit()

    response = await client.post(
        f"/api/activity-guests/{guest.id}/children", json={"age": "six"}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_marking_present_stamps_and_clears_time(client, db_session):
    guest = GuestFactory.create("a1")
    db_session.add(guest)
    await db_session.commit()

    response = await client.patch(f"/api/activity-guests/{guest.id}", json={"present": True})
    assert response.status_code == 200, response.text
    assert response.json()["present"] is True
    stamped = response.json()["present_marked_at"]
    assert stamped is not None

    # already present: the stamp is kept
    response = await client.patch(
        f"/api/activity-guests/{guest.id}", json={"present": True, "notes": "VIP"}
    )
    assert response.json()["present_marked_at"] == stamped

    response = await client.patch(f"/api/activity-guests/{guest.id}", json={"present": False})
    assert response.json()["present"] is False
    assert response.json()["present_marked_at"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_guest_update_skips_blank_required_fields(client, db_session):
    guest = GuestFactory.create("a1", first_name="Kari")
    db_session.add(guest)
    await db_session.commit()

    response = await client.patch(
        f"/api/activity-guests/{guest.id}", json={"first_name": "", "notes": "Allergi"}
    )
    assert response.status_code == 200
    assert response.json()["first_name"] == "Kari"
    assert response.json()["notes"] == "Allergi"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_guest_removes_children(client, db_session):
    guest = GuestFactory.create("a1")
    db_session.add(guest)
    db_session.add_all([GuestChildFactory.create(guest.id), GuestChildFactory.create(guest.id)])
    await db_session.commit()

    response = await client.delete(f"/api/activity-guests/{guest.id}")
    assert response.status_code == 200

    count = (
        await db_session.execute(
            select(func.count()).select_from(ActivityGuestChild).where(
                ActivityGuestChild.guest_id == guest.id
            )
        )
    ).scalar_one()
    assert count == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_and_delete_child(client, db_session):
    guest = GuestFactory.create("a1")
    child = GuestChildFactory.create(guest.id, age=5)
    db_session.add_all([guest, child])
    await db_session.commit()

    response = await client.patch(
        f"/api/activity-guest-children/{child.id}", json={"age": 6}
    )
    assert response.status_code == 200
    assert response.json()["age"] == 6

    response = await client.delete(f"/api/activity-guest-children/{child.id}")
    assert response.json() == {"ok": True}

    response = await client.delete(f"/api/activity-guest-children/{child.id}")
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Volunteers
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_volunteers_carry_member_summary(client, db_session):
    activity = ActivityFactory.create(has_volunteers=True)
    member = MemberFactory.create(first_name="Per", phone="99999999")
    db_session.add_all([activity, member])
    await db_session.commit()

    response = await client.post(
        "/api/activity-volunteers/",
        json={"activity_id": activity.id, "member_id": member.id, "role": "Kiosk"},
    )
    assert response.status_code == 201, response.text
    volunteer = response.json()
    assert volunteer["member"]["first_name"] == "Per"
    assert volunteer["member"]["phone"] == "99999999"

    response = await client.patch(
        f"/api/activity-volunteers/{volunteer['id']}", json={"role": "Billettsalg"}
    )
    assert response.json()["role"] == "Billettsalg"

    response = await client.get("/api/activity-volunteers/", params={"activity_id": activity.id})
    assert [v["member"]["id"] for v in response.json()] == [member.id]

    response = await client.delete(f"/api/activity-volunteers/{volunteer['id']}")
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_volunteer_with_unknown_member_has_no_summary(client, db_session):
    db_session.add(VolunteerFactory.create("a1", "missing-member"))
    await db_session.commit()

    response = await client.get("/api/activity-volunteers/", params={"activity_id": "a1"})
    assert response.json()[0]["member"] is None


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_task_normalizes_status(client, db_session):
    response = await client.post(
        "/api/activity-tasks/",
        json={"activity_id": "a1", "title": "Bestille lokale", "status": "someday"},
    )
    assert response.status_code == 201, response.text
    task = response.json()
    assert task["status"] == "todo"
    assert task["completed_at"] is None
    assert task["created_by"] == "admin@test.com"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_task_completion_time_follows_status(client, db_session):
    task = TaskFactory.create("a1")
    db_session.add(task)
    await db_session.commit()

    response = await client.patch(f"/api/activity-tasks/{task.id}", json={"status": "done"})
    assert response.status_code == 200, response.text
    completed_at = response.json()["completed_at"]
    assert completed_at is not None

    # same status again keeps the original stamp
    response = await client.patch(
        f"/api/activity-tasks/{task.id}", json={"status": "DONE", "title": "Lokale bestilt"}
    )
    assert response.json()["completed_at"] == completed_at
    assert response.json()["title"] == "Lokale bestilt"

    response = await client.patch(
        f"/api/activity-tasks/{task.id}", json={"status": "in_progress"}
    )
    assert response.json()["status"] == "in_progress"
    assert response.json()["completed_at"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_tasks_are_ordered_and_show_assignee(client, db_session):
    member = MemberFactory.create(first_name="Liv")
    db_session.add(member)
    db_session.add_all(
        [
            TaskFactory.create("a1", title="B", sort_order=2),
            TaskFactory.create("a1", title="A", sort_order=1, assigned_member_id=member.id),
            TaskFactory.create("a2", title="Other activity"),
        ]
    )
    await db_session.commit()

    response = await client.get("/api/activity-tasks/", params={"activity_id": "a1"})
    tasks = response.json()
    assert [t["title"] for t in tasks] == ["A", "B"]
    assert tasks[0]["assignee"]["first_name"] == "Liv"
    assert tasks[1]["assignee"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_empty_task_update_is_400(client, db_session):
    task = TaskFactory.create("a1")
    db_session.add(task)
    await db_session.commit()

    response = await client.patch(f"/api/activity-tasks/{task.id}", json={"title": None})
    assert response.status_code == 400
