"""Unit tests for the activity hard delete cascade.

Tests call hard_delete_activity directly with the db_session fixture.
Row counts are checked with COUNT queries because the cascade deletes
with raw SQL, behind the session's identity map.
"""

import json

import pytest
from services.portal_service.cascade import (
    DEPENDENT_DELETES,
    CascadeDeleteError,
    hard_delete_activity,
    is_ignorable,
)
from services.portal_service.mirror import MirrorKeys, MirrorStore, local_activity_ids
from services.portal_service.models import (
    Activity,
    ActivityGuest,
    ActivityGuestChild,
    ActivityTask,
    ActivityVolunteer,
    CalendarEntry,
    Enrollment,
    Member,
    MemberActivityHistory,
    Message,
    Session,
)
from sqlalchemy import func, select, text
from tests.factories import (
    ActivityFactory,
    CalendarEntryFactory,
    EnrollmentFactory,
    GuestChildFactory,
    GuestFactory,
    MemberFactory,
    MessageFactory,
    SessionFactory,
    TaskFactory,
    VolunteerFactory,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _count(db, model, **filters) -> int:
    query = select(func.count()).select_from(model)
    for field, value in filters.items():
        query = query.where(getattr(model, field) == value)
    return (await db.execute(query)).scalar_one()


async def _activity_with_dependents(db) -> tuple[str, str]:
    """Insert an activity with one row in every dependent table."""
    member = MemberFactory.create()
    activity = ActivityFactory.create(has_guests=True, has_tasks=True)
    guest = GuestFactory.create(activity.id)
    db.add_all([member, activity, guest])
    db.add_all(
        [
            EnrollmentFactory.create(member.id, activity.id),
            SessionFactory.create(activity.id, target_member_ids=[member.id]),
            CalendarEntryFactory.create(member.id, activity_id=activity.id),
            MessageFactory.create(activity_id=activity.id),
            GuestChildFactory.create(guest.id),
            VolunteerFactory.create(activity.id, member.id),
            TaskFactory.create(activity.id),
            MemberActivityHistory(member_id=member.id, activity_id=activity.id),
        ]
    )
    await db.commit()
    return activity.id, member.id


# ---------------------------------------------------------------------------
# is_ignorable
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "message",
    [
        'relation "activity_files" does not exist',
        'column "activity_id" does not exist',
        "Could not find the table 'public.activity_files' in the schema cache",
        "no such table: activity_files",
        "no such column: activity_id",
    ],
)
def test_missing_schema_errors_are_ignorable(message):
    assert is_ignorable(message)


def test_other_errors_are_not_ignorable():
    assert not is_ignorable("permission denied for table enrollments")
    assert not is_ignorable("")


def test_children_are_deleted_before_their_guests():
    tables = [table for table, _ in DEPENDENT_DELETES]
    assert tables.index("activity_guest_children") < tables.index("activity_guests")
    assert "activities" not in tables


# ---------------------------------------------------------------------------
# hard_delete_activity
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_hard_delete_removes_activity_and_all_dependents(db_session):
    activity_id, member_id = await _activity_with_dependents(db_session)
    other = ActivityFactory.create(name="Keep me")
    db_session.add(other)
    db_session.add(EnrollmentFactory.create(member_id, other.id))
    await db_session.commit()

    result = await hard_delete_activity(db_session, activity_id)

    deleted = result["deleted"]
    assert deleted["activities"] == 1
    assert deleted["enrollments"] == 1
    assert deleted["activity_guest_children"] == 1
    assert deleted["activity_guests"] == 1
    # this deployment has no activity_files table
    assert deleted["activity_files"] == 0

    for model in (
        Enrollment,
        Session,
        CalendarEntry,
        Message,
        ActivityGuest,
        ActivityVolunteer,
        ActivityTask,
        MemberActivityHistory,
    ):
        assert await _count(db_session, model, activity_id=activity_id) == 0, model
    assert await _count(db_session, ActivityGuestChild) == 0
    assert await _count(db_session, Activity, id=activity_id) == 0

    # unrelated rows survive
    assert await _count(db_session, Activity, id=other.id) == 1
    assert await _count(db_session, Enrollment, activity_id=other.id) == 1
    assert await _count(db_session, Member, id=member_id) == 1


@pytest.mark.asyncio
async def test_hard_delete_of_unknown_id_succeeds(db_session):
    result = await hard_delete_activity(db_session, "does-not-exist")
    assert result["deleted"]["activities"] == 0
    assert result["files_removed"] == 0


@pytest.mark.asyncio
async def test_hard_delete_skips_missing_dependent_table(db_session):
    activity_id, _ = await _activity_with_dependents(db_session)
    await db_session.execute(text("DROP TABLE activity_volunteers"))
    await db_session.commit()

    result = await hard_delete_activity(db_session, activity_id)

    assert result["deleted"]["activity_volunteers"] == 0
    assert result["deleted"]["activities"] == 1
    assert await _count(db_session, Enrollment, activity_id=activity_id) == 0


@pytest.mark.asyncio
async def test_hard_delete_can_be_repeated(db_session):
    activity_id, _ = await _activity_with_dependents(db_session)

    await hard_delete_activity(db_session, activity_id)
    again = await hard_delete_activity(db_session, activity_id)

    assert set(again["deleted"].values()) == {0}


@pytest.mark.asyncio
async def test_hard_delete_removes_files_and_mirror_copies(db_session, storage):
    activity_id, _ = await _activity_with_dependents(db_session)
    await storage.upload("activity-files", f"{activity_id}/f1-manus.pdf", b"pdf")
    await storage.write_manifest(activity_id, [{"id": "f1"}])

    keys = MirrorKeys("follies")
    store = MirrorStore(
        {
            keys.activities: json.dumps([{"id": activity_id}, {"id": "other"}]),
            keys.covers: json.dumps({activity_id: "cover.png"}),
        },
        keys,
    )

    result = await hard_delete_activity(db_session, activity_id, storage, store)

    assert result["files_removed"] == 2
    assert await storage.list_paths("activity-files", activity_id) == []
    assert local_activity_ids(store) == {"other"}
    assert json.loads(store.data[keys.covers]) == {}


@pytest.mark.asyncio
async def test_failure_on_activity_row_keeps_dependents_deleted(db_session):
    activity_id, _ = await _activity_with_dependents(db_session)
    await db_session.execute(
        text(
            "CREATE TRIGGER block_activity_delete BEFORE DELETE ON activities "
            "BEGIN SELECT RAISE(ABORT, 'activity is locked'); END"
        )
    )
    await db_session.commit()

    with pytest.raises(CascadeDeleteError) as excinfo:
        await hard_delete_activity(db_session, activity_id)
    await db_session.rollback()

    assert excinfo.value.step == "activities"
    assert "activity is locked" in excinfo.value.message
    # earlier steps are not rolled back
    assert await _count(db_session, Enrollment, activity_id=activity_id) == 0
    assert await _count(db_session, Activity, id=activity_id) == 1


@pytest.mark.asyncio
async def test_failure_on_dependent_step_stops_the_cascade(db_session):
    activity_id, _ = await _activity_with_dependents(db_session)
    await db_session.execute(
        text(
            "CREATE TRIGGER block_session_delete BEFORE DELETE ON sessions "
            "BEGIN SELECT RAISE(ABORT, 'session is locked'); END"
        )
    )
    await db_session.commit()

    with pytest.raises(CascadeDeleteError) as excinfo:
        await hard_delete_activity(db_session, activity_id)
    await db_session.rollback()

    assert excinfo.value.step == "sessions"
    assert "session is locked" in excinfo.value.message
    # steps before the failure stay deleted, later ones never ran
    assert await _count(db_session, Enrollment, activity_id=activity_id) == 0
    assert await _count(db_session, Session, activity_id=activity_id) == 1
    assert await _count(db_session, CalendarEntry, activity_id=activity_id) == 1
    assert await _count(db_session, Activity, id=activity_id) == 1
