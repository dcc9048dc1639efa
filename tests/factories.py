"""
Model factories and auth helpers for tests.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    member = MemberFactory.create(email="custom@test.com")
    db_session.add(member)
    await db_session.commit()
"""

import uuid
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@test.com"


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


def make_admin_user(**overrides):
    from libs.auth.models import AuthUser

    defaults = {
        "user_id": "admin-user",
        "email": "admin@test.com",
        "role": "authenticated",
        "app_metadata": {"roles": ["admin"]},
        "user_metadata": {"full_name": "Ada Admin"},
    }
    defaults.update(overrides)
    return AuthUser(**defaults)


def make_member_user(**overrides):
    from libs.auth.models import AuthUser

    defaults = {
        "user_id": f"user-{uuid.uuid4().hex[:8]}",
        "email": _unique_email(),
        "role": "authenticated",
        "app_metadata": {},
        "user_metadata": {},
    }
    defaults.update(overrides)
    return AuthUser(**defaults)


@contextmanager
def override_auth(app, user):
    """Sign requests in as ``user`` for the duration of the block."""
    from libs.auth.dependencies import get_current_user

    previous = app.dependency_overrides.get(get_current_user)
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield user
    finally:
        if previous is None:
            app.dependency_overrides.pop(get_current_user, None)
        else:
            app.dependency_overrides[get_current_user] = previous


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


class MemberFactory:
    @staticmethod
    def create(**overrides):
        from services.portal_service.models import Member

        defaults = {
            "id": _uuid(),
            "email": _unique_email(),
            "first_name": "Test",
            "last_name": "Member",
            "archived": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Member(**defaults)


# ---------------------------------------------------------------------------
# Activities
# ---------------------------------------------------------------------------


class ActivityFactory:
    @staticmethod
    def create(**overrides):
        from services.portal_service.models import Activity

        defaults = {
            "id": _uuid(),
            "name": "Revy 2026",
            "type": "offer",
            "season": "Høst 2026",
            "has_guests": False,
            "has_attendance": False,
            "has_volunteers": False,
            "has_tasks": False,
            "archived": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Activity(**defaults)


class EventFactory:
    @staticmethod
    def create(**overrides):
        defaults = {
            "name": "Sommerfest",
            "type": "event",
            "event_date": date.today() - timedelta(days=30),
            "has_guests": True,
        }
        defaults.update(overrides)
        return ActivityFactory.create(**defaults)


class EnrollmentFactory:
    @staticmethod
    def create(member_id, activity_id, **overrides):
        from services.portal_service.models import Enrollment

        defaults = {
            "id": _uuid(),
            "member_id": member_id,
            "activity_id": activity_id,
            "role": "participant",
            "created_at": _now(),
        }
        defaults.update(overrides)
        return Enrollment(**defaults)


class SessionFactory:
    @staticmethod
    def create(activity_id, **overrides):
        from services.portal_service.models import Session

        start = overrides.pop("start", _now() + timedelta(days=1))
        defaults = {
            "id": _uuid(),
            "activity_id": activity_id,
            "title": "Øving",
            "start": start,
            "end": start + timedelta(minutes=90),
            "target_member_ids": [],
            "created_at": _now(),
        }
        defaults.update(overrides)
        return Session(**defaults)


class CalendarEntryFactory:
    @staticmethod
    def create(member_id, **overrides):
        from services.portal_service.models import CalendarEntry

        defaults = {
            "id": _uuid(),
            "member_id": member_id,
            "title": "Revy 2026: Øving",
            "start": _now() + timedelta(days=1),
            "source": "session",
            "created_at": _now(),
        }
        defaults.update(overrides)
        return CalendarEntry(**defaults)


class MessageFactory:
    @staticmethod
    def create(**overrides):
        from services.portal_service.models import Message

        defaults = {
            "id": _uuid(),
            "scope": "activity",
            "target": "all",
            "body": "Husk øving på torsdag",
            "created_at": _now(),
        }
        defaults.update(overrides)
        return Message(**defaults)


# ---------------------------------------------------------------------------
# Guests, volunteers and tasks
# ---------------------------------------------------------------------------


class GuestFactory:
    @staticmethod
    def create(activity_id, **overrides):
        from services.portal_service.models import ActivityGuest

        defaults = {
            "id": _uuid(),
            "activity_id": activity_id,
            "first_name": "Kari",
            "last_name": "Nordmann",
            "phone": "+4712345678",
            "is_norwegian": True,
            "present": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return ActivityGuest(**defaults)


class GuestChildFactory:
    @staticmethod
    def create(guest_id, **overrides):
        from services.portal_service.models import ActivityGuestChild

        defaults = {
            "id": _uuid(),
            "guest_id": guest_id,
            "first_name": "Ola",
            "age": 7,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return ActivityGuestChild(**defaults)


class VolunteerFactory:
    @staticmethod
    def create(activity_id, member_id, **overrides):
        from services.portal_service.models import ActivityVolunteer

        defaults = {
            "id": _uuid(),
            "activity_id": activity_id,
            "member_id": member_id,
            "role": "Kiosk",
            "created_at": _now(),
        }
        defaults.update(overrides)
        return ActivityVolunteer(**defaults)


class TaskFactory:
    @staticmethod
    def create(activity_id, **overrides):
        from services.portal_service.models import ActivityTask

        defaults = {
            "id": _uuid(),
            "activity_id": activity_id,
            "title": "Bestille lokale",
            "status": "todo",
            "sort_order": 0,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return ActivityTask(**defaults)
