"""Portal service models package."""

from services.portal_service.models.activity import (
    Activity,
    CalendarEntry,
    Enrollment,
    Message,
    Session,
)
from services.portal_service.models.enums import (
    ActivityType,
    CalendarSource,
    EnrollmentRole,
    FileCategory,
    MemberRoleName,
    MessageScope,
    MessageTarget,
    TaskStatus,
)
from services.portal_service.models.member import (
    Member,
    MemberActivityHistory,
    MemberRole,
)
from services.portal_service.models.participation import (
    ActivityGuest,
    ActivityGuestChild,
    ActivityTask,
    ActivityVolunteer,
)

__all__ = [
    "Activity",
    "ActivityGuest",
    "ActivityGuestChild",
    "ActivityTask",
    "ActivityType",
    "ActivityVolunteer",
    "CalendarEntry",
    "CalendarSource",
    "Enrollment",
    "EnrollmentRole",
    "FileCategory",
    "Member",
    "MemberActivityHistory",
    "MemberRole",
    "MemberRoleName",
    "Message",
    "MessageScope",
    "MessageTarget",
    "Session",
    "TaskStatus",
]
