"""Enum definitions for portal models."""

import enum


class ActivityType(str, enum.Enum):
    OFFER = "offer"
    EVENT = "event"


class EnrollmentRole(str, enum.Enum):
    PARTICIPANT = "participant"
    LEADER = "leader"

    @classmethod
    def normalize(cls, value) -> "EnrollmentRole":
        """``leader`` (or Norwegian ``leder``) is a leader, anything else a participant."""
        text = str(value or "").strip().lower()
        if text in ("leader", "leder"):
            return cls.LEADER
        return cls.PARTICIPANT


class MemberRoleName(str, enum.Enum):
    MEMBER = "member"
    LEADER = "leader"
    ADMIN = "admin"


class TaskStatus(str, enum.Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def normalize(cls, value) -> "TaskStatus":
        text = str(value if value is not None else "todo").lower()
        try:
            return cls(text)
        except ValueError:
            return cls.TODO


class FileCategory(str, enum.Enum):
    IMAGE = "image"
    TEXT = "text"
    AUDIO = "audio"
    OTHER = "other"


class MessageScope(str, enum.Enum):
    ACTIVITY = "activity"
    MEMBER = "member"


class MessageTarget(str, enum.Enum):
    ALL = "all"
    PARTICIPANTS = "participants"
    LEADERS = "leaders"
    GUESTS = "guests"
    VOLUNTEERS = "volunteers"
    CUSTOM = "custom"


class CalendarSource(str, enum.Enum):
    SESSION = "session"
    ACTIVITY = "activity"
    MANUAL = "manual"
