from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, new_id
from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from services.portal_service.models.enums import (
    ActivityType,
    CalendarSource,
    EnrollmentRole,
)


class Activity(Base):
    __tablename__ = "activities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(
        String(20), default=ActivityType.OFFER.value, nullable=False
    )

    # Alternate identifiers used by older links and imports
    code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    slug: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    legacy_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, index=True
    )

    season: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    weekday: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    event_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    has_guests: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_attendance: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_volunteers: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_tasks: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<Activity {self.id} {self.name}>"


class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("member_id", "activity_id", name="uq_enrollment_member_activity"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    member_id: Mapped[str] = mapped_column(String(36), index=True)
    activity_id: Mapped[str] = mapped_column(String(36), index=True)
    role: Mapped[str] = mapped_column(
        String(20), default=EnrollmentRole.PARTICIPANT.value, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class Session(Base):
    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    activity_id: Mapped[str] = mapped_column(String(36), index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    target_member_ids: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class CalendarEntry(Base):
    """Per-member projection of sessions; rows are duplicated per target."""

    __tablename__ = "calendar_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    member_id: Mapped[str] = mapped_column(String(36), index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    source: Mapped[str] = mapped_column(
        String(20), default=CalendarSource.SESSION.value, nullable=False
    )
    activity_id: Mapped[Optional[str]] = mapped_column(
        String(36), nullable=True, index=True
    )
    session_id: Mapped[Optional[str]] = mapped_column(
        String(36), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class Message(Base):
    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    scope: Mapped[str] = mapped_column(String(20), nullable=False)
    activity_id: Mapped[Optional[str]] = mapped_column(
        String(36), nullable=True, index=True
    )
    member_id: Mapped[Optional[str]] = mapped_column(
        String(36), nullable=True, index=True
    )
    target: Mapped[str] = mapped_column(String(20), default="all", nullable=False)
    subject: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_by_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_by_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
