"""Pydantic schemas for activities, sessions and calendar entries."""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from services.portal_service.models.enums import ActivityType
from services.portal_service.schemas.common import BlankAsNoneModel


class ActivityBase(BlankAsNoneModel):
    name: str
    type: ActivityType = ActivityType.OFFER
    code: Optional[str] = None
    slug: Optional[str] = None
    legacy_id: Optional[str] = None
    season: Optional[str] = None
    weekday: Optional[str] = None
    capacity: Optional[int] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    event_date: Optional[date] = None
    has_guests: bool = False
    has_attendance: bool = False
    has_volunteers: bool = False
    has_tasks: bool = False
    archived: bool = False


class ActivityCreate(ActivityBase):
    pass


class ActivityUpdate(BlankAsNoneModel):
    """Fields a client may change; anything else in the body is ignored."""
    name: Optional[str] = None
    type: Optional[ActivityType] = None
    code: Optional[str] = None
    slug: Optional[str] = None
    season: Optional[str] = None
    weekday: Optional[str] = None
    capacity: Optional[int] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    event_date: Optional[date] = None
    has_guests: Optional[bool] = None
    has_attendance: Optional[bool] = None
    has_volunteers: Optional[bool] = None
    has_tasks: Optional[bool] = None
    archived: Optional[bool] = None


class ActivityResponse(ActivityBase):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ParticipantResponse(BaseModel):
    id: str
    name: str


class ActivityRoleResponse(BaseModel):
    activity_id: str
    role: Optional[str] = None
    can_edit: bool = False


# ---------------------------------------------------------------------------
# Sessions & calendar
# ---------------------------------------------------------------------------


class SessionCreate(BlankAsNoneModel):
    title: str
    start: datetime
    end: Optional[datetime] = None
    duration_minutes: int = Field(default=90, gt=0)
    location: Optional[str] = None
    note: Optional[str] = None
    target_member_ids: Optional[list[str]] = None


class SessionResponse(BaseModel):
    id: str
    activity_id: str
    title: str
    start: datetime
    end: datetime
    location: Optional[str] = None
    note: Optional[str] = None
    target_member_ids: list[str] = []
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SessionCreatedResponse(SessionResponse):
    calendar_entries: int = 0


class CalendarEntryResponse(BaseModel):
    id: str
    member_id: str
    title: str
    start: datetime
    end: Optional[datetime] = None
    source: str
    activity_id: Optional[str] = None
    session_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
