"""Pydantic schemas for guests, volunteers and tasks."""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from services.portal_service.schemas.common import BlankAsNoneModel

# ============================================================================
# GUESTS
# ============================================================================


class GuestChildCreate(BlankAsNoneModel):
    first_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("age", mode="before")
    @classmethod
    def age_is_number(cls, value):
        # numeric strings are not accepted, only numbers or null
        if value == "":
            return None
        if value is None or (isinstance(value, (int, float)) and not isinstance(value, bool)):
            return value
        raise ValueError("age must be a number or null")


class GuestChildUpdate(GuestChildCreate):
    pass


class GuestChildResponse(BaseModel):
    id: str
    guest_id: str
    first_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GuestCreate(BlankAsNoneModel):
    activity_id: str
    first_name: str
    last_name: str
    phone: str
    email: Optional[str] = None
    is_norwegian: bool = True
    notes: Optional[str] = None


class GuestUpdate(BlankAsNoneModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_norwegian: Optional[bool] = None
    notes: Optional[str] = None
    present: Optional[bool] = None


class GuestResponse(BaseModel):
    id: str
    activity_id: str
    first_name: str
    last_name: str
    phone: str
    email: Optional[str] = None
    is_norwegian: bool
    notes: Optional[str] = None
    present: bool
    present_marked_at: Optional[datetime] = None
    created_at: datetime
    children: list[GuestChildResponse] = []

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# VOLUNTEERS & TASKS
# ============================================================================


class MemberSummary(BaseModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class VolunteerCreate(BlankAsNoneModel):
    activity_id: str
    member_id: str
    role: Optional[str] = None
    notes: Optional[str] = None


class VolunteerUpdate(BlankAsNoneModel):
    role: Optional[str] = None
    notes: Optional[str] = None


class VolunteerResponse(BaseModel):
    id: str
    activity_id: str
    member_id: str
    role: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    member: Optional[MemberSummary] = None

    model_config = ConfigDict(from_attributes=True)


class TaskCreate(BlankAsNoneModel):
    activity_id: str
    title: str
    description: Optional[str] = None
    status: Optional[str] = None
    assigned_member_id: Optional[str] = None
    due_date: Optional[date] = None
    sort_order: int = 0


class TaskUpdate(BlankAsNoneModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    assigned_member_id: Optional[str] = None
    due_date: Optional[date] = None
    sort_order: Optional[int] = None


class TaskResponse(BaseModel):
    id: str
    activity_id: str
    title: str
    description: Optional[str] = None
    status: str
    assigned_member_id: Optional[str] = None
    due_date: Optional[date] = None
    sort_order: int
    created_by: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    assignee: Optional[MemberSummary] = None

    model_config = ConfigDict(from_attributes=True)
