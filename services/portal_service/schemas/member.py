"""Pydantic schemas for members and enrollments."""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr

from services.portal_service.schemas.common import BlankAsNoneModel


class MemberBase(BlankAsNoneModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    dob: Optional[date] = None
    start_date: Optional[date] = None
    start_year: Optional[int] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    guardian_email: Optional[EmailStr] = None
    allergies: Optional[str] = None
    medical_info: Optional[str] = None
    internal_notes: Optional[str] = None


class MemberCreate(MemberBase):
    # activity ids to enroll the new member in
    activities: list[str] = []


class MemberUpdate(MemberBase):
    archived: Optional[bool] = None


class MemberResponse(MemberBase):
    id: str
    auth_id: Optional[str] = None
    email: Optional[str] = None
    guardian_email: Optional[str] = None
    avatar_url: Optional[str] = None
    archived: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MemberCreatedResponse(MemberResponse):
    enrolled: list[str] = []


class AvatarResponse(BaseModel):
    avatar_url: str


# ---------------------------------------------------------------------------
# Enrollments & history
# ---------------------------------------------------------------------------


class EnrollmentSetRequest(BaseModel):
    activity_ids: list[str]


class EnrollmentDiffResponse(BaseModel):
    added: list[str]
    removed: list[str]


class MemberEnrollmentResponse(BaseModel):
    activity_id: str
    activity_name: Optional[str] = None
    activity_type: Optional[str] = None
    role: str


class MemberHistoryItem(BaseModel):
    """A past event the member was enrolled in."""
    id: str
    name: str
    event_date: date


class EnrollmentIdsResponse(BaseModel):
    activity_ids: list[str]


class SetRoleRequest(BaseModel):
    member_id: str
    activity_id: str
    role: Optional[str] = None


class EnrollmentResponse(BaseModel):
    id: str
    member_id: str
    activity_id: str
    role: str

    model_config = ConfigDict(from_attributes=True)
