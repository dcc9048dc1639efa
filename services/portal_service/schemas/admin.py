"""Request/response schemas for dashboard, admin and auth endpoints."""
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

# non-blank, surrounding whitespace stripped
ActivityId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


class EnsureMemberRequest(BaseModel):
    # defaults to the name on the auth user
    display_name: Optional[str] = None
    # activities to try when neither email nor name matches
    candidate_activity_ids: list[str] = []


class EnsureMemberResponse(BaseModel):
    member_id: str
    matched: Literal["email", "name", "enrollment", "created"]


class MyActivity(BaseModel):
    id: str
    name: str
    type: str
    role: Optional[str] = None


class MyActivitiesResponse(BaseModel):
    is_admin: bool
    member_id: Optional[str] = None
    activities: list[MyActivity]


class SyncEnrollmentsRequest(BaseModel):
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    activity_ids: list[str]
    role: Optional[str] = None


class SyncEnrollmentsResponse(BaseModel):
    member_id: str
    created: int
    updated: int


class ModulePermissions(BaseModel):
    modules: dict[str, str]
    # modules shown in navigation (level view or higher)
    visible: list[str] = []


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


class HardDeleteRequest(BaseModel):
    activity_id: ActivityId
    # device mirror snapshot to clean alongside the database
    mirror: Optional[dict[str, str]] = None


class HardDeleteResponse(BaseModel):
    ok: bool = True
    activity_id: str
    deleted: dict[str, int]
    files_removed: int = 0
    mirror: Optional[dict[str, str]] = None


class BulkHardDeleteRequest(BaseModel):
    activity_ids: list[ActivityId] = Field(min_length=1)
    mirror: Optional[dict[str, str]] = None


class BulkHardDeleteResponse(BaseModel):
    ok: bool
    deleted: list[str]
    failed: Optional[str] = None
    error: Optional[str] = None
    mirror: Optional[dict[str, str]] = None


class MirrorRequest(BaseModel):
    mirror: dict[str, str] = {}


class GhostsResponse(BaseModel):
    local_only: list[str]
    db_only: list[str]
    local_count: int
    db_count: int


class MirrorPurgeRequest(BaseModel):
    mirror: dict[str, str] = {}
    # ghosts to remove; all of them when omitted
    activity_ids: Optional[list[str]] = None


class MirrorPurgeResponse(BaseModel):
    purged: list[str]
    mirror: dict[str, str]


class MirrorSyncResponse(BaseModel):
    activities: int
    mirror: dict[str, str]


class UpdateRoleRequest(BaseModel):
    member_id: str
    activity_id: str
    role: str


class CreateLeaderRequest(BaseModel):
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    is_admin: bool = False


class CreateLeaderResponse(BaseModel):
    member_id: str
    created: bool
    roles: list[str]


class InviteMemberRequest(BaseModel):
    email: EmailStr
    member_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class CreateUserRequest(BaseModel):
    email: EmailStr
    mode: Literal["invite", "create"] = "invite"
    password: Optional[str] = None
    role: Literal["admin", "staff", "user"] = "user"
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class AuthUserCreatedResponse(BaseModel):
    ok: bool = True
    user_id: Optional[str] = None
    email: str
    mode: Optional[str] = None
    member_id: Optional[str] = None


class SendMemberEmailRequest(BaseModel):
    member_id: Optional[str] = None
    to: Optional[EmailStr] = None
    subject: str = Field(min_length=1)
    body: str = Field(min_length=1)
    html: Optional[str] = None


class SendMemberEmailResponse(BaseModel):
    ok: bool
    to: str


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    access_token: str
    password: str


class MessageOnlyResponse(BaseModel):
    ok: bool = True
    message: str


# ---------------------------------------------------------------------------
# Mirrored permissions
# ---------------------------------------------------------------------------


class PermissionRow(BaseModel):
    """Per-user grants as stored on the device (camelCase keys)."""

    model_config = ConfigDict(populate_by_name=True)

    user_key: str = Field(alias="userKey")
    modules: dict[str, str] = {}
    programs: dict[str, str] = {}


class MirrorPermissionsRequest(BaseModel):
    mirror: dict[str, str] = {}
    row: PermissionRow


class MirrorPermissionsRemoveRequest(BaseModel):
    mirror: dict[str, str] = {}
    user_key: str
