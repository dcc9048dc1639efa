"""Portal service schemas package."""

from services.portal_service.schemas.activity import (
    ActivityBase,
    ActivityCreate,
    ActivityResponse,
    ActivityRoleResponse,
    ActivityUpdate,
    CalendarEntryResponse,
    ParticipantResponse,
    SessionCreate,
    SessionCreatedResponse,
    SessionResponse,
)
from services.portal_service.schemas.admin import (
    AuthUserCreatedResponse,
    BulkHardDeleteRequest,
    BulkHardDeleteResponse,
    CreateLeaderRequest,
    CreateLeaderResponse,
    CreateUserRequest,
    EnsureMemberRequest,
    EnsureMemberResponse,
    ForgotPasswordRequest,
    GhostsResponse,
    HardDeleteRequest,
    HardDeleteResponse,
    InviteMemberRequest,
    MessageOnlyResponse,
    MirrorPermissionsRemoveRequest,
    MirrorPermissionsRequest,
    MirrorPurgeRequest,
    MirrorPurgeResponse,
    MirrorRequest,
    MirrorSyncResponse,
    ModulePermissions,
    MyActivitiesResponse,
    MyActivity,
    PermissionRow,
    ResetPasswordRequest,
    SendMemberEmailRequest,
    SendMemberEmailResponse,
    SyncEnrollmentsRequest,
    SyncEnrollmentsResponse,
    UpdateRoleRequest,
)
from services.portal_service.schemas.common import (
    ArchivedResponse,
    BlankAsNoneModel,
    OkResponse,
    SessionDeletedResponse,
)
from services.portal_service.schemas.content import (
    ActivityFile,
    ActivityFileList,
    ActivityFileUpdate,
    MessageCreate,
    MessageResponse,
    SignedUrlResponse,
)
from services.portal_service.schemas.member import (
    AvatarResponse,
    EnrollmentDiffResponse,
    EnrollmentIdsResponse,
    EnrollmentResponse,
    EnrollmentSetRequest,
    MemberBase,
    MemberCreate,
    MemberCreatedResponse,
    MemberEnrollmentResponse,
    MemberHistoryItem,
    MemberResponse,
    MemberUpdate,
    SetRoleRequest,
)
from services.portal_service.schemas.participation import (
    GuestChildCreate,
    GuestChildResponse,
    GuestChildUpdate,
    GuestCreate,
    GuestResponse,
    GuestUpdate,
    MemberSummary,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
    VolunteerCreate,
    VolunteerResponse,
    VolunteerUpdate,
)

__all__ = [
    "ActivityBase",
    "ActivityCreate",
    "ActivityFile",
    "ActivityFileList",
    "ActivityFileUpdate",
    "ActivityResponse",
    "ActivityRoleResponse",
    "ActivityUpdate",
    "ArchivedResponse",
    "AuthUserCreatedResponse",
    "AvatarResponse",
    "BlankAsNoneModel",
    "BulkHardDeleteRequest",
    "BulkHardDeleteResponse",
    "CalendarEntryResponse",
    "CreateLeaderRequest",
    "CreateLeaderResponse",
    "CreateUserRequest",
    "EnrollmentDiffResponse",
    "EnrollmentIdsResponse",
    "EnrollmentResponse",
    "EnrollmentSetRequest",
    "EnsureMemberRequest",
    "EnsureMemberResponse",
    "ForgotPasswordRequest",
    "GhostsResponse",
    "GuestChildCreate",
    "GuestChildResponse",
    "GuestChildUpdate",
    "GuestCreate",
    "GuestResponse",
    "GuestUpdate",
    "HardDeleteRequest",
    "HardDeleteResponse",
    "InviteMemberRequest",
    "MemberBase",
    "MemberCreate",
    "MemberCreatedResponse",
    "MemberEnrollmentResponse",
    "MemberHistoryItem",
    "MemberResponse",
    "MemberSummary",
    "MemberUpdate",
    "MessageCreate",
    "MessageOnlyResponse",
    "MessageResponse",
    "MirrorPermissionsRemoveRequest",
    "MirrorPermissionsRequest",
    "MirrorPurgeRequest",
    "MirrorPurgeResponse",
    "MirrorRequest",
    "MirrorSyncResponse",
    "ModulePermissions",
    "MyActivitiesResponse",
    "MyActivity",
    "OkResponse",
    "ParticipantResponse",
    "PermissionRow",
    "ResetPasswordRequest",
    "SendMemberEmailRequest",
    "SendMemberEmailResponse",
    "SessionCreate",
    "SessionCreatedResponse",
    "SessionDeletedResponse",
    "SessionResponse",
    "SetRoleRequest",
    "SignedUrlResponse",
    "SyncEnrollmentsRequest",
    "SyncEnrollmentsResponse",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    "UpdateRoleRequest",
    "VolunteerCreate",
    "VolunteerResponse",
    "VolunteerUpdate",
]
