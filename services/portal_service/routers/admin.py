"""Admin-only endpoints: hard delete, mirror reconciliation, leaders and auth users."""

import asyncio
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.email import send_email
from libs.common.logging import get_logger
from libs.common.supabase import get_supabase_admin_client
from libs.db.session import get_async_db
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal_service.cascade import CascadeDeleteError, hard_delete_activity
from services.portal_service.mirror import (
    MirrorStore,
    find_ghosts,
    local_activity_ids,
    merge_activities,
    purge_activity,
    remove_user_permissions,
    upsert_permissions,
)
from services.portal_service.models import Activity, EnrollmentRole, Member
from services.portal_service.routers._helpers import (
    ensure_member_roles,
    find_member_by_email,
    get_member_or_404,
    upsert_enrollment,
)
from services.portal_service.schemas import (
    ActivityResponse,
    AuthUserCreatedResponse,
    BulkHardDeleteRequest,
    BulkHardDeleteResponse,
    CreateLeaderRequest,
    CreateLeaderResponse,
    CreateUserRequest,
    EnrollmentResponse,
    GhostsResponse,
    HardDeleteRequest,
    HardDeleteResponse,
    InviteMemberRequest,
    MirrorPermissionsRemoveRequest,
    MirrorPermissionsRequest,
    MirrorPurgeRequest,
    MirrorPurgeResponse,
    MirrorRequest,
    MirrorSyncResponse,
    SendMemberEmailRequest,
    SendMemberEmailResponse,
    UpdateRoleRequest,
)
from services.portal_service.storage import StorageService, get_file_storage

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])

MIN_PASSWORD_LENGTH = 8


def _user_id(response: Any) -> str | None:
    user = getattr(response, "user", None)
    return getattr(user, "id", None)


async def _db_activity_ids(db: AsyncSession) -> list[str]:
    result = await db.execute(select(Activity.id))
    return list(result.scalars().all())


# ============================================================================
# HARD DELETE
# ============================================================================


@router.post("/activities/hard-delete", response_model=HardDeleteResponse)
async def hard_delete(
    payload: HardDeleteRequest,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    storage: StorageService = Depends(get_file_storage),
):
    """
    Permanently delete an activity and its dependents. When a mirror snapshot
    is sent, the cleaned snapshot is returned.
    """
    store = MirrorStore(dict(payload.mirror)) if payload.mirror is not None else None
    try:
        result = await hard_delete_activity(db, payload.activity_id, storage, store)
    except CascadeDeleteError as exc:
        logger.error(
            "Hard delete failed",
            extra={
                "extra_fields": {
                    "activity_id": payload.activity_id,
                    "step": exc.step,
                    "error": exc.message,
                }
            },
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not delete {exc.step}: {exc.message}",
        )
    return HardDeleteResponse(
        activity_id=payload.activity_id,
        deleted=result["deleted"],
        files_removed=result["files_removed"],
        mirror=store.snapshot() if store is not None else None,
    )


@router.post("/activities/hard-delete/bulk", response_model=BulkHardDeleteResponse)
async def hard_delete_bulk(
    payload: BulkHardDeleteRequest,
    response: Response,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    storage: StorageService = Depends(get_file_storage),
):
    """Delete activities one after another, stopping at the first failure."""
    store = MirrorStore(dict(payload.mirror)) if payload.mirror is not None else None
    deleted: list[str] = []
    for activity_id in payload.activity_ids:
        try:
            await hard_delete_activity(db, activity_id, storage, store)
        except CascadeDeleteError as exc:
            response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
            return BulkHardDeleteResponse(
                ok=False,
                deleted=deleted,
                failed=activity_id,
                error=str(exc),
                mirror=store.snapshot() if store is not None else None,
            )
        deleted.append(activity_id)
    return BulkHardDeleteResponse(
        ok=True,
        deleted=deleted,
        mirror=store.snapshot() if store is not None else None,
    )


# ============================================================================
# MIRROR RECONCILIATION
# ============================================================================


@router.post("/mirror/ghosts", response_model=GhostsResponse)
async def mirror_ghosts(
    payload: MirrorRequest,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Compare a device's mirrored activities with the database."""
    store = MirrorStore(dict(payload.mirror))
    report = find_ghosts(local_activity_ids(store), await _db_activity_ids(db))
    return GhostsResponse(**report.model_dump())


@router.post("/mirror/purge", response_model=MirrorPurgeResponse)
async def mirror_purge(
    payload: MirrorPurgeRequest,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Remove local-only (ghost) activities from the snapshot: the selected
    ``activity_ids``, or every ghost when none are given. Selected ids that
    exist in the database are never purged.
    """
    store = MirrorStore(dict(payload.mirror))
    report = find_ghosts(local_activity_ids(store), await _db_activity_ids(db))
    targets = report.local_only
    if payload.activity_ids is not None:
        selected = set(payload.activity_ids)
        targets = [aid for aid in targets if aid in selected]
    for activity_id in targets:
        purge_activity(store, activity_id)
    return MirrorPurgeResponse(purged=targets, mirror=store.snapshot())


@router.post("/mirror/sync", response_model=MirrorSyncResponse)
async def mirror_sync(
    payload: MirrorRequest,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Overlay database activities onto the snapshot. Ghosts are kept."""
    store = MirrorStore(dict(payload.mirror))
    result = await db.execute(select(Activity).order_by(Activity.created_at.desc()))
    rows = [
        ActivityResponse.model_validate(a).model_dump(mode="json")
        for a in result.scalars().all()
    ]
    merged = merge_activities(store, rows)
    return MirrorSyncResponse(activities=len(merged), mirror=store.snapshot())


@router.post("/mirror/permissions", response_model=MirrorRequest)
async def mirror_upsert_permissions(
    payload: MirrorPermissionsRequest,
    current_user: AuthUser = Depends(require_admin),
):
    store = MirrorStore(dict(payload.mirror))
    upsert_permissions(store, payload.row.model_dump(by_alias=True))
    return MirrorRequest(mirror=store.snapshot())


@router.post("/mirror/permissions/remove", response_model=MirrorRequest)
async def mirror_remove_permissions(
    payload: MirrorPermissionsRemoveRequest,
    current_user: AuthUser = Depends(require_admin),
):
    store = MirrorStore(dict(payload.mirror))
    remove_user_permissions(store, payload.user_key)
    return MirrorRequest(mirror=store.snapshot())


# ============================================================================
# ROLES & LEADERS
# ============================================================================


@router.post("/enrollments/update-role", response_model=EnrollmentResponse)
async def update_enrollment_role(
    payload: UpdateRoleRequest,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    role = EnrollmentRole.normalize(payload.role).value
    enrollment, created = await upsert_enrollment(
        db, payload.member_id, payload.activity_id, role
    )
    await db.commit()
    await db.refresh(enrollment)
    logger.info(
        "Updated enrollment role",
        extra={
            "extra_fields": {
                "member_id": payload.member_id,
                "activity_id": payload.activity_id,
                "role": role,
                "created": created,
            }
        },
    )
    return enrollment


@router.post("/create-leader", response_model=CreateLeaderResponse)
async def create_leader(
    payload: CreateLeaderRequest,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Create or update a member by email and give them the leader role."""
    member = await find_member_by_email(db, payload.email)
    created = member is None
    if created:
        member = Member(email=payload.email.lower())
        db.add(member)

    for field in ("first_name", "last_name", "phone"):
        value = (getattr(payload, field) or "").strip()
        if value:
            setattr(member, field, value)
    await db.flush()

    roles = ["member", "leader"] + (["admin"] if payload.is_admin else [])
    all_roles = await ensure_member_roles(db, member.id, roles)
    await db.commit()
    return CreateLeaderResponse(member_id=member.id, created=created, roles=all_roles)


# ============================================================================
# AUTH USERS & EMAIL
# ============================================================================


@router.post("/invite-member", response_model=AuthUserCreatedResponse)
async def invite_member(
    payload: InviteMemberRequest,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    supabase=Depends(get_supabase_admin_client),
):
    """Send a Supabase invitation and link the auth user to the member row."""
    email = payload.email.lower()
    settings = get_settings()
    try:
        result = await asyncio.to_thread(
            supabase.auth.admin.invite_user_by_email,
            email,
            {"redirect_to": f"{settings.FRONTEND_URL}/login"},
        )
    except Exception as exc:
        logger.warning(
            "Invite failed", extra={"extra_fields": {"email": email, "error": str(exc)}}
        )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    user_id = _user_id(result)
    member = (
        await get_member_or_404(db, payload.member_id)
        if payload.member_id
        else await find_member_by_email(db, email)
    )
    if member is None:
        member = Member(
            email=email, first_name=payload.first_name, last_name=payload.last_name
        )
        db.add(member)
    if user_id and not member.auth_id:
        member.auth_id = user_id
    if not member.email:
        member.email = email
    await db.commit()

    return AuthUserCreatedResponse(
        user_id=user_id, email=email, mode="invite", member_id=member.id
    )


@router.post("/users", response_model=AuthUserCreatedResponse)
async def create_auth_user(
    payload: CreateUserRequest,
    current_user: AuthUser = Depends(require_admin),
    supabase=Depends(get_supabase_admin_client),
):
    """Invite a user, or create one with a password, carrying a portal role."""
    email = payload.email.lower()
    if payload.mode == "create" and len(payload.password or "") < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )

    metadata = {"role": payload.role}
    if payload.first_name:
        metadata["first_name"] = payload.first_name
    if payload.last_name:
        metadata["last_name"] = payload.last_name

    try:
        if payload.mode == "invite":
            result = await asyncio.to_thread(
                supabase.auth.admin.invite_user_by_email, email, {"data": metadata}
            )
        else:
            result = await asyncio.to_thread(
                supabase.auth.admin.create_user,
                {
                    "email": email,
                    "password": payload.password,
                    "email_confirm": True,
                    "user_metadata": metadata,
                    "app_metadata": {"roles": [payload.role]},
                },
            )
    except Exception as exc:
        logger.warning(
            "Auth user creation failed",
            extra={"extra_fields": {"email": email, "mode": payload.mode, "error": str(exc)}},
        )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    logger.info(
        "Auth user provisioned",
        extra={"extra_fields": {"email": email, "mode": payload.mode, "role": payload.role}},
    )
    return AuthUserCreatedResponse(user_id=_user_id(result), email=email, mode=payload.mode)


@router.post("/send-member-email", response_model=SendMemberEmailResponse)
async def send_member_email(
    payload: SendMemberEmailRequest,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Email a member (by id or address) through the configured SMTP server."""
    to_email = payload.to
    if not to_email and payload.member_id:
        member = await get_member_or_404(db, payload.member_id)
        to_email = member.email
    if not to_email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing email address for member",
        )

    if not get_settings().smtp_configured:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="SMTP is not configured",
        )

    sent = await send_email(
        to_email=to_email,
        subject=payload.subject.strip(),
        body=payload.body.strip(),
        html_body=payload.html,
    )
    if not sent:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Email could not be sent"
        )
    return SendMemberEmailResponse(ok=True, to=to_email)
