"""Dashboard endpoints: link the signed-in user to a member and list their activities."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal_service.mirror import MirrorStore, permissions_for
from services.portal_service.models import Activity, Enrollment, EnrollmentRole, Member
from services.portal_service.permissions import (
    LEVEL_ORDER,
    MODULE_KEYS,
    find_member_for_user,
    level_gte,
    module_level,
)
from services.portal_service.routers._helpers import (
    ensure_member_roles,
    find_member_by_email,
    unique_ids,
    upsert_enrollment,
)
from services.portal_service.schemas import (
    EnsureMemberRequest,
    EnsureMemberResponse,
    MirrorRequest,
    ModulePermissions,
    MyActivitiesResponse,
    MyActivity,
    SyncEnrollmentsRequest,
    SyncEnrollmentsResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def split_name(display_name: Optional[str]) -> tuple[str, str]:
    parts = (display_name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


async def find_members_by_name(db: AsyncSession, first: str, last: str) -> list[Member]:
    query = select(Member).where(func.lower(Member.first_name) == first.lower())
    if last:
        query = query.where(func.lower(Member.last_name) == last.lower())
    result = await db.execute(query.order_by(Member.created_at.desc()).limit(5))
    return list(result.scalars().all())


async def _has_enrollment_in(db: AsyncSession, member_id: str, activity_ids: list[str]) -> bool:
    result = await db.execute(
        select(Enrollment.id)
        .where(Enrollment.member_id == member_id, Enrollment.activity_id.in_(activity_ids))
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


def _claim(member: Member, user: AuthUser) -> None:
    """Attach the auth user's email and id to a matched member."""
    if user.email and (member.email or "").lower() != user.email.lower():
        member.email = user.email.lower()
    if not member.auth_id:
        member.auth_id = user.user_id


@router.post("/ensure-member", response_model=EnsureMemberResponse)
async def ensure_member(
    payload: EnsureMemberRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Find the member row for the signed-in user, creating one if needed.

    Tried in order: email (case-insensitive), display name (preferring a
    candidate already enrolled in one of the candidate activities), any
    enrollment in the candidate activities, and finally a new member.
    """
    if not current_user.email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Missing email"
        )
    candidates = unique_ids(payload.candidate_activity_ids)

    member = await find_member_by_email(db, current_user.email)
    if member is not None:
        if not member.auth_id:
            member.auth_id = current_user.user_id
            await db.commit()
        return EnsureMemberResponse(member_id=member.id, matched="email")

    first, last = split_name(payload.display_name or current_user.display_name)
    if first:
        by_name = await find_members_by_name(db, first, last)
        if by_name:
            chosen = by_name[0]
            if candidates:
                for candidate in by_name:
                    if await _has_enrollment_in(db, candidate.id, candidates):
                        chosen = candidate
                        break
            _claim(chosen, current_user)
            await db.commit()
            return EnsureMemberResponse(member_id=chosen.id, matched="name")

    if candidates:
        result = await db.execute(
            select(Member)
            .join(Enrollment, Enrollment.member_id == Member.id)
            .where(Enrollment.activity_id.in_(candidates))
            .limit(1)
        )
        member = result.scalars().first()
        if member is not None:
            _claim(member, current_user)
            await db.commit()
            return EnsureMemberResponse(member_id=member.id, matched="enrollment")

    member = Member(
        email=current_user.email.lower(),
        auth_id=current_user.user_id,
        first_name=first or None,
        last_name=last or None,
    )
    db.add(member)
    await db.flush()
    await ensure_member_roles(db, member.id, ["member"])
    await db.commit()
    logger.info(
        "Created member for signed-in user",
        extra={"extra_fields": {"member_id": member.id}},
    )
    return EnsureMemberResponse(member_id=member.id, matched="created")


@router.get("/my-activities", response_model=MyActivitiesResponse)
async def my_activities(
    candidates: Optional[str] = Query(None, description="Comma separated activity ids"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Activities shown on the dashboard: everything for admins, otherwise the
    ones the member is enrolled in. Falls back to the candidate ids when the
    user cannot be matched to enrollments.
    """
    if current_user.is_admin:
        result = await db.execute(
            select(Activity).where(Activity.archived.is_(False)).order_by(Activity.name)
        )
        return MyActivitiesResponse(
            is_admin=True,
            activities=[
                MyActivity(id=a.id, name=a.name, type=a.type, role="admin")
                for a in result.scalars().all()
            ],
        )

    member = await find_member_for_user(db, current_user)
    if member is None:
        first, last = split_name(current_user.display_name)
        if first:
            matches = await find_members_by_name(db, first, last)
            member = matches[0] if matches else None

    if member is not None:
        result = await db.execute(
            select(Activity, Enrollment.role)
            .join(Enrollment, Enrollment.activity_id == Activity.id)
            .where(Enrollment.member_id == member.id, Activity.archived.is_(False))
            .order_by(Activity.name)
        )
        rows = result.all()
        if rows:
            return MyActivitiesResponse(
                is_admin=False,
                member_id=member.id,
                activities=[
                    MyActivity(id=a.id, name=a.name, type=a.type, role=role)
                    for a, role in rows
                ],
            )

    candidate_ids = unique_ids((candidates or "").split(","))
    activities = []
    if candidate_ids:
        result = await db.execute(
            select(Activity).where(Activity.id.in_(candidate_ids)).order_by(Activity.name)
        )
        activities = [
            MyActivity(id=a.id, name=a.name, type=a.type) for a in result.scalars().all()
        ]
    return MyActivitiesResponse(
        is_admin=False,
        member_id=member.id if member else None,
        activities=activities,
    )


@router.post("/sync-enrollments", response_model=SyncEnrollmentsResponse)
async def sync_enrollments(
    payload: SyncEnrollmentsRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Find or create the member by email and upsert one role across activities."""
    member = await find_member_by_email(db, payload.email)
    if member is None:
        member = Member(
            email=payload.email.lower(),
            first_name=payload.first_name,
            last_name=payload.last_name,
        )
        db.add(member)
        await db.flush()
        await ensure_member_roles(db, member.id, ["member"])

    role = EnrollmentRole.normalize(payload.role).value
    created = updated = 0
    for activity_id in unique_ids(payload.activity_ids):
        _, was_created = await upsert_enrollment(db, member.id, activity_id, role)
        if was_created:
            created += 1
        else:
            updated += 1
    await db.commit()
    return SyncEnrollmentsResponse(member_id=member.id, created=created, updated=updated)


@router.post("/permissions", response_model=ModulePermissions)
async def my_permissions(
    payload: MirrorRequest,
    current_user: AuthUser = Depends(get_current_user),
):
    """
    Module levels for the signed-in user. A record saved on the device (by
    user id or email) overrides the token's levels, except for admins.
    """
    modules = {key: module_level(current_user, key) for key in MODULE_KEYS}
    if not current_user.is_admin:
        store = MirrorStore(dict(payload.mirror))
        record = permissions_for(store, current_user.user_id) or permissions_for(
            store, current_user.email
        )
        saved = (record or {}).get("modules") or {}
        if isinstance(saved, dict):
            for key, level in saved.items():
                if key in modules and level in LEVEL_ORDER:
                    modules[key] = level
    visible = [key for key in MODULE_KEYS if level_gte(modules[key], "view")]
    return ModulePermissions(modules=modules, visible=visible)
