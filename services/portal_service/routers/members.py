"""Member endpoints: registry, enrollments, history, calendar and avatar."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.datetime_utils import local_today
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal_service.models import (
    Activity,
    ActivityType,
    CalendarEntry,
    Enrollment,
    EnrollmentRole,
    Member,
    MemberRoleName,
)
from services.portal_service.routers._helpers import (
    close_history,
    ensure_member_roles,
    find_member_by_email,
    get_member_or_404,
    open_history,
    require_changes,
    unique_ids,
)
from services.portal_service.schemas import (
    ArchivedResponse,
    AvatarResponse,
    CalendarEntryResponse,
    EnrollmentDiffResponse,
    EnrollmentSetRequest,
    MemberCreate,
    MemberCreatedResponse,
    MemberEnrollmentResponse,
    MemberHistoryItem,
    MemberResponse,
    MemberUpdate,
)
from services.portal_service.storage import StorageService, get_file_storage

logger = get_logger(__name__)

router = APIRouter(prefix="/api/members", tags=["members"])

MAX_AVATAR_BYTES = 5 * 1024 * 1024


async def _email_taken(db: AsyncSession, email: Optional[str], exclude_id: Optional[str] = None) -> bool:
    existing = await find_member_by_email(db, email)
    return existing is not None and existing.id != exclude_id


@router.get("/", response_model=List[MemberResponse])
async def list_members(
    archived: bool = Query(False, description="List archived members instead"),
    email: Optional[str] = Query(None, description="Exact email, case-insensitive"),
    limit: int = Query(500, ge=1, le=2000),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(Member).where(Member.archived.is_(archived))
    if email:
        query = query.where(func.lower(Member.email) == email.strip().lower())
    query = query.order_by(Member.first_name, Member.last_name).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


@router.post("/", response_model=MemberCreatedResponse, status_code=201)
async def create_member(
    payload: MemberCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Register a member and enroll them in the given activities in one go."""
    if await _email_taken(db, payload.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A member with this email already exists",
        )

    data = payload.model_dump(exclude={"activities"})
    if data.get("email"):
        data["email"] = data["email"].lower()
    member = Member(**data)
    db.add(member)
    await db.flush()

    await ensure_member_roles(db, member.id, [MemberRoleName.MEMBER.value])
    enrolled = unique_ids(payload.activities)
    for activity_id in enrolled:
        db.add(
            Enrollment(
                member_id=member.id,
                activity_id=activity_id,
                role=EnrollmentRole.PARTICIPANT.value,
            )
        )
        open_history(db, member.id, activity_id)

    await db.commit()
    await db.refresh(member)
    logger.info(
        "Created member",
        extra={"extra_fields": {"member_id": member.id, "enrolled": len(enrolled)}},
    )
    response = MemberCreatedResponse.model_validate(member)
    response.enrolled = enrolled
    return response


@router.get("/{member_id}", response_model=MemberResponse)
async def get_member(
    member_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_member_or_404(db, member_id)


@router.patch("/{member_id}", response_model=MemberResponse)
async def update_member(
    member_id: str,
    payload: MemberUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    member = await get_member_or_404(db, member_id)
    data = require_changes(payload.model_dump(exclude_unset=True))

    if data.get("email"):
        data["email"] = data["email"].lower()
        if await _email_taken(db, data["email"], exclude_id=member.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A member with this email already exists",
            )
    if data.get("archived") is None:
        data.pop("archived", None)

    for field, value in data.items():
        setattr(member, field, value)
    await db.commit()
    await db.refresh(member)
    return member


@router.delete("/{member_id}", response_model=ArchivedResponse)
async def archive_member(
    member_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Archive a member. Members are never hard deleted."""
    member = await get_member_or_404(db, member_id)
    member.archived = True
    await db.commit()
    return ArchivedResponse(id=member.id)


@router.put("/{member_id}/enrollments", response_model=EnrollmentDiffResponse)
async def set_member_enrollments(
    member_id: str,
    payload: EnrollmentSetRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Make the member's enrollments equal to ``activity_ids``.

    New enrollments open a history span starting today; removed ones close
    the open span with today's date. Roles of kept enrollments are untouched.
    """
    member = await get_member_or_404(db, member_id)
    result = await db.execute(
        select(Enrollment.activity_id).where(Enrollment.member_id == member.id)
    )
    current = set(result.scalars().all())
    desired = set(unique_ids(payload.activity_ids))

    added = sorted(desired - current)
    removed = sorted(current - desired)

    for activity_id in added:
        db.add(
            Enrollment(
                member_id=member.id,
                activity_id=activity_id,
                role=EnrollmentRole.PARTICIPANT.value,
            )
        )
        open_history(db, member.id, activity_id)

    if removed:
        await db.execute(
            delete(Enrollment).where(
                Enrollment.member_id == member.id,
                Enrollment.activity_id.in_(removed),
            )
        )
        for activity_id in removed:
            await close_history(db, member.id, activity_id)

    await db.commit()
    logger.info(
        "Updated member enrollments",
        extra={
            "extra_fields": {
                "member_id": member.id,
                "added": len(added),
                "removed": len(removed),
            }
        },
    )
    return EnrollmentDiffResponse(added=added, removed=removed)


@router.get("/{member_id}/enrollments", response_model=List[MemberEnrollmentResponse])
async def list_member_enrollments(
    member_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(Enrollment, Activity)
        .outerjoin(Activity, Activity.id == Enrollment.activity_id)
        .where(Enrollment.member_id == member_id)
        .order_by(Activity.name)
    )
    return [
        MemberEnrollmentResponse(
            activity_id=enrollment.activity_id,
            activity_name=activity.name if activity else None,
            activity_type=activity.type if activity else None,
            role=enrollment.role,
        )
        for enrollment, activity in result.all()
    ]


@router.get("/{member_id}/history", response_model=List[MemberHistoryItem])
async def member_history(
    member_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Past events the member was enrolled in, newest first."""
    result = await db.execute(
        select(Activity)
        .join(Enrollment, Enrollment.activity_id == Activity.id)
        .where(
            Enrollment.member_id == member_id,
            Activity.type == ActivityType.EVENT.value,
            Activity.event_date.is_not(None),
            Activity.event_date <= local_today(),
        )
        .order_by(Activity.event_date.desc())
    )
    return [
        MemberHistoryItem(id=a.id, name=a.name, event_date=a.event_date)
        for a in result.scalars().unique()
    ]


@router.get("/{member_id}/calendar", response_model=List[CalendarEntryResponse])
async def member_calendar(
    member_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(CalendarEntry)
        .where(CalendarEntry.member_id == member_id)
        .order_by(CalendarEntry.start)
    )
    return result.scalars().all()


@router.post("/{member_id}/avatar", response_model=AvatarResponse)
async def upload_avatar(
    member_id: str,
    file: UploadFile = File(...),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    storage: StorageService = Depends(get_file_storage),
):
    """Store a downscaled profile photo and link its public URL to the member."""
    member = await get_member_or_404(db, member_id)
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Avatar must be an image",
        )
    data = await file.read()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty file")
    if len(data) > MAX_AVATAR_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Avatar is too large"
        )

    thumbnail = storage.create_thumbnail(data)
    if thumbnail is data:
        content_type, ext = file.content_type, (file.filename or "img").rsplit(".", 1)[-1]
    else:
        content_type, ext = "image/jpeg", "jpg"

    bucket = get_settings().PROFILE_PHOTOS_BUCKET
    path = f"{member.id}/avatar.{ext.lower()}"
    try:
        await storage.ensure_bucket(bucket, public=True)
        await storage.upload(bucket, path, thumbnail, content_type=content_type, upsert=True)
        url = await storage.public_url(bucket, path)
    except Exception as exc:
        logger.error(
            "Avatar upload failed",
            extra={"extra_fields": {"member_id": member.id, "error": str(exc)}},
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not store avatar"
        )

    member.avatar_url = url
    await db.commit()
    return AvatarResponse(avatar_url=url)
