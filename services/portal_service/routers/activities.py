"""Activity endpoints: listing, lookup by any identifier, archive, participants."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal_service.mirror import MirrorStore, mirror_saved_activity
from services.portal_service.models import Activity, ActivityType, Enrollment, Member
from services.portal_service.permissions import activity_role
from services.portal_service.routers._helpers import (
    display_name,
    get_activity_or_404,
    plain_values,
    require_changes,
)
from services.portal_service.schemas import (
    ActivityCreate,
    ActivityResponse,
    ActivityRoleResponse,
    ActivityUpdate,
    MirrorRequest,
    ParticipantResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/activities", tags=["activities"])

REQUIRED_FIELDS = {
    "name",
    "type",
    "has_guests",
    "has_attendance",
    "has_volunteers",
    "has_tasks",
    "archived",
}


@router.get("/", response_model=List[ActivityResponse])
async def list_activities(
    include_archived: bool = Query(False),
    type: Optional[ActivityType] = Query(None, description="offer or event"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(Activity)
    if not include_archived:
        query = query.where(Activity.archived.is_(False))
    if type is not None:
        query = query.where(Activity.type == type.value)
    result = await db.execute(query.order_by(Activity.created_at.desc()))
    return result.scalars().all()


@router.post("/", response_model=ActivityResponse, status_code=201)
async def create_activity(
    payload: ActivityCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    activity = Activity(**plain_values(payload.model_dump()))
    db.add(activity)
    await db.commit()
    await db.refresh(activity)
    logger.info(
        "Created activity",
        extra={"extra_fields": {"activity_id": activity.id, "type": activity.type}},
    )
    return activity


@router.get("/{identifier}", response_model=ActivityResponse)
async def get_activity(
    identifier: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_activity_or_404(db, identifier)


@router.patch("/{identifier}", response_model=ActivityResponse)
async def update_activity(
    identifier: str,
    payload: ActivityUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    activity = await get_activity_or_404(db, identifier)
    data = require_changes(plain_values(payload.model_dump(exclude_unset=True)))
    for field, value in data.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(activity, field, value)
    await db.commit()
    await db.refresh(activity)
    return activity


@router.delete("/{identifier}", response_model=ActivityResponse)
async def archive_activity(
    identifier: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Archive (soft delete). Permanent removal lives under /api/admin."""
    activity = await get_activity_or_404(db, identifier)
    activity.archived = True
    await db.commit()
    await db.refresh(activity)
    return activity


@router.get("/{activity_id}/participants", response_model=List[ParticipantResponse])
async def list_participants(
    activity_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Non-archived members enrolled in the activity."""
    result = await db.execute(
        select(Member)
        .join(Enrollment, Enrollment.member_id == Member.id)
        .where(Enrollment.activity_id == activity_id, Member.archived.is_(False))
        .order_by(Member.first_name, Member.last_name)
    )
    return [
        ParticipantResponse(id=m.id, name=display_name(m)) for m in result.scalars().unique()
    ]


@router.get("/{activity_id}/role", response_model=ActivityRoleResponse)
async def my_activity_role(
    activity_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    role = await activity_role(db, current_user, activity_id)
    return ActivityRoleResponse(
        activity_id=activity_id, role=role, can_edit=role in ("admin", "leader")
    )


@router.post("/{identifier}/mirror", response_model=MirrorRequest)
async def mirror_activity(
    identifier: str,
    payload: MirrorRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Place the saved activity at the head of a device mirror."""
    activity = await get_activity_or_404(db, identifier)
    store = MirrorStore(dict(payload.mirror))
    row = ActivityResponse.model_validate(activity).model_dump(mode="json")
    mirror_saved_activity(store, row)
    return MirrorRequest(mirror=store.snapshot())
