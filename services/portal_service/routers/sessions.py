"""Activity sessions and the per-member calendar projection."""

from datetime import timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal_service.mirror import MirrorStore, mirror_session
from services.portal_service.models import Activity, CalendarEntry, CalendarSource, Session
from services.portal_service.permissions import find_member_for_user
from services.portal_service.routers._helpers import (
    enrolled_member_ids,
    get_activity_or_404,
    get_or_404,
    unique_ids,
)
from services.portal_service.schemas import (
    CalendarEntryResponse,
    MirrorRequest,
    SessionCreate,
    SessionCreatedResponse,
    SessionDeletedResponse,
    SessionResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["sessions"])


@router.get("/activities/{activity_id}/sessions", response_model=List[SessionResponse])
async def list_sessions(
    activity_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    activity = await get_activity_or_404(db, activity_id)
    result = await db.execute(
        select(Session).where(Session.activity_id == activity.id).order_by(Session.start)
    )
    return result.scalars().all()


@router.post(
    "/activities/{activity_id}/sessions",
    response_model=SessionCreatedResponse,
    status_code=201,
)
async def create_session(
    activity_id: str,
    payload: SessionCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Create a session and put it in each target member's calendar.

    Targets default to everyone enrolled in the activity.
    """
    activity = await get_activity_or_404(db, activity_id)

    targets = unique_ids(payload.target_member_ids or [])
    if not targets:
        targets = await enrolled_member_ids(db, activity.id)
    if not targets:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No members to schedule: the activity has no enrollments",
        )

    end = payload.end or payload.start + timedelta(minutes=payload.duration_minutes)
    session = Session(
        activity_id=activity.id,
        title=payload.title,
        start=payload.start,
        end=end,
        location=payload.location,
        note=payload.note,
        target_member_ids=targets,
    )
    db.add(session)
    await db.flush()

    entry_title = f"{activity.name}: {payload.title}"
    for member_id in targets:
        db.add(
            CalendarEntry(
                member_id=member_id,
                title=entry_title,
                start=payload.start,
                end=end,
                source=CalendarSource.SESSION.value,
                activity_id=activity.id,
                session_id=session.id,
            )
        )
    await db.commit()
    await db.refresh(session)

    logger.info(
        "Created session",
        extra={
            "extra_fields": {
                "session_id": session.id,
                "activity_id": activity.id,
                "targets": len(targets),
            }
        },
    )
    response = SessionCreatedResponse.model_validate(session)
    response.calendar_entries = len(targets)
    return response


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_or_404(db, Session, session_id, "Session")


@router.delete("/sessions/{session_id}", response_model=SessionDeletedResponse)
async def delete_session(
    session_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete a session together with its calendar entries."""
    session = await get_or_404(db, Session, session_id, "Session")
    result = await db.execute(
        delete(CalendarEntry).where(CalendarEntry.session_id == session.id)
    )
    await db.delete(session)
    await db.commit()
    return SessionDeletedResponse(calendar_entries_removed=result.rowcount or 0)


@router.post("/sessions/{session_id}/mirror", response_model=MirrorRequest)
async def mirror_session_entry(
    session_id: str,
    payload: MirrorRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Record the session and its calendar items in a device mirror."""
    session = await get_or_404(db, Session, session_id, "Session")
    activity = await db.get(Activity, session.activity_id)
    store = MirrorStore(dict(payload.mirror))
    mirror_session(
        store,
        SessionResponse.model_validate(session).model_dump(mode="json"),
        activity.name if activity else "",
    )
    return MirrorRequest(mirror=store.snapshot())


@router.get("/calendar", response_model=List[CalendarEntryResponse])
async def list_calendar(
    member_id: Optional[str] = Query(None, description="Defaults to the signed-in member"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    if member_id is None:
        member = await find_member_for_user(db, current_user)
        if member is None:
            return []
        member_id = member.id
    result = await db.execute(
        select(CalendarEntry)
        .where(CalendarEntry.member_id == member_id)
        .order_by(CalendarEntry.start)
    )
    return result.scalars().all()
