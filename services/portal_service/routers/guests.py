"""Guest lists for activities, with the children each guest brings."""

from collections import defaultdict
from typing import List

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.db.session import get_async_db
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal_service.models import ActivityGuest, ActivityGuestChild
from services.portal_service.routers._helpers import get_or_404, require_changes
from services.portal_service.schemas import (
    GuestChildCreate,
    GuestChildResponse,
    GuestChildUpdate,
    GuestCreate,
    GuestResponse,
    GuestUpdate,
    OkResponse,
)

router = APIRouter(prefix="/api/activity-guests", tags=["guests"])
children_router = APIRouter(prefix="/api/activity-guest-children", tags=["guests"])

REQUIRED_FIELDS = {"first_name", "last_name", "phone", "is_norwegian"}


def _with_children(guest: ActivityGuest, children: list) -> GuestResponse:
    response = GuestResponse.model_validate(guest)
    response.children = [GuestChildResponse.model_validate(c) for c in children]
    return response


@router.get("/", response_model=List[GuestResponse])
async def list_guests(
    activity_id: str = Query(...),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(ActivityGuest)
        .where(ActivityGuest.activity_id == activity_id)
        .order_by(ActivityGuest.last_name, ActivityGuest.first_name)
    )
    guests = result.scalars().all()

    children_by_guest = defaultdict(list)
    if guests:
        result = await db.execute(
            select(ActivityGuestChild)
            .where(ActivityGuestChild.guest_id.in_([g.id for g in guests]))
            .order_by(ActivityGuestChild.created_at)
        )
        for child in result.scalars().all():
            children_by_guest[child.guest_id].append(child)

    return [_with_children(g, children_by_guest[g.id]) for g in guests]


@router.post("/", response_model=GuestResponse, status_code=201)
async def create_guest(
    payload: GuestCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    guest = ActivityGuest(**payload.model_dump())
    db.add(guest)
    await db.commit()
    await db.refresh(guest)
    return _with_children(guest, [])


@router.patch("/{guest_id}", response_model=GuestResponse)
async def update_guest(
    guest_id: str,
    payload: GuestUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Update a guest. Checking a guest in stamps ``present_marked_at``;
    unchecking clears it.
    """
    guest = await get_or_404(db, ActivityGuest, guest_id, "Guest")
    data = payload.model_dump(exclude_unset=True)
    data = {k: v for k, v in data.items() if v is not None or k not in REQUIRED_FIELDS}
    if "present" in data and data["present"] is None:
        data["present"] = False
    require_changes(data)

    if "present" in data:
        if data["present"] and not guest.present:
            guest.present_marked_at = utc_now()
        elif not data["present"]:
            guest.present_marked_at = None

    for field, value in data.items():
        setattr(guest, field, value)
    await db.commit()
    await db.refresh(guest)

    result = await db.execute(
        select(ActivityGuestChild).where(ActivityGuestChild.guest_id == guest.id)
    )
    return _with_children(guest, result.scalars().all())


@router.delete("/{guest_id}", response_model=OkResponse)
async def delete_guest(
    guest_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    guest = await get_or_404(db, ActivityGuest, guest_id, "Guest")
    await db.execute(delete(ActivityGuestChild).where(ActivityGuestChild.guest_id == guest.id))
    await db.delete(guest)
    await db.commit()
    return OkResponse()


@router.post("/{guest_id}/children", response_model=GuestChildResponse, status_code=201)
async def add_child(
    guest_id: str,
    payload: GuestChildCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    guest = await get_or_404(db, ActivityGuest, guest_id, "Guest")
    child = ActivityGuestChild(guest_id=guest.id, **payload.model_dump())
    db.add(child)
    await db.commit()
    await db.refresh(child)
    return child


@children_router.patch("/{child_id}", response_model=GuestChildResponse)
async def update_child(
    child_id: str,
    payload: GuestChildUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    child = await get_or_404(db, ActivityGuestChild, child_id, "Child")
    data = require_changes(payload.model_dump(exclude_unset=True))
    for field, value in data.items():
        setattr(child, field, value)
    await db.commit()
    await db.refresh(child)
    return child


@children_router.delete("/{child_id}", response_model=OkResponse)
async def delete_child(
    child_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    child = await get_or_404(db, ActivityGuestChild, child_id, "Child")
    await db.delete(child)
    await db.commit()
    return OkResponse()
