"""Shared helper functions for portal routers."""

import enum
from typing import Any, Iterable, Optional

from fastapi import HTTPException, status
from libs.common.datetime_utils import local_today
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal_service.models import (
    Activity,
    Enrollment,
    Member,
    MemberActivityHistory,
    MemberRole,
)

NO_NAME = "Uten navn"


def plain_values(data: dict[str, Any]) -> dict[str, Any]:
    """Enum members to their stored values."""
    return {k: (v.value if isinstance(v, enum.Enum) else v) for k, v in data.items()}


def unique_ids(ids: Iterable[Optional[str]]) -> list[str]:
    """Non-empty ids, first occurrence order."""
    return list(dict.fromkeys(str(i) for i in ids if i))


def display_name(member: Optional[Member]) -> str:
    if member is None:
        return NO_NAME
    return member.full_name or NO_NAME


def require_changes(data: dict) -> dict:
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid fields to update",
        )
    return data


async def find_activity(db: AsyncSession, identifier: str) -> Optional[Activity]:
    """Resolve an activity by id, then code, slug and legacy id."""
    for column in (Activity.id, Activity.code, Activity.slug, Activity.legacy_id):
        result = await db.execute(select(Activity).where(column == identifier).limit(1))
        activity = result.scalar_one_or_none()
        if activity is not None:
            return activity
    return None


async def get_activity_or_404(db: AsyncSession, identifier: str) -> Activity:
    activity = await find_activity(db, identifier)
    if activity is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found"
        )
    return activity


async def get_member_or_404(db: AsyncSession, member_id: str) -> Member:
    member = await db.get(Member, member_id)
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Member not found"
        )
    return member


async def get_or_404(db: AsyncSession, model, obj_id: str, label: str):
    obj = await db.get(model, obj_id)
    if obj is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found"
        )
    return obj


async def find_member_by_email(db: AsyncSession, email: Optional[str]) -> Optional[Member]:
    if not email:
        return None
    result = await db.execute(
        select(Member).where(func.lower(Member.email) == email.strip().lower()).limit(1)
    )
    return result.scalar_one_or_none()


async def members_by_id(db: AsyncSession, ids: Iterable[Optional[str]]) -> dict[str, Member]:
    wanted = unique_ids(ids)
    if not wanted:
        return {}
    result = await db.execute(select(Member).where(Member.id.in_(wanted)))
    return {m.id: m for m in result.scalars().all()}


async def enrolled_member_ids(db: AsyncSession, activity_id: str) -> list[str]:
    result = await db.execute(
        select(Enrollment.member_id)
        .where(Enrollment.activity_id == activity_id)
        .order_by(Enrollment.created_at)
    )
    return unique_ids(result.scalars().all())


async def ensure_member_roles(db: AsyncSession, member_id: str, roles: Iterable[str]) -> list[str]:
    """Add missing role rows; returns every role the member now has."""
    result = await db.execute(select(MemberRole.role).where(MemberRole.member_id == member_id))
    existing = set(result.scalars().all())
    for role in roles:
        if role not in existing:
            db.add(MemberRole(member_id=member_id, role=role))
            existing.add(role)
    return sorted(existing)


async def upsert_enrollment(
    db: AsyncSession, member_id: str, activity_id: str, role: str
) -> tuple[Enrollment, bool]:
    """Insert or update the (member, activity) enrollment. Returns (row, created)."""
    result = await db.execute(
        select(Enrollment).where(
            Enrollment.member_id == member_id,
            Enrollment.activity_id == activity_id,
        )
    )
    enrollment = result.scalar_one_or_none()
    if enrollment is not None:
        enrollment.role = role
        return enrollment, False
    enrollment = Enrollment(member_id=member_id, activity_id=activity_id, role=role)
    db.add(enrollment)
    open_history(db, member_id, activity_id)
    return enrollment, True


def open_history(db: AsyncSession, member_id: str, activity_id: str) -> None:
    db.add(
        MemberActivityHistory(
            member_id=member_id, activity_id=activity_id, start_date=local_today()
        )
    )


async def close_history(db: AsyncSession, member_id: str, activity_id: str) -> None:
    await db.execute(
        update(MemberActivityHistory)
        .where(
            MemberActivityHistory.member_id == member_id,
            MemberActivityHistory.activity_id == activity_id,
            MemberActivityHistory.end_date.is_(None),
        )
        .values(end_date=local_today())
    )
