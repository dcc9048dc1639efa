"""Access levels and activity roles.

Module levels are ordered ``none < view < edit < admin``. A member's role in
an activity comes from their enrollment; admins see and manage everything.
"""

from typing import Optional

from libs.auth.models import AuthUser
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal_service.models import Enrollment, Member

MODULE_KEYS: tuple[str, ...] = ("dashboard", "members", "activities", "calendar", "stats")
LEVEL_ORDER: dict[str, int] = {"none": 0, "view": 1, "edit": 2, "admin": 3}


def level_gte(a: Optional[str], b: str) -> bool:
    """True when level ``a`` (missing means ``none``) is at least ``b``."""
    return LEVEL_ORDER.get(a or "none", 0) >= LEVEL_ORDER[b]


def module_level(user: AuthUser, module: str) -> str:
    """Level for one portal module, read from ``app_metadata.modules``."""
    if user.is_admin:
        return "admin"
    modules = user.app_metadata.get("modules") or {}
    level = modules.get(module) if isinstance(modules, dict) else None
    return level if level in LEVEL_ORDER else "view"


async def find_member_for_user(db: AsyncSession, user: AuthUser) -> Optional[Member]:
    """The member row linked to a signed-in user, by auth id or email."""
    conditions = [Member.auth_id == user.user_id]
    if user.email:
        conditions.append(func.lower(Member.email) == user.email.lower())
    result = await db.execute(select(Member).where(or_(*conditions)).limit(1))
    return result.scalar_one_or_none()


async def activity_role(
    db: AsyncSession, user: AuthUser, activity_id: str
) -> Optional[str]:
    """``admin`` for admins, else the enrollment role, else ``None``."""
    if user.is_admin:
        return "admin"
    member = await find_member_for_user(db, user)
    if member is None:
        return None
    result = await db.execute(
        select(Enrollment.role).where(
            Enrollment.member_id == member.id,
            Enrollment.activity_id == activity_id,
        )
    )
    return result.scalar_one_or_none()
