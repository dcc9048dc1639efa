from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal_service.models import Enrollment, EnrollmentRole
from services.portal_service.routers._helpers import upsert_enrollment
from services.portal_service.schemas import (
    EnrollmentIdsResponse,
    EnrollmentResponse,
    SetRoleRequest,
)

router = APIRouter(prefix="/api/enrollments", tags=["enrollments"])


@router.get("/", response_model=EnrollmentIdsResponse)
async def list_enrollment_ids(
    member_id: str = Query(...),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Ids of the activities a member is enrolled in."""
    result = await db.execute(
        select(Enrollment.activity_id).where(Enrollment.member_id == member_id)
    )
    return EnrollmentIdsResponse(activity_ids=list(result.scalars().all()))


@router.post("/set-role", response_model=EnrollmentResponse)
async def set_enrollment_role(
    payload: SetRoleRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Upsert the enrollment for (member, activity) with a normalized role."""
    role = EnrollmentRole.normalize(payload.role).value
    enrollment, _ = await upsert_enrollment(db, payload.member_id, payload.activity_id, role)
    await db.commit()
    await db.refresh(enrollment)
    return enrollment
