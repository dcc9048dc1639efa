"""Volunteers and tasks attached to an activity."""

from typing import List

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.db.session import get_async_db
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal_service.models import ActivityTask, ActivityVolunteer, TaskStatus
from services.portal_service.routers._helpers import (
    get_or_404,
    members_by_id,
    require_changes,
)
from services.portal_service.schemas import (
    MemberSummary,
    OkResponse,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
    VolunteerCreate,
    VolunteerResponse,
    VolunteerUpdate,
)

volunteers_router = APIRouter(prefix="/api/activity-volunteers", tags=["volunteers"])
tasks_router = APIRouter(prefix="/api/activity-tasks", tags=["tasks"])


def _summary(member) -> MemberSummary | None:
    return MemberSummary.model_validate(member) if member is not None else None


# ============================================================================
# VOLUNTEERS
# ============================================================================


async def _volunteer_response(db: AsyncSession, volunteer: ActivityVolunteer) -> VolunteerResponse:
    members = await members_by_id(db, [volunteer.member_id])
    response = VolunteerResponse.model_validate(volunteer)
    response.member = _summary(members.get(volunteer.member_id))
    return response


@volunteers_router.get("/", response_model=List[VolunteerResponse])
async def list_volunteers(
    activity_id: str = Query(...),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(ActivityVolunteer)
        .where(ActivityVolunteer.activity_id == activity_id)
        .order_by(ActivityVolunteer.created_at)
    )
    volunteers = result.scalars().all()
    members = await members_by_id(db, [v.member_id for v in volunteers])

    responses = []
    for volunteer in volunteers:
        response = VolunteerResponse.model_validate(volunteer)
        response.member = _summary(members.get(volunteer.member_id))
        responses.append(response)
    return responses


@volunteers_router.post("/", response_model=VolunteerResponse, status_code=201)
async def create_volunteer(
    payload: VolunteerCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    volunteer = ActivityVolunteer(**payload.model_dump())
    db.add(volunteer)
    await db.commit()
    await db.refresh(volunteer)
    return await _volunteer_response(db, volunteer)


@volunteers_router.patch("/{volunteer_id}", response_model=VolunteerResponse)
async def update_volunteer(
    volunteer_id: str,
    payload: VolunteerUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    volunteer = await get_or_404(db, ActivityVolunteer, volunteer_id, "Volunteer")
    data = require_changes(payload.model_dump(exclude_unset=True))
    for field, value in data.items():
        setattr(volunteer, field, value)
    await db.commit()
    await db.refresh(volunteer)
    return await _volunteer_response(db, volunteer)


@volunteers_router.delete("/{volunteer_id}", response_model=OkResponse)
async def delete_volunteer(
    volunteer_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    volunteer = await get_or_404(db, ActivityVolunteer, volunteer_id, "Volunteer")
    await db.delete(volunteer)
    await db.commit()
    return OkResponse()


# ============================================================================
# TASKS
# ============================================================================


async def _task_response(db: AsyncSession, task: ActivityTask) -> TaskResponse:
    members = await members_by_id(db, [task.assigned_member_id])
    response = TaskResponse.model_validate(task)
    response.assignee = _summary(members.get(task.assigned_member_id))
    return response


@tasks_router.get("/", response_model=List[TaskResponse])
async def list_tasks(
    activity_id: str = Query(...),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(ActivityTask)
        .where(ActivityTask.activity_id == activity_id)
        .order_by(ActivityTask.sort_order, ActivityTask.title)
    )
    tasks = result.scalars().all()
    members = await members_by_id(db, [t.assigned_member_id for t in tasks])

    responses = []
    for task in tasks:
        response = TaskResponse.model_validate(task)
        response.assignee = _summary(members.get(task.assigned_member_id))
        responses.append(response)
    return responses


@tasks_router.post("/", response_model=TaskResponse, status_code=201)
async def create_task(
    payload: TaskCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    data = payload.model_dump()
    data["status"] = TaskStatus.normalize(data.get("status")).value
    task = ActivityTask(**data, created_by=current_user.email)
    if task.status == TaskStatus.DONE.value:
        task.completed_at = utc_now()
    db.add(task)
    await db.commit()
    await db.refresh(task)
    return await _task_response(db, task)


@tasks_router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Update a task. Moving it to ``done`` stamps ``completed_at``; moving it
    away clears it; an unchanged status keeps the stamp.
    """
    task = await get_or_404(db, ActivityTask, task_id, "Task")
    data = payload.model_dump(exclude_unset=True)
    for field in ("title", "sort_order"):
        if field in data and data[field] is None:
            del data[field]
    require_changes(data)

    if "status" in data:
        new_status = TaskStatus.normalize(data["status"]).value
        data["status"] = new_status
        if new_status != task.status:
            data["completed_at"] = utc_now() if new_status == TaskStatus.DONE.value else None

    for field, value in data.items():
        setattr(task, field, value)
    await db.commit()
    await db.refresh(task)
    return await _task_response(db, task)


@tasks_router.delete("/{task_id}", response_model=OkResponse)
async def delete_task(
    task_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    task = await get_or_404(db, ActivityTask, task_id, "Task")
    await db.delete(task)
    await db.commit()
    return OkResponse()
