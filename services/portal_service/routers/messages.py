from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal_service.models import Message, MessageScope
from services.portal_service.routers._helpers import plain_values
from services.portal_service.schemas import MessageCreate, MessageResponse

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("/", response_model=List[MessageResponse])
async def list_messages(
    activity_id: Optional[str] = Query(None),
    member_id: Optional[str] = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Messages for an activity or a member, newest first."""
    query = select(Message)
    if activity_id:
        query = query.where(Message.activity_id == activity_id)
    if member_id:
        query = query.where(Message.member_id == member_id)
    result = await db.execute(query.order_by(Message.created_at.desc()).limit(limit))
    return result.scalars().all()


@router.post("/", response_model=MessageResponse, status_code=201)
async def create_message(
    payload: MessageCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    if payload.scope == MessageScope.ACTIVITY and not payload.activity_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="activity_id is required for activity messages",
        )
    if payload.scope == MessageScope.MEMBER and not payload.member_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="member_id is required for member messages",
        )

    message = Message(
        **plain_values(payload.model_dump()),
        created_by_email=current_user.email,
        created_by_name=current_user.display_name or current_user.email,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)
    return message
