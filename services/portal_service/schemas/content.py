"""Pydantic schemas for activity files and messages."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from services.portal_service.models.enums import FileCategory, MessageScope, MessageTarget
from services.portal_service.schemas.common import BlankAsNoneModel


class ActivityFile(BaseModel):
    """One manifest entry; serialized with the manifest's camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    activity_id: str = Field(alias="activityId")
    name: str
    category: FileCategory = FileCategory.OTHER
    mime: Optional[str] = None
    size: int = 0
    path: str
    uploaded_at: Optional[str] = Field(default=None, alias="uploadedAt")


class ActivityFileList(BaseModel):
    files: list[ActivityFile]


class ActivityFileUpdate(BlankAsNoneModel):
    name: Optional[str] = None
    category: Optional[FileCategory] = None


class SignedUrlResponse(BaseModel):
    url: str


class MessageCreate(BlankAsNoneModel):
    scope: MessageScope
    activity_id: Optional[str] = None
    member_id: Optional[str] = None
    target: MessageTarget = MessageTarget.ALL
    subject: Optional[str] = None
    body: str


class MessageResponse(BaseModel):
    id: str
    scope: str
    activity_id: Optional[str] = None
    member_id: Optional[str] = None
    target: str
    subject: Optional[str] = None
    body: str
    created_by_email: Optional[str] = None
    created_by_name: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
