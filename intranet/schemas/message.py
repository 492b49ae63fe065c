from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from intranet.models.message import RestrictionType


class MessageSend(BaseModel):
    recipient_id: UUID
    subject: str = Field(min_length=1, max_length=500)
    body: str = Field(min_length=1)
    priority: str = "information"
    sender_alias: UUID | None = None
    attachments: list[UUID] = Field(default_factory=list)
    thread_id: UUID | None = None


class DraftSave(BaseModel):
    id: UUID | None = None
    recipient_id: UUID
    subject: str = Field(min_length=1, max_length=500)
    body: str = Field(min_length=1)
    priority: str = "information"


class FolderMove(BaseModel):
    folder: str


class SenderInfo(BaseModel):
    id: UUID
    username: str


class AttachmentRead(BaseModel):
    id: UUID
    title: str


class MessageItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sender: SenderInfo
    recipient_id: UUID
    subject: str
    body: str
    priority: str
    sender_alias: str | None = None
    thread_id: UUID | None = None
    is_draft: bool = False
    folder: str
    is_read: bool
    archived: bool
    created_at: datetime


class MessageDetail(MessageItem):
    attachments: list[AttachmentRead] = Field(default_factory=list)


class MessagePage(BaseModel):
    messages: list[MessageItem]
    total: int
    page: int
    pages: int


class UnreadCount(BaseModel):
    unread: int


class MessageAck(BaseModel):
    id: UUID
    message: str


class AliasCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None
    admin_only: bool = False


class AliasRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    owner_id: UUID
    enabled: bool
    admin_only: bool
    created_at: datetime


class AliasGrant(BaseModel):
    user_id: UUID


class RestrictionCreate(BaseModel):
    user_id: UUID
    restriction_type: RestrictionType = RestrictionType.send_blocked
    reason: str | None = None
    hours: int | None = Field(default=None, ge=1)


class RestrictionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    restriction_type: RestrictionType
    reason: str | None = None
    blocked_until: datetime | None = None
    created_by: UUID | None = None
    created_at: datetime
