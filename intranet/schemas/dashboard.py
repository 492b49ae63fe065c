from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from intranet.models.admin import AnnouncementPriority, AnnouncementScope


class AnnouncementCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    priority: AnnouncementPriority = AnnouncementPriority.medium
    scope: AnnouncementScope = AnnouncementScope.global_
    scope_value: str | None = Field(default=None, max_length=120)
    valid_from: datetime | None = None
    valid_to: datetime | None = None

    @model_validator(mode="after")
    def _scope_value_required(self) -> "AnnouncementCreate":
        if self.scope != AnnouncementScope.global_ and not self.scope_value:
            raise ValueError("scope_value is required for a scoped announcement")
        if self.scope == AnnouncementScope.clearance and self.scope_value:
            if not self.scope_value.isdigit():
                raise ValueError("scope_value must be a clearance level")
        return self


class AnnouncementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    content: str
    priority: AnnouncementPriority
    scope: AnnouncementScope
    scope_value: str | None = None
    valid_from: datetime
    valid_to: datetime | None = None
    created_at: datetime


class UserInfo(BaseModel):
    id: UUID
    username: str
    role: str
    department: str
    clearance: int
    status: str


class MessagingIndicators(BaseModel):
    unread: int = 0
    received_period: int = 0
    sent_period: int = 0


class DocumentIndicators(BaseModel):
    created: int = 0
    recently_viewed: int = 0
    pending_validation: int = 0


class RecentMessage(BaseModel):
    id: UUID
    subject: str
    sender_id: UUID
    sender_username: str
    created_at: datetime


class RecentDocument(BaseModel):
    id: UUID
    title: str
    type: str
    status: str
    author_id: UUID
    created_at: datetime


class RecentActivity(BaseModel):
    recent_messages: list[RecentMessage] = Field(default_factory=list)
    recent_documents: list[RecentDocument] = Field(default_factory=list)


class QuickAction(BaseModel):
    id: str
    label: str
    icon: str
    action: str


class Dashboard(BaseModel):
    user_info: UserInfo
    modules_status: dict[str, str]
    messaging_indicators: MessagingIndicators
    document_indicators: DocumentIndicators
    recent_activity: RecentActivity
    announcements: list[AnnouncementRead] = Field(default_factory=list)
    quick_actions: list[QuickAction] = Field(default_factory=list)
