from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from intranet.models.document import (
    DocumentAction,
    DocumentStatus,
    DocumentType,
    PermissionType,
)


class DocumentCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    body: str = Field(min_length=1)
    type: DocumentType
    department: str = Field(min_length=1, max_length=120)
    clearance: int = Field(default=0, ge=0, le=6)
    tags: list[str] = Field(default_factory=list)
    reference_id: str | None = Field(default=None, max_length=120)


class DocumentUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    body: str | None = Field(default=None, min_length=1)
    clearance: int | None = Field(default=None, ge=0, le=6)
    tags: list[str] | None = None
    department: str | None = Field(default=None, min_length=1, max_length=120)
    type: DocumentType | None = None
    reference_id: str | None = Field(default=None, max_length=120)
    change_summary: str | None = None


class DocumentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    body: str
    type: DocumentType
    status: DocumentStatus
    clearance: int
    author_id: UUID
    author_username: str | None = None
    department: str
    tags: list[str] = Field(default_factory=list)
    reference_id: str | None = None
    version: int
    created_at: datetime
    updated_at: datetime


class DocumentVersionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    document_id: UUID
    version: int
    title: str
    body: str
    edited_by: UUID
    edited_by_username: str | None = None
    change_summary: str | None = None
    created_at: datetime


class DocumentPermissionSet(BaseModel):
    permission_type: PermissionType
    target_id: str = Field(min_length=1, max_length=255)
    is_allowed: bool = True


class DocumentPermissionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    document_id: UUID
    permission_type: PermissionType
    target_id: str
    is_allowed: bool
    created_at: datetime


class DocumentLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    document_id: UUID
    action: DocumentAction
    actor_id: UUID
    actor_username: str | None = None
    details: str | None = None
    ip_address: str | None = None
    created_at: datetime
