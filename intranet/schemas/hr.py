from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from intranet.models.user import UserRole


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    role: UserRole
    clearance: int
    department: str
    suspended: bool
    created_at: datetime


class HRNoteCreate(BaseModel):
    content: str = Field(min_length=1)


class HRNoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    author_id: UUID
    author_name: str | None = None
    note: str
    created_at: datetime


class UserFiche(UserRead):
    notes: list[HRNoteRead] = Field(default_factory=list)


class ClearanceUpdate(BaseModel):
    clearance: int = Field(ge=0, le=6)


class SuspendUpdate(BaseModel):
    suspended: bool


class RoleUpdate(BaseModel):
    role: UserRole


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    role: UserRole
    clearance: int = Field(ge=0, le=6)
    department: str = Field(min_length=1, max_length=120)


class UserCreated(UserRead):
    temporary_password: str


class PasswordReset(BaseModel):
    message: str
    temporary_password: str
