from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class UserPermissionGrant(BaseModel):
    valid_until: datetime | None = None


class UserPermissionRead(BaseModel):
    permission: str
    valid_until: datetime | None = None


class UserPermissions(BaseModel):
    role: str
    role_permissions: list[str] = Field(default_factory=list)
    user_permissions: list[UserPermissionRead] = Field(default_factory=list)
