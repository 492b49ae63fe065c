from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    role: str
    clearance: int
    department: str


class LoginResponse(BaseModel):
    token: str
    user: UserSummary


class MeResponse(BaseModel):
    id: UUID
    username: str
    role: str
    clearance: int
    department: str | None = None
    suspended: bool = False
