from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, StrictBool


class ModuleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    enabled: bool
    config: dict[str, Any] | None = None
    updated_at: datetime


class ModuleToggle(BaseModel):
    enabled: StrictBool


class ModuleConfigUpdate(BaseModel):
    config: dict[str, Any]
