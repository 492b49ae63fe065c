from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class AuditLogRead(BaseModel):
    id: UUID
    action: str
    user_id: UUID | None = None
    username: str | None = None
    details: str | None = None
    ip_address: str | None = None
    created_at: datetime
