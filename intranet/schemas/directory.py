from uuid import UUID

from pydantic import BaseModel, ConfigDict

from intranet.models.user import UserRole


class DirectoryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    role: UserRole
    clearance: int
    department: str
