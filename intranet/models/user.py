import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from intranet.db import Base


class UserRole(enum.Enum):
    scientifique = "scientifique"
    securite = "securite"
    administration = "administration"
    direction = "direction"
    ia = "ia"
    staff = "staff"
    admin = "admin"


class User(Base):
    __tablename__ = "users"
    __table_args__ = (Index("ix_users_department", "department"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), nullable=False)
    clearance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    department: Mapped[str] = mapped_column(String(120), nullable=False)
    suspended: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
