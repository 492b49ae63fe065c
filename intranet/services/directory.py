from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from intranet.models.user import User


class Directory:
    @staticmethod
    def list(db: Session) -> list[User]:
        stmt = select(User).where(User.suspended.is_(False)).order_by(User.username)
        return db.scalars(stmt).all()

    @staticmethod
    def search(db: Session, query: str | None) -> list[User]:
        pattern = f"%{query or ''}%"
        stmt = (
            select(User)
            .where(
                User.suspended.is_(False),
                or_(User.username.ilike(pattern), User.department.ilike(pattern)),
            )
            .order_by(User.username)
        )
        return db.scalars(stmt).all()


directory = Directory()
