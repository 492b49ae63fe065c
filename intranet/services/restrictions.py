from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from intranet.models.message import MessageRestriction
from intranet.models.user import User, UserRole
from intranet.schemas.message import RestrictionCreate
from intranet.services.audit import log_action
from intranet.services.common import coerce_uuid

logger = logging.getLogger(__name__)


def _require_admin(user: User) -> None:
    if user.role != UserRole.admin:
        raise HTTPException(
            status_code=403, detail="Only admins can manage restrictions"
        )


class Restrictions:
    @staticmethod
    def list_for_user(
        db: Session, user: User, user_id: str
    ) -> list[MessageRestriction]:
        _require_admin(user)
        stmt = (
            select(MessageRestriction)
            .where(MessageRestriction.user_id == coerce_uuid(user_id))
            .order_by(MessageRestriction.created_at.desc())
        )
        return db.scalars(stmt).all()

    @staticmethod
    def add(
        db: Session,
        user: User,
        payload: RestrictionCreate,
        ip_address: str | None = None,
    ) -> MessageRestriction:
        _require_admin(user)
        target = db.get(User, coerce_uuid(payload.user_id))
        if not target:
            raise HTTPException(status_code=404, detail="User not found")
        blocked_until = None
        if payload.hours:
            blocked_until = datetime.now(timezone.utc) + timedelta(hours=payload.hours)
        restriction = MessageRestriction(
            user_id=target.id,
            restriction_type=payload.restriction_type,
            reason=payload.reason,
            blocked_until=blocked_until,
            created_by=user.id,
        )
        db.add(restriction)
        log_action(
            db,
            "RESTRICTION_ADD",
            user.id,
            f"User {target.id}: {payload.restriction_type.value}",
            ip_address,
        )
        db.commit()
        db.refresh(restriction)
        logger.info("Restricted user %s", target.id)
        return restriction

    @staticmethod
    def remove(
        db: Session, user: User, restriction_id: str, ip_address: str | None = None
    ) -> None:
        _require_admin(user)
        restriction = db.get(MessageRestriction, coerce_uuid(restriction_id))
        if not restriction:
            raise HTTPException(status_code=404, detail="Restriction not found")
        db.delete(restriction)
        log_action(
            db,
            "RESTRICTION_REMOVE",
            user.id,
            f"Restriction: {restriction.id}",
            ip_address,
        )
        db.commit()
        logger.info("Removed restriction %s", restriction_id)


restrictions = Restrictions()
