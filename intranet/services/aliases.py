from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from intranet.models.message import MessageAlias, UserAliasPermission
from intranet.models.user import User, UserRole
from intranet.schemas.message import AliasCreate
from intranet.services.audit import log_action
from intranet.services.common import coerce_uuid

logger = logging.getLogger(__name__)


def _get_alias(db: Session, alias_id: str) -> MessageAlias:
    alias = db.get(MessageAlias, coerce_uuid(alias_id))
    if not alias:
        raise HTTPException(status_code=404, detail="Alias not found")
    return alias


def _require_owner_or_admin(user: User, alias: MessageAlias) -> None:
    if alias.owner_id != user.id and user.role != UserRole.admin:
        raise HTTPException(status_code=403, detail="Permission denied")


class Aliases:
    @staticmethod
    def list(db: Session, user: User) -> list[MessageAlias]:
        stmt = (
            select(MessageAlias)
            .outerjoin(
                UserAliasPermission, UserAliasPermission.alias_id == MessageAlias.id
            )
            .where(
                or_(
                    MessageAlias.owner_id == user.id,
                    UserAliasPermission.user_id == user.id,
                )
            )
            .order_by(MessageAlias.name)
            .distinct()
        )
        return db.scalars(stmt).all()

    @staticmethod
    def create(
        db: Session, user: User, payload: AliasCreate, ip_address: str | None = None
    ) -> MessageAlias:
        if user.role != UserRole.admin:
            raise HTTPException(
                status_code=403, detail="Only admins can create aliases"
            )
        alias = MessageAlias(
            name=payload.name,
            description=payload.description,
            owner_id=user.id,
            admin_only=payload.admin_only,
        )
        db.add(alias)
        log_action(db, "ALIAS_CREATE", user.id, f"Alias: {payload.name}", ip_address)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise HTTPException(status_code=409, detail="Alias name already exists")
        db.refresh(alias)
        logger.info("Created alias %s", alias.id)
        return alias

    @staticmethod
    def grant(
        db: Session,
        user: User,
        alias_id: str,
        target_user_id,
        ip_address: str | None = None,
    ) -> None:
        alias = _get_alias(db, alias_id)
        _require_owner_or_admin(user, alias)
        target = db.get(User, coerce_uuid(target_user_id))
        if not target:
            raise HTTPException(status_code=404, detail="User not found")
        existing = db.scalars(
            select(UserAliasPermission).where(
                UserAliasPermission.user_id == target.id,
                UserAliasPermission.alias_id == alias.id,
            )
        ).first()
        if not existing:
            db.add(UserAliasPermission(user_id=target.id, alias_id=alias.id))
        log_action(
            db,
            "ALIAS_GRANT",
            user.id,
            f"Alias {alias.id} to user {target.id}",
            ip_address,
        )
        db.commit()
        logger.info("Granted alias %s to user %s", alias.id, target.id)

    @staticmethod
    def revoke(
        db: Session,
        user: User,
        alias_id: str,
        target_user_id,
        ip_address: str | None = None,
    ) -> None:
        alias = _get_alias(db, alias_id)
        _require_owner_or_admin(user, alias)
        target_id = coerce_uuid(target_user_id)
        for grant in db.scalars(
            select(UserAliasPermission).where(
                UserAliasPermission.user_id == target_id,
                UserAliasPermission.alias_id == alias.id,
            )
        ).all():
            db.delete(grant)
        log_action(
            db,
            "ALIAS_REVOKE",
            user.id,
            f"Alias {alias.id} from user {target_id}",
            ip_address,
        )
        db.commit()
        logger.info("Revoked alias %s from user %s", alias.id, target_id)

    @staticmethod
    def disable(
        db: Session, user: User, alias_id: str, ip_address: str | None = None
    ) -> MessageAlias:
        if user.role != UserRole.admin:
            raise HTTPException(
                status_code=403, detail="Only admins can disable aliases"
            )
        alias = _get_alias(db, alias_id)
        alias.enabled = False
        log_action(db, "ALIAS_DISABLE", user.id, f"Alias: {alias.id}", ip_address)
        db.commit()
        db.refresh(alias)
        logger.info("Disabled alias %s", alias.id)
        return alias


aliases = Aliases()
