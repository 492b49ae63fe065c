from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import HTTPException
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from intranet.models.admin import RolePermission, UserPermission
from intranet.models.user import User
from intranet.services.audit import log_action
from intranet.services.auth import SessionClaim
from intranet.services.common import as_utc, coerce_uuid

logger = logging.getLogger(__name__)

DEFAULT_ROLE_PERMISSIONS = {
    "admin": [
        "view_all_documents",
        "edit_documents",
        "archive_documents",
        "manage_users",
        "manage_roles",
        "view_logs",
    ],
    "direction": ["view_all_documents", "edit_documents"],
    "staff": ["view_all_documents"],
}


def _require_admin(claim: SessionClaim) -> None:
    if claim.role != "admin":
        raise HTTPException(status_code=403, detail="Admin only")


class Permissions:
    @staticmethod
    def list_roles(db: Session, claim: SessionClaim) -> dict[str, list[str]]:
        _require_admin(claim)
        result: dict[str, list[str]] = {}
        rows = db.scalars(
            select(RolePermission).order_by(
                RolePermission.role, RolePermission.permission
            )
        ).all()
        for row in rows:
            result.setdefault(row.role, []).append(row.permission)
        return result

    @staticmethod
    def grant_role(
        db: Session,
        claim: SessionClaim,
        role: str,
        permission: str,
        ip_address: str | None = None,
    ) -> None:
        _require_admin(claim)
        existing = db.scalars(
            select(RolePermission).where(
                RolePermission.role == role, RolePermission.permission == permission
            )
        ).first()
        if not existing:
            db.add(RolePermission(role=role, permission=permission))
        log_action(
            db,
            "PERMISSION_GRANT",
            coerce_uuid(claim.id),
            f"Role: {role}, Permission: {permission}",
            ip_address,
        )
        db.commit()
        logger.info("Granted %s to role %s", permission, role)

    @staticmethod
    def revoke_role(
        db: Session,
        claim: SessionClaim,
        role: str,
        permission: str,
        ip_address: str | None = None,
    ) -> None:
        _require_admin(claim)
        for row in db.scalars(
            select(RolePermission).where(
                RolePermission.role == role, RolePermission.permission == permission
            )
        ).all():
            db.delete(row)
        log_action(
            db,
            "PERMISSION_REVOKE",
            coerce_uuid(claim.id),
            f"Role: {role}, Permission: {permission}",
            ip_address,
        )
        db.commit()
        logger.info("Revoked %s from role %s", permission, role)

    @staticmethod
    def for_user(db: Session, user_id: str) -> dict:
        user = db.get(User, coerce_uuid(user_id))
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        role_permissions = db.scalars(
            select(RolePermission.permission)
            .where(RolePermission.role == user.role.value)
            .order_by(RolePermission.permission)
        ).all()
        now = datetime.now(timezone.utc)
        grants = db.scalars(
            select(UserPermission)
            .where(
                UserPermission.user_id == user.id,
                or_(
                    UserPermission.valid_until.is_(None),
                    UserPermission.valid_until > now,
                ),
            )
            .order_by(UserPermission.permission)
        ).all()
        return {
            "role": user.role.value,
            "role_permissions": list(role_permissions),
            "user_permissions": [
                {"permission": grant.permission, "valid_until": grant.valid_until}
                for grant in grants
            ],
        }

    @staticmethod
    def grant_user(
        db: Session,
        claim: SessionClaim,
        user_id: str,
        permission: str,
        valid_until: datetime | None,
        ip_address: str | None = None,
    ) -> None:
        _require_admin(claim)
        user = db.get(User, coerce_uuid(user_id))
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        valid_until = as_utc(valid_until)
        grant = db.scalars(
            select(UserPermission).where(
                UserPermission.user_id == user.id,
                UserPermission.permission == permission,
            )
        ).first()
        if grant:
            grant.valid_until = valid_until
        else:
            db.add(
                UserPermission(
                    user_id=user.id, permission=permission, valid_until=valid_until
                )
            )
        log_action(
            db,
            "USER_PERMISSION_GRANT",
            coerce_uuid(claim.id),
            f"User: {user.id}, Permission: {permission}, "
            f"Until: {valid_until.isoformat() if valid_until else 'permanent'}",
            ip_address,
        )
        db.commit()
        logger.info("Granted %s to user %s", permission, user.id)

    @staticmethod
    def revoke_user(
        db: Session,
        claim: SessionClaim,
        user_id: str,
        permission: str,
        ip_address: str | None = None,
    ) -> None:
        _require_admin(claim)
        target_id = coerce_uuid(user_id)
        for grant in db.scalars(
            select(UserPermission).where(
                UserPermission.user_id == target_id,
                UserPermission.permission == permission,
            )
        ).all():
            db.delete(grant)
        log_action(
            db,
            "USER_PERMISSION_REVOKE",
            coerce_uuid(claim.id),
            f"User: {target_id}, Permission: {permission}",
            ip_address,
        )
        db.commit()
        logger.info("Revoked %s from user %s", permission, target_id)


permissions = Permissions()
