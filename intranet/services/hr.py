from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from intranet.models.admin import Announcement, HRNote, UserPermission
from intranet.models.document import Document, DocumentLog, DocumentVersion
from intranet.models.message import (
    Message,
    MessageAlias,
    MessageRestriction,
    UserAliasPermission,
)
from intranet.models.user import User, UserRole
from intranet.schemas.hr import UserCreate
from intranet.services.audit import log_action
from intranet.services.auth import (
    SessionClaim,
    generate_temporary_password,
    hash_password,
)
from intranet.services.common import coerce_uuid
from intranet.services.event import EventType, publish_event

logger = logging.getLogger(__name__)

HR_VIEWER_ROLES = {"administration", "direction", "staff", "admin"}
HR_CREATOR_ROLES = {"administration", "direction", "admin"}
ROLE_EDITOR_ROLES = {"admin", "staff"}


# Rows that block deleting an account; history is never rewritten.
_REFERENCES = (
    (Document, Document.author_id),
    (DocumentVersion, DocumentVersion.edited_by),
    (DocumentLog, DocumentLog.actor_id),
    (Message, Message.sender_id),
    (Message, Message.recipient_id),
    (MessageAlias, MessageAlias.owner_id),
    (Announcement, Announcement.created_by),
    (HRNote, HRNote.author_id),
)
# Rows that belong to the account and go with it.
_OWNED_ROWS = (
    (HRNote, HRNote.user_id),
    (UserAliasPermission, UserAliasPermission.user_id),
    (MessageRestriction, MessageRestriction.user_id),
    (UserPermission, UserPermission.user_id),
)


def _is_referenced(db: Session, user_id) -> bool:
    return any(
        db.scalar(select(func.count()).select_from(model).where(column == user_id))
        for model, column in _REFERENCES
    )


def _require(claim: SessionClaim, roles: set[str], detail: str) -> None:
    if claim.role not in roles:
        raise HTTPException(status_code=403, detail=detail)


def _get_user(db: Session, user_id: str) -> User:
    user = db.get(User, coerce_uuid(user_id))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _notes_for(db: Session, user_id) -> list[HRNote]:
    stmt = (
        select(HRNote)
        .where(HRNote.user_id == user_id)
        .order_by(HRNote.created_at.desc())
    )
    return db.scalars(stmt).all()


class HumanResources:
    @staticmethod
    def list_users(
        db: Session, claim: SessionClaim, ip_address: str | None
    ) -> list[User]:
        _require(claim, HR_VIEWER_ROLES, "Insufficient permissions")
        users = db.scalars(select(User).order_by(User.username)).all()
        log_action(db, "RH_VIEW_USERS", coerce_uuid(claim.id), None, ip_address)
        db.commit()
        return users

    @staticmethod
    def get_fiche(
        db: Session, claim: SessionClaim, user_id: str, ip_address: str | None
    ) -> dict:
        _require(claim, HR_VIEWER_ROLES, "Insufficient permissions")
        user = _get_user(db, user_id)
        notes = _notes_for(db, user.id)
        log_action(
            db,
            "RH_VIEW_FICHE",
            coerce_uuid(claim.id),
            f"User: {user.username}",
            ip_address,
        )
        db.commit()
        return {
            "id": user.id,
            "username": user.username,
            "role": user.role,
            "clearance": user.clearance,
            "department": user.department,
            "suspended": user.suspended,
            "created_at": user.created_at,
            "notes": notes,
        }

    @staticmethod
    def set_clearance(
        db: Session,
        claim: SessionClaim,
        user_id: str,
        clearance: int,
        ip_address: str | None,
    ) -> User:
        _require(claim, HR_VIEWER_ROLES, "Insufficient permissions")
        user = _get_user(db, user_id)
        user.clearance = clearance
        log_action(
            db,
            "RH_CHANGE_CLEARANCE",
            coerce_uuid(claim.id),
            f"User: {user.id}, New: {clearance}",
            ip_address,
        )
        db.commit()
        db.refresh(user)
        logger.info("Set clearance of user %s to %s", user.id, clearance)
        return user

    @staticmethod
    def add_note(
        db: Session,
        claim: SessionClaim,
        user_id: str,
        content: str,
        ip_address: str | None,
    ) -> HRNote:
        _require(claim, HR_VIEWER_ROLES, "Insufficient permissions")
        user = _get_user(db, user_id)
        note = HRNote(user_id=user.id, author_id=coerce_uuid(claim.id), note=content)
        db.add(note)
        log_action(
            db, "RH_ADD_NOTE", coerce_uuid(claim.id), f"User: {user.id}", ip_address
        )
        db.commit()
        db.refresh(note)
        return note

    @staticmethod
    def list_notes(db: Session, claim: SessionClaim, user_id: str) -> list[HRNote]:
        _require(claim, HR_VIEWER_ROLES, "Insufficient permissions")
        return _notes_for(db, coerce_uuid(user_id))

    @staticmethod
    def set_suspended(
        db: Session,
        claim: SessionClaim,
        user_id: str,
        suspended: bool,
        ip_address: str | None,
    ) -> User:
        _require(claim, HR_VIEWER_ROLES, "Insufficient permissions")
        user = _get_user(db, user_id)
        user.suspended = suspended
        log_action(
            db,
            "RH_SUSPEND" if suspended else "RH_UNSUSPEND",
            coerce_uuid(claim.id),
            f"User: {user.id}",
            ip_address,
        )
        db.commit()
        db.refresh(user)
        logger.info("User %s suspended=%s", user.id, suspended)
        return user

    @staticmethod
    def create_user(
        db: Session, claim: SessionClaim, payload: UserCreate, ip_address: str | None
    ) -> tuple[User, str]:
        _require(claim, HR_CREATOR_ROLES, "Insufficient permissions")
        existing = db.scalars(
            select(User).where(User.username == payload.username)
        ).first()
        if existing:
            raise HTTPException(status_code=409, detail="Username already exists")

        temporary_password = generate_temporary_password()
        user = User(
            username=payload.username,
            password_hash=hash_password(temporary_password),
            role=payload.role,
            clearance=payload.clearance,
            department=payload.department,
            suspended=False,
        )
        db.add(user)
        log_action(
            db,
            "RH_CREATE_USER",
            coerce_uuid(claim.id),
            f"User: {payload.username}",
            ip_address,
        )
        db.commit()
        db.refresh(user)
        logger.info("Created user %s", user.id)
        publish_event(
            EventType.user_created,
            entity_type="user",
            entity_id=user.id,
            actor_id=claim.id,
            payload={
                "username": user.username,
                "role": user.role.value,
                "department": user.department,
                "temporary_password": temporary_password,
            },
        )
        return user, temporary_password

    @staticmethod
    def delete_user(
        db: Session, claim: SessionClaim, user_id: str, ip_address: str | None
    ) -> None:
        _require(claim, {"admin"}, "Admin only")
        user = _get_user(db, user_id)
        if _is_referenced(db, user.id):
            raise HTTPException(
                status_code=409,
                detail="User still owns documents or messages; suspend instead",
            )

        snapshot = {
            "username": user.username,
            "role": user.role.value,
            "department": user.department,
            "actor_username": claim.username,
        }
        for model, column in _OWNED_ROWS:
            for row in db.scalars(select(model).where(column == user.id)).all():
                db.delete(row)
        for restriction in db.scalars(
            select(MessageRestriction).where(MessageRestriction.created_by == user.id)
        ).all():
            restriction.created_by = None
        db.delete(user)
        log_action(
            db,
            "RH_DELETE_USER",
            coerce_uuid(claim.id),
            f"User: {snapshot['username']}",
            ip_address,
        )
        db.commit()
        logger.info("Deleted user %s", user_id)
        publish_event(
            EventType.user_deleted,
            entity_type="user",
            entity_id=user_id,
            actor_id=claim.id,
            payload=snapshot,
        )

    @staticmethod
    def set_role(
        db: Session,
        claim: SessionClaim,
        user_id: str,
        role: UserRole,
        ip_address: str | None,
    ) -> User:
        _require(claim, ROLE_EDITOR_ROLES, "Admin or Staff only")
        user = _get_user(db, user_id)
        if claim.role == "staff" and UserRole.admin in (user.role, role):
            raise HTTPException(
                status_code=403, detail="Staff cannot modify admin users"
            )
        previous = user.role
        user.role = role
        log_action(
            db,
            "RH_CHANGE_ROLE",
            coerce_uuid(claim.id),
            f"User: {user.username}, From: {previous.value}, To: {role.value}",
            ip_address,
        )
        db.commit()
        db.refresh(user)
        logger.info("Changed role of user %s to %s", user.id, role.value)
        return user

    @staticmethod
    def reset_password(
        db: Session, claim: SessionClaim, user_id: str, ip_address: str | None
    ) -> str:
        _require(claim, {"admin"}, "Admin only")
        user = _get_user(db, user_id)
        temporary_password = generate_temporary_password()
        user.password_hash = hash_password(temporary_password)
        log_action(
            db,
            "RH_RESET_PASSWORD",
            coerce_uuid(claim.id),
            f"User: {user.username}",
            ip_address,
        )
        db.commit()
        logger.info("Reset password of user %s", user.id)
        publish_event(
            EventType.user_password_reset,
            entity_type="user",
            entity_id=user.id,
            actor_id=claim.id,
            payload={
                "username": user.username,
                "temporary_password": temporary_password,
            },
        )
        return temporary_password


human_resources = HumanResources()
