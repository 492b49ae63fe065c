from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from intranet.models.admin import (
    Announcement,
    AnnouncementPriority,
    AnnouncementScope,
    Module,
)
from intranet.models.document import (
    Document,
    DocumentAction,
    DocumentLog,
    DocumentStatus,
)
from intranet.models.message import Mailbox, MailboxFolder, Message
from intranet.models.user import User, UserRole
from intranet.schemas.dashboard import AnnouncementCreate
from intranet.services.access_control import can_access
from intranet.services.audit import log_action
from intranet.services.common import as_utc

logger = logging.getLogger(__name__)

ACTIVITY_WINDOW = timedelta(days=7)
RECENT_ITEMS = 5
ANNOUNCEMENT_LIMIT = 10
SUPERVISOR_ROLES = {UserRole.staff, UserRole.direction}
ANNOUNCER_ROLES = {UserRole.admin, UserRole.direction, UserRole.staff}
_PRIORITY_RANK = {
    AnnouncementPriority.critical: 3,
    AnnouncementPriority.high: 2,
    AnnouncementPriority.medium: 1,
    AnnouncementPriority.low: 0,
}
_BASE_ACTIONS = [
    {
        "id": "compose",
        "label": "Composer un message",
        "icon": "mail",
        "action": "/mail",
    },
    {
        "id": "create-doc",
        "label": "Créer un document",
        "icon": "file",
        "action": "/documents",
    },
    {"id": "annuaire", "label": "Annuaire", "icon": "users", "action": "/annuaire"},
]


def _modules_status(db: Session, user: User) -> dict[str, str]:
    status = {
        module.name: "actif" if module.enabled else "desactive"
        for module in db.scalars(select(Module)).all()
    }
    status["supervision"] = "actif" if user.role in SUPERVISOR_ROLES else "desactive"
    return status


def _messaging_indicators(db: Session, user: User, since: datetime) -> dict:
    unread = db.scalar(
        select(func.count(Mailbox.id)).where(
            Mailbox.user_id == user.id,
            Mailbox.folder == MailboxFolder.inbox,
            Mailbox.is_read.is_(False),
            Mailbox.deleted.is_(False),
        )
    )
    received = db.scalar(
        select(func.count(Mailbox.id))
        .join(Message, Mailbox.message_id == Message.id)
        .where(
            Mailbox.user_id == user.id,
            Mailbox.folder == MailboxFolder.inbox,
            Message.created_at > since,
        )
    )
    sent = db.scalar(
        select(func.count(Message.id)).where(
            Message.sender_id == user.id,
            Message.is_draft.is_(False),
            Message.created_at > since,
        )
    )
    return {"unread": unread, "received_period": received, "sent_period": sent}


def _document_indicators(db: Session, user: User, since: datetime) -> dict:
    created = db.scalar(
        select(func.count(Document.id)).where(
            Document.author_id == user.id, Document.is_deleted.is_(False)
        )
    )
    viewed = db.scalar(
        select(func.count(func.distinct(DocumentLog.document_id))).where(
            DocumentLog.actor_id == user.id,
            DocumentLog.action == DocumentAction.read,
            DocumentLog.created_at > since,
        )
    )
    pending = 0
    if user.role in SUPERVISOR_ROLES:
        pending = db.scalar(
            select(func.count(Document.id)).where(
                Document.status == DocumentStatus.in_validation,
                Document.is_deleted.is_(False),
            )
        )
    return {
        "created": created,
        "recently_viewed": viewed,
        "pending_validation": pending,
    }


def _recent_activity(db: Session, user: User) -> dict:
    rows = db.execute(
        select(Message, User.username)
        .join(Mailbox, Mailbox.message_id == Message.id)
        .join(User, Message.sender_id == User.id)
        .where(
            Mailbox.user_id == user.id,
            Mailbox.folder == MailboxFolder.inbox,
            Mailbox.deleted.is_(False),
        )
        .order_by(Message.created_at.desc())
        .limit(RECENT_ITEMS)
    ).all()
    recent_messages = [
        {
            "id": message.id,
            "subject": message.subject,
            "sender_id": message.sender_id,
            "sender_username": username,
            "created_at": message.created_at,
        }
        for message, username in rows
    ]

    recent_documents = []
    published = db.scalars(
        select(Document)
        .where(
            Document.is_deleted.is_(False),
            Document.status == DocumentStatus.published,
        )
        .order_by(Document.created_at.desc())
    )
    for document in published:
        if not can_access(user, document):
            continue
        recent_documents.append(
            {
                "id": document.id,
                "title": document.title,
                "type": document.type.value,
                "status": document.status.value,
                "author_id": document.author_id,
                "created_at": document.created_at,
            }
        )
        if len(recent_documents) >= RECENT_ITEMS:
            break
    return {"recent_messages": recent_messages, "recent_documents": recent_documents}


def _announcement_applies(
    announcement: Announcement, user: User, now: datetime
) -> bool:
    if as_utc(announcement.valid_from) > now:
        return False
    valid_to = as_utc(announcement.valid_to)
    if valid_to is not None and valid_to < now:
        return False
    if announcement.scope == AnnouncementScope.department:
        return announcement.scope_value == user.department
    if announcement.scope == AnnouncementScope.clearance:
        try:
            return int(announcement.scope_value or "") <= user.clearance
        except ValueError:
            return False
    return True


def live_announcements(db: Session, user: User) -> list[Announcement]:
    now = datetime.now(timezone.utc)
    candidates = db.scalars(
        select(Announcement).where(
            or_(
                Announcement.scope == AnnouncementScope.global_,
                Announcement.scope == AnnouncementScope.clearance,
                Announcement.scope_value == user.department,
            )
        )
    ).all()
    live = [a for a in candidates if _announcement_applies(a, user, now)]
    live.sort(key=lambda a: as_utc(a.created_at), reverse=True)
    live.sort(key=lambda a: _PRIORITY_RANK[a.priority], reverse=True)
    return live[:ANNOUNCEMENT_LIMIT]


def _quick_actions(user: User) -> list[dict]:
    actions = list(_BASE_ACTIONS)
    if user.role in SUPERVISOR_ROLES:
        actions.append(
            {"id": "rh", "label": "Gestion RH", "icon": "user-check", "action": "/rh"}
        )
    if user.role == UserRole.staff:
        actions.append(
            {
                "id": "supervision",
                "label": "Supervision",
                "icon": "shield",
                "action": "/supervision",
            }
        )
    return actions


class Dashboards:
    @staticmethod
    def build(db: Session, user: User, ip_address: str | None = None) -> dict:
        since = datetime.now(timezone.utc) - ACTIVITY_WINDOW
        data = {
            "user_info": {
                "id": user.id,
                "username": user.username,
                "role": user.role.value,
                "department": user.department,
                "clearance": user.clearance,
                "status": "suspended" if user.suspended else "active",
            },
            "modules_status": _modules_status(db, user),
            "messaging_indicators": _messaging_indicators(db, user, since),
            "document_indicators": _document_indicators(db, user, since),
            "recent_activity": _recent_activity(db, user),
            "announcements": live_announcements(db, user),
            "quick_actions": _quick_actions(user),
        }
        log_action(db, "dashboard_access", user.id, None, ip_address)
        db.commit()
        return data

    @staticmethod
    def create_announcement(
        db: Session,
        user: User,
        payload: AnnouncementCreate,
        ip_address: str | None = None,
    ) -> Announcement:
        if user.role not in ANNOUNCER_ROLES:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        announcement = Announcement(
            title=payload.title,
            content=payload.content,
            priority=payload.priority,
            scope=payload.scope,
            scope_value=payload.scope_value,
            created_by=user.id,
            valid_to=as_utc(payload.valid_to),
        )
        if payload.valid_from is not None:
            announcement.valid_from = as_utc(payload.valid_from)
        db.add(announcement)
        log_action(
            db,
            "ANNOUNCEMENT_CREATE",
            user.id,
            f"Announcement: {payload.title}",
            ip_address,
        )
        db.commit()
        db.refresh(announcement)
        logger.info("Created announcement %s", announcement.id)
        return announcement


dashboards = Dashboards()
