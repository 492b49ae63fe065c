from __future__ import annotations

import logging
import math
from datetime import datetime, timezone

from fastapi import HTTPException
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from intranet.config import settings
from intranet.models.document import Document
from intranet.models.message import (
    Mailbox,
    MailboxFolder,
    Message,
    MessageAlias,
    MessageAttachment,
    MessagePriority,
    MessageRestriction,
    RestrictionType,
    UserAliasPermission,
)
from intranet.models.user import User, UserRole
from intranet.schemas.message import DraftSave, MessageSend
from intranet.services.access_control import can_access
from intranet.services.audit import log_action
from intranet.services.common import as_utc, coerce_uuid

logger = logging.getLogger(__name__)

SEARCH_RESULT_LIMIT = 50
MIN_SEARCH_LENGTH = 2


def _folder(value: str) -> MailboxFolder:
    try:
        return MailboxFolder(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid folder")


def _priority(value: str) -> MessagePriority:
    try:
        return MessagePriority(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid priority level")


def _serialize(mailbox: Mailbox) -> dict:
    message = mailbox.message
    return {
        "id": message.id,
        "sender": {"id": message.sender_id, "username": message.sender.username},
        "recipient_id": message.recipient_id,
        "subject": message.subject,
        "body": message.body,
        "priority": message.priority.value,
        "sender_alias": message.sender_alias.name if message.sender_alias else None,
        "thread_id": message.thread_id,
        "is_draft": message.is_draft,
        "folder": mailbox.folder.value,
        "is_read": mailbox.is_read,
        "archived": mailbox.archived,
        "created_at": message.created_at,
    }


def _own_rows(db: Session, user: User, message_id: str) -> list[Mailbox]:
    """The caller's live mailbox rows for one message; never the counterpart's."""
    rows = db.scalars(
        select(Mailbox)
        .where(
            Mailbox.user_id == user.id,
            Mailbox.message_id == coerce_uuid(message_id),
            Mailbox.deleted.is_(False),
        )
        .order_by(Mailbox.created_at)
    ).all()
    if not rows:
        raise HTTPException(status_code=404, detail="Message not found")
    return rows


def _active_restriction(db: Session, user: User) -> MessageRestriction | None:
    now = datetime.now(timezone.utc)
    rows = db.scalars(
        select(MessageRestriction).where(
            MessageRestriction.user_id == user.id,
            MessageRestriction.restriction_type == RestrictionType.send_blocked,
        )
    ).all()
    for row in rows:
        until = as_utc(row.blocked_until)
        if until is None or until > now:
            return row
    return None


def sent_today(db: Session, user: User) -> int:
    day_start = datetime.now(timezone.utc).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return db.scalar(
        select(func.count(Message.id)).where(
            Message.sender_id == user.id,
            Message.is_draft.is_(False),
            Message.created_at >= day_start,
        )
    )


def _check_alias(db: Session, user: User, alias_id) -> MessageAlias:
    alias = db.get(MessageAlias, coerce_uuid(alias_id))
    if not alias or not alias.enabled:
        raise HTTPException(status_code=403, detail="Not authorized to use this alias")
    if alias.admin_only and user.role != UserRole.admin:
        raise HTTPException(status_code=403, detail="Not authorized to use this alias")
    if alias.owner_id == user.id:
        return alias
    grant = db.scalars(
        select(UserAliasPermission).where(
            UserAliasPermission.user_id == user.id,
            UserAliasPermission.alias_id == alias.id,
        )
    ).first()
    if not grant:
        raise HTTPException(status_code=403, detail="Not authorized to use this alias")
    return alias


class Messages:
    @staticmethod
    def list_folder(db: Session, user: User, folder: str, page: int) -> dict:
        target = _folder(folder)
        per_page = settings.messages_per_page
        base = select(Mailbox).where(
            Mailbox.user_id == user.id,
            Mailbox.folder == target,
            Mailbox.deleted.is_(False),
        )
        total = db.scalar(select(func.count()).select_from(base.subquery()))
        rows = db.scalars(
            base.join(Message, Mailbox.message_id == Message.id)
            .order_by(Message.created_at.desc())
            .limit(per_page)
            .offset(page * per_page)
        ).all()
        return {
            "messages": [_serialize(row) for row in rows],
            "total": total,
            "page": page,
            "pages": math.ceil(total / per_page) if total else 0,
        }

    @staticmethod
    def folder_counts(db: Session, user: User) -> dict[str, int]:
        counts = {folder.value: 0 for folder in MailboxFolder}
        rows = db.execute(
            select(Mailbox.folder, func.count(Mailbox.id))
            .where(Mailbox.user_id == user.id, Mailbox.deleted.is_(False))
            .group_by(Mailbox.folder)
        ).all()
        for folder, count in rows:
            counts[folder.value] = count
        return counts

    @staticmethod
    def unread_count(db: Session, user: User) -> int:
        return db.scalar(
            select(func.count(Mailbox.id)).where(
                Mailbox.user_id == user.id,
                Mailbox.is_read.is_(False),
                Mailbox.deleted.is_(False),
                Mailbox.folder != MailboxFolder.trash,
            )
        )

    @staticmethod
    def get(db: Session, user: User, message_id: str) -> dict:
        mailbox = _own_rows(db, user, message_id)[0]
        item = _serialize(mailbox)
        item["attachments"] = [
            {"id": attachment.document.id, "title": attachment.document.title}
            for attachment in mailbox.message.attachments
        ]
        return item

    @staticmethod
    def send(
        db: Session, user: User, payload: MessageSend, ip_address: str | None = None
    ) -> Message:
        restriction = _active_restriction(db, user)
        if restriction:
            logger.warning("Blocked send attempt by restricted user %s", user.id)
            detail = "Messaging temporarily disabled"
            if restriction.reason:
                detail = f"{detail}: {restriction.reason}"
            raise HTTPException(status_code=403, detail=detail)

        if sent_today(db, user) >= settings.max_messages_per_day:
            logger.warning("User %s reached the daily message limit", user.id)
            raise HTTPException(status_code=429, detail="Daily message limit reached")

        priority = _priority(payload.priority)

        alias = None
        if payload.sender_alias:
            alias = _check_alias(db, user, payload.sender_alias)

        recipient = db.get(User, coerce_uuid(payload.recipient_id))
        if not recipient:
            raise HTTPException(status_code=404, detail="Recipient not found")

        attached = []
        for document_id in payload.attachments:
            document = db.get(Document, coerce_uuid(document_id))
            if not document or not can_access(user, document):
                raise HTTPException(
                    status_code=403, detail="Cannot attach an unreadable document"
                )
            attached.append(document)

        message = Message(
            sender_id=user.id,
            recipient_id=recipient.id,
            subject=payload.subject,
            body=payload.body,
            priority=priority,
            sender_alias_id=alias.id if alias else None,
            thread_id=payload.thread_id,
            is_draft=False,
        )
        db.add(message)
        db.flush()
        if message.thread_id is None:
            message.thread_id = message.id
        db.add(
            Mailbox(
                user_id=user.id,
                message_id=message.id,
                folder=MailboxFolder.sent,
                is_read=True,
            )
        )
        db.add(
            Mailbox(
                user_id=recipient.id,
                message_id=message.id,
                folder=MailboxFolder.inbox,
                is_read=False,
            )
        )
        for document in attached:
            db.add(MessageAttachment(message_id=message.id, document_id=document.id))
        log_action(db, "MSG_SEND", user.id, f"To: user_id {recipient.id}", ip_address)
        db.commit()
        db.refresh(message)
        logger.info("User %s sent message %s", user.id, message.id)
        return message

    @staticmethod
    def save_draft(db: Session, user: User, payload: DraftSave) -> tuple[Message, bool]:
        """Create or update one of the caller's drafts; returns (draft, created)."""
        priority = _priority(payload.priority)
        if not db.get(User, coerce_uuid(payload.recipient_id)):
            raise HTTPException(status_code=404, detail="Recipient not found")

        if payload.id:
            draft = db.get(Message, coerce_uuid(payload.id))
            if not draft or draft.sender_id != user.id or not draft.is_draft:
                raise HTTPException(status_code=404, detail="Draft not found")
            draft.recipient_id = payload.recipient_id
            draft.subject = payload.subject
            draft.body = payload.body
            draft.priority = priority
            db.commit()
            db.refresh(draft)
            return draft, False

        draft = Message(
            sender_id=user.id,
            recipient_id=payload.recipient_id,
            subject=payload.subject,
            body=payload.body,
            priority=priority,
            is_draft=True,
        )
        db.add(draft)
        db.flush()
        db.add(
            Mailbox(
                user_id=user.id,
                message_id=draft.id,
                folder=MailboxFolder.drafts,
                is_read=True,
            )
        )
        db.commit()
        db.refresh(draft)
        logger.info("User %s saved draft %s", user.id, draft.id)
        return draft, True

    @staticmethod
    def set_read(db: Session, user: User, message_id: str, is_read: bool) -> None:
        for row in _own_rows(db, user, message_id):
            row.is_read = is_read
        db.commit()

    @staticmethod
    def move_to_folder(db: Session, user: User, message_id: str, folder: str) -> None:
        target = _folder(folder)
        rows = _own_rows(db, user, message_id)
        if any(row.folder == target for row in rows):
            return
        row = rows[0]
        row.folder = target
        row.archived = target == MailboxFolder.archived
        db.commit()
        logger.info("User %s moved message %s to %s", user.id, message_id, target.value)

    @staticmethod
    def delete(
        db: Session, user: User, message_id: str, ip_address: str | None = None
    ) -> None:
        for row in _own_rows(db, user, message_id):
            row.deleted = True
        log_action(db, "MSG_DELETE", user.id, f"Message: {message_id}", ip_address)
        db.commit()
        logger.info("User %s deleted message %s", user.id, message_id)

    @staticmethod
    def search(db: Session, user: User, query: str, folder: str) -> list[dict]:
        if len(query or "") < MIN_SEARCH_LENGTH:
            raise HTTPException(status_code=400, detail="Search query too short")
        target = _folder(folder)
        pattern = f"%{query}%"
        rows = db.scalars(
            select(Mailbox)
            .join(Message, Mailbox.message_id == Message.id)
            .where(
                Mailbox.user_id == user.id,
                Mailbox.folder == target,
                Mailbox.deleted.is_(False),
                or_(Message.subject.ilike(pattern), Message.body.ilike(pattern)),
            )
            .order_by(Message.created_at.desc())
            .limit(SEARCH_RESULT_LIMIT)
        ).all()
        return [_serialize(row) for row in rows]


messages = Messages()
