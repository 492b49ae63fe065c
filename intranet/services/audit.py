from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from intranet.models.admin import AuditLog
from intranet.models.document import DocumentAction, DocumentLog
from intranet.models.user import User
from intranet.services.common import apply_pagination

logger = logging.getLogger(__name__)

LOG_VIEWER_ROLES = {"staff", "admin", "direction"}


def log_action(
    db: Session,
    action: str,
    user_id,
    details: str | None = None,
    ip_address: str | None = None,
) -> AuditLog:
    """Append a row to the general action log. The caller commits."""
    entry = AuditLog(
        action=action, user_id=user_id, details=details, ip_address=ip_address
    )
    db.add(entry)
    return entry


def log_document_action(
    db: Session,
    document_id,
    action: DocumentAction,
    actor_id,
    details: str | None = None,
    ip_address: str | None = None,
) -> DocumentLog:
    """Append a row to a document's audit trail. The caller commits."""
    entry = DocumentLog(
        document_id=document_id,
        action=action,
        actor_id=actor_id,
        details=details,
        ip_address=ip_address,
    )
    db.add(entry)
    return entry


class AuditLogs:
    @staticmethod
    def list(
        db: Session,
        role: str,
        action: str | None,
        limit: int,
        offset: int,
    ) -> list[dict]:
        if role not in LOG_VIEWER_ROLES:
            raise HTTPException(status_code=403, detail="Admin or Staff only")
        stmt = select(AuditLog, User.username).outerjoin(
            User, AuditLog.user_id == User.id
        )
        if action:
            stmt = stmt.where(AuditLog.action == action)
        stmt = stmt.order_by(AuditLog.created_at.desc())
        rows = db.execute(apply_pagination(stmt, limit, offset)).all()
        return [
            {
                "id": entry.id,
                "action": entry.action,
                "user_id": entry.user_id,
                "username": username,
                "details": entry.details,
                "ip_address": entry.ip_address,
                "created_at": entry.created_at,
            }
            for entry, username in rows
        ]


audit_logs = AuditLogs()
