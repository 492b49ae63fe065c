from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from intranet.models.document import (
    Document,
    DocumentAction,
    DocumentLog,
    DocumentPermission,
    DocumentStatus,
    DocumentType,
    DocumentVersion,
)
from intranet.models.user import User, UserRole
from intranet.schemas.document import (
    DocumentCreate,
    DocumentPermissionSet,
    DocumentUpdate,
)
from intranet.services.access_control import can_access
from intranet.services.audit import log_document_action
from intranet.services.common import coerce_uuid
from intranet.services.response import ListResponseMixin

logger = logging.getLogger(__name__)

CREATOR_ROLES = {
    UserRole.scientifique,
    UserRole.securite,
    UserRole.administration,
    UserRole.direction,
    UserRole.staff,
}
ELEVATED_EDIT_ROLES = {UserRole.staff, UserRole.direction}
LIFECYCLE_ROLES = {UserRole.staff, UserRole.direction}
LOG_VIEWER_ROLES = {UserRole.staff, UserRole.direction}
DOCUMENT_LOG_LIMIT = 100


def _is_author(user: User, document: Document) -> bool:
    return document.author_id == user.id


def _get_live(db: Session, document_id: str) -> Document:
    document = db.get(Document, coerce_uuid(document_id))
    if not document or document.is_deleted:
        raise HTTPException(status_code=404, detail="Document not found")
    return document


def _get_readable(
    db: Session, user: User, document_id: str, ip_address: str | None
) -> Document:
    """Fetch a document through the access gate, auditing a denial."""
    document = db.get(Document, coerce_uuid(document_id))
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    if not can_access(user, document):
        log_document_action(
            db, document.id, DocumentAction.access_denied, user.id, None, ip_address
        )
        db.commit()
        logger.warning("User %s denied access to document %s", user.id, document.id)
        raise HTTPException(status_code=403, detail="Access denied")
    return document


class Documents(ListResponseMixin):
    @staticmethod
    def create(
        db: Session, user: User, payload: DocumentCreate, ip_address: str | None = None
    ) -> Document:
        if user.role not in CREATOR_ROLES:
            raise HTTPException(status_code=403, detail="Insufficient permissions")

        document = Document(
            title=payload.title,
            body=payload.body,
            type=payload.type,
            status=DocumentStatus.draft,
            clearance=payload.clearance,
            author_id=user.id,
            department=payload.department,
            tags=list(payload.tags),
            reference_id=payload.reference_id,
            version=1,
        )
        db.add(document)
        db.flush()
        db.add(
            DocumentVersion(
                document_id=document.id,
                version=1,
                title=document.title,
                body=document.body,
                edited_by=user.id,
                change_summary="Initial version",
            )
        )
        log_document_action(
            db, document.id, DocumentAction.created, user.id, None, ip_address
        )
        db.commit()
        db.refresh(document)
        logger.info("Created document %s", document.id)
        return document

    @staticmethod
    def get(
        db: Session, user: User, document_id: str, ip_address: str | None = None
    ) -> Document:
        document = _get_readable(db, user, document_id, ip_address)
        log_document_action(
            db, document.id, DocumentAction.read, user.id, None, ip_address
        )
        db.commit()
        return document

    @staticmethod
    def list(
        db: Session,
        user: User,
        search: str | None,
        doc_type: str | None,
        department: str | None,
        status: str | None,
        clearance: int | None,
        limit: int,
        offset: int,
    ) -> list[Document]:  # type: ignore[override]
        stmt = select(Document).where(Document.is_deleted.is_(False))
        if doc_type is not None:
            try:
                stmt = stmt.where(Document.type == DocumentType(doc_type))
            except ValueError:
                raise HTTPException(status_code=400, detail="Invalid document type")
        if status is not None:
            try:
                stmt = stmt.where(Document.status == DocumentStatus(status))
            except ValueError:
                raise HTTPException(status_code=400, detail="Invalid status")
        if department is not None:
            stmt = stmt.where(Document.department == department)
        if clearance is not None:
            stmt = stmt.where(Document.clearance <= clearance)
        stmt = stmt.order_by(Document.created_at.desc())

        visible = []
        for document in db.scalars(stmt).all():
            if search and not _matches_search(document, search):
                continue
            if can_access(user, document):
                visible.append(document)
        return visible[offset : offset + limit]

    @staticmethod
    def update(
        db: Session,
        user: User,
        document_id: str,
        payload: DocumentUpdate,
        ip_address: str | None = None,
    ) -> Document:
        document = _get_live(db, document_id)
        author_on_draft = (
            _is_author(user, document) and document.status == DocumentStatus.draft
        )
        if not author_on_draft and user.role not in ELEVATED_EDIT_ROLES:
            raise HTTPException(status_code=403, detail="Cannot edit this document")

        data = payload.model_dump(exclude_unset=True, exclude={"change_summary"})
        for key, value in data.items():
            if value is not None:
                setattr(document, key, value)
        document.version = document.version + 1
        db.add(
            DocumentVersion(
                document_id=document.id,
                version=document.version,
                title=document.title,
                body=document.body,
                edited_by=user.id,
                change_summary=payload.change_summary,
            )
        )
        log_document_action(
            db,
            document.id,
            DocumentAction.edited,
            user.id,
            f"Version {document.version}",
            ip_address,
        )
        try:
            db.commit()
        except IntegrityError:
            # Another edit claimed this version number first.
            db.rollback()
            raise HTTPException(
                status_code=409, detail="Document was modified concurrently"
            )
        db.refresh(document)
        logger.info("Edited document %s to version %s", document.id, document.version)
        return document

    @staticmethod
    def publish(
        db: Session, user: User, document_id: str, ip_address: str | None = None
    ) -> Document:
        document = _get_live(db, document_id)
        if not _is_author(user, document) and user.role not in LIFECYCLE_ROLES:
            raise HTTPException(status_code=403, detail="Cannot publish this document")
        if document.status != DocumentStatus.draft:
            raise HTTPException(
                status_code=400, detail="Only draft documents can be published"
            )
        document.status = DocumentStatus.published
        log_document_action(
            db, document.id, DocumentAction.published, user.id, None, ip_address
        )
        db.commit()
        db.refresh(document)
        logger.info("Published document %s", document.id)
        return document

    @staticmethod
    def archive(
        db: Session, user: User, document_id: str, ip_address: str | None = None
    ) -> Document:
        document = _get_live(db, document_id)
        if not _is_author(user, document) and user.role not in LIFECYCLE_ROLES:
            raise HTTPException(status_code=403, detail="Cannot archive this document")
        document.status = DocumentStatus.archived
        log_document_action(
            db, document.id, DocumentAction.archived, user.id, None, ip_address
        )
        db.commit()
        db.refresh(document)
        logger.info("Archived document %s", document.id)
        return document

    @staticmethod
    def delete(
        db: Session, user: User, document_id: str, ip_address: str | None = None
    ) -> None:
        document = _get_live(db, document_id)
        if not _is_author(user, document) and user.role != UserRole.staff:
            raise HTTPException(status_code=403, detail="Cannot delete this document")
        document.is_deleted = True
        log_document_action(
            db, document.id, DocumentAction.deleted, user.id, None, ip_address
        )
        db.commit()
        logger.info("Deleted document %s", document.id)

    @staticmethod
    def list_versions(
        db: Session, user: User, document_id: str, ip_address: str | None = None
    ) -> list[DocumentVersion]:
        document = _get_readable(db, user, document_id, ip_address)
        stmt = (
            select(DocumentVersion)
            .where(DocumentVersion.document_id == document.id)
            .order_by(DocumentVersion.version.desc())
        )
        return db.scalars(stmt).all()

    @staticmethod
    def set_permission(
        db: Session,
        user: User,
        document_id: str,
        payload: DocumentPermissionSet,
        ip_address: str | None = None,
    ) -> DocumentPermission | None:
        """Replace the override row for (type, target).

        ``is_allowed=False`` only drops the existing row.
        """
        document = _get_live(db, document_id)
        if not _is_author(user, document) and user.role != UserRole.staff:
            raise HTTPException(status_code=403, detail="Cannot manage permissions")

        existing = db.scalars(
            select(DocumentPermission).where(
                DocumentPermission.document_id == document.id,
                DocumentPermission.permission_type == payload.permission_type,
                DocumentPermission.target_id == payload.target_id,
            )
        ).all()
        for row in existing:
            db.delete(row)

        permission = None
        if payload.is_allowed:
            permission = DocumentPermission(
                document_id=document.id,
                permission_type=payload.permission_type,
                target_id=payload.target_id,
                is_allowed=True,
            )
            db.add(permission)
        log_document_action(
            db,
            document.id,
            DocumentAction.permission_changed,
            user.id,
            f"{payload.permission_type.value}:{payload.target_id}="
            f"{'allow' if payload.is_allowed else 'removed'}",
            ip_address,
        )
        db.commit()
        if permission is not None:
            db.refresh(permission)
        logger.info("Updated permissions on document %s", document.id)
        return permission

    @staticmethod
    def list_permissions(
        db: Session, user: User, document_id: str
    ) -> list[DocumentPermission]:
        document = _get_live(db, document_id)
        if not _is_author(user, document) and user.role != UserRole.staff:
            raise HTTPException(status_code=403, detail="Cannot view permissions")
        stmt = (
            select(DocumentPermission)
            .where(DocumentPermission.document_id == document.id)
            .order_by(DocumentPermission.created_at)
        )
        return db.scalars(stmt).all()

    @staticmethod
    def list_logs(db: Session, user: User, document_id: str) -> list[DocumentLog]:
        document = db.get(Document, coerce_uuid(document_id))
        if not document:
            raise HTTPException(status_code=404, detail="Document not found")
        if not _is_author(user, document) and user.role not in LOG_VIEWER_ROLES:
            raise HTTPException(status_code=403, detail="Cannot view logs")
        stmt = (
            select(DocumentLog)
            .where(DocumentLog.document_id == document.id)
            .order_by(DocumentLog.created_at.desc())
            .limit(DOCUMENT_LOG_LIMIT)
        )
        return db.scalars(stmt).all()


def _matches_search(document: Document, search: str) -> bool:
    needle = search.lower()
    if needle in document.title.lower():
        return True
    return any(needle in tag.lower() for tag in document.tags or [])


documents = Documents()
