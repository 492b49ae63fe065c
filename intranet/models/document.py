import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from intranet.db import Base


class DocumentType(enum.Enum):
    rapport_incident = "rapport_incident"
    rapport_scientifique = "rapport_scientifique"
    procedure = "procedure"
    note_interne = "note_interne"
    document_rh = "document_rh"
    journal_garde = "journal_garde"
    compte_rendu_reunion = "compte_rendu_reunion"
    avis_sanction = "avis_sanction"
    directive_site = "directive_site"


class DocumentStatus(enum.Enum):
    draft = "draft"
    published = "published"
    archived = "archived"
    in_validation = "in_validation"
    refused = "refused"


class PermissionType(enum.Enum):
    role = "role"
    department = "department"
    whitelist = "whitelist"
    blacklist = "blacklist"


class DocumentAction(enum.Enum):
    created = "created"
    read = "read"
    edited = "edited"
    published = "published"
    archived = "archived"
    permission_changed = "permission_changed"
    deleted = "deleted"
    access_denied = "access_denied"


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_author_id", "author_id"),
        Index("ix_documents_status", "status"),
        Index("ix_documents_department", "department"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[DocumentType] = mapped_column(Enum(DocumentType), nullable=False)
    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus), default=DocumentStatus.draft
    )
    clearance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    department: Mapped[str] = mapped_column(String(120), nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    reference_id: Mapped[str | None] = mapped_column(String(120))
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    author = relationship("User", foreign_keys=[author_id])
    versions = relationship(
        "DocumentVersion",
        back_populates="document",
        order_by="DocumentVersion.version.desc()",
    )
    permissions = relationship("DocumentPermission", back_populates="document")

    @property
    def author_username(self) -> str | None:
        return self.author.username if self.author else None


# ---------------------------------------------------------------------------
# Document versions (immutable, no updated_at)
# ---------------------------------------------------------------------------


class DocumentVersion(Base):
    __tablename__ = "document_versions"
    __table_args__ = (
        UniqueConstraint(
            "document_id", "version", name="uq_document_versions_doc_version"
        ),
        Index("ix_document_versions_document_id", "document_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("documents.id"), nullable=False
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    edited_by: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    change_summary: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    document = relationship("Document", back_populates="versions")
    editor = relationship("User", foreign_keys=[edited_by])

    @property
    def edited_by_username(self) -> str | None:
        return self.editor.username if self.editor else None


# ---------------------------------------------------------------------------
# Per-document permission overrides
# ---------------------------------------------------------------------------


class DocumentPermission(Base):
    __tablename__ = "document_permissions"
    __table_args__ = (
        Index(
            "ix_document_permissions_natural_key",
            "document_id",
            "permission_type",
            "target_id",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("documents.id"), nullable=False
    )
    permission_type: Mapped[PermissionType] = mapped_column(
        Enum(PermissionType), nullable=False
    )
    target_id: Mapped[str] = mapped_column(String(255), nullable=False)
    is_allowed: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    document = relationship("Document", back_populates="permissions")


# ---------------------------------------------------------------------------
# Document audit trail (append-only)
# ---------------------------------------------------------------------------


class DocumentLog(Base):
    __tablename__ = "document_logs"
    __table_args__ = (
        Index("ix_document_logs_document_id", "document_id"),
        Index("ix_document_logs_actor_action", "actor_id", "action"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("documents.id"), nullable=False
    )
    action: Mapped[DocumentAction] = mapped_column(
        Enum(DocumentAction), nullable=False
    )
    actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    details: Mapped[str | None] = mapped_column(Text)
    ip_address: Mapped[str | None] = mapped_column(String(64))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    actor = relationship("User", foreign_keys=[actor_id])

    @property
    def actor_username(self) -> str | None:
        return self.actor.username if self.actor else None
