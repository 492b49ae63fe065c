import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from intranet.db import Base


class MessagePriority(enum.Enum):
    information = "information"
    alerte = "alerte"
    critique = "critique"


class MailboxFolder(enum.Enum):
    inbox = "inbox"
    sent = "sent"
    drafts = "drafts"
    archived = "archived"
    trash = "trash"


class RestrictionType(enum.Enum):
    send_blocked = "send_blocked"


# ---------------------------------------------------------------------------
# Message bodies (shared by every participant)
# ---------------------------------------------------------------------------


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (Index("ix_messages_sender_created", "sender_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    sender_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    recipient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[MessagePriority] = mapped_column(
        Enum(MessagePriority), default=MessagePriority.information
    )
    sender_alias_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("message_aliases.id")
    )
    thread_id: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    is_draft: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    sender = relationship("User", foreign_keys=[sender_id])
    recipient = relationship("User", foreign_keys=[recipient_id])
    sender_alias = relationship("MessageAlias")
    mailboxes = relationship("Mailbox", back_populates="message")
    attachments = relationship("MessageAttachment", back_populates="message")


# ---------------------------------------------------------------------------
# Mailboxes: per (user, message, folder) state
# ---------------------------------------------------------------------------


class Mailbox(Base):
    __tablename__ = "mailboxes"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "message_id", "folder", name="uq_mailboxes_user_message_folder"
        ),
        Index("ix_mailboxes_user_folder", "user_id", "folder"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    message_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("messages.id"), nullable=False
    )
    folder: Mapped[MailboxFolder] = mapped_column(Enum(MailboxFolder), nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    archived: Mapped[bool] = mapped_column(Boolean, default=False)
    deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    message = relationship("Message", back_populates="mailboxes")


class MessageAttachment(Base):
    __tablename__ = "message_attachments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    message_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("messages.id"), nullable=False
    )
    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("documents.id"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    message = relationship("Message", back_populates="attachments")
    document = relationship("Document")


# ---------------------------------------------------------------------------
# Sender aliases
# ---------------------------------------------------------------------------


class MessageAlias(Base):
    __tablename__ = "message_aliases"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    admin_only: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    grants = relationship("UserAliasPermission", back_populates="alias")


class UserAliasPermission(Base):
    __tablename__ = "user_alias_permissions"
    __table_args__ = (
        UniqueConstraint("user_id", "alias_id", name="uq_user_alias_permissions"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    alias_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("message_aliases.id"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    alias = relationship("MessageAlias", back_populates="grants")


# ---------------------------------------------------------------------------
# Anti-abuse restrictions
# ---------------------------------------------------------------------------


class MessageRestriction(Base):
    __tablename__ = "user_message_restrictions"
    __table_args__ = (Index("ix_user_message_restrictions_user_id", "user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    restriction_type: Mapped[RestrictionType] = mapped_column(
        Enum(RestrictionType), nullable=False
    )
    reason: Mapped[str | None] = mapped_column(Text)
    blocked_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
