"""initial schema

Revision ID: 3f1c9a7e2b10
Revises:
Create Date: 2026-10-17 09:12:40.118204

"""

from alembic import op
import sqlalchemy as sa

revision = "3f1c9a7e2b10"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = (
    "scientifique",
    "securite",
    "administration",
    "direction",
    "ia",
    "staff",
    "admin",
)
DOCUMENT_TYPES = (
    "rapport_incident",
    "rapport_scientifique",
    "procedure",
    "note_interne",
    "document_rh",
    "journal_garde",
    "compte_rendu_reunion",
    "avis_sanction",
    "directive_site",
)
DOCUMENT_ACTIONS = (
    "created",
    "read",
    "edited",
    "published",
    "archived",
    "permission_changed",
    "deleted",
    "access_denied",
)


def _timestamp(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=True)


def upgrade() -> None:
    # Accounts
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.Enum(*USER_ROLES, name="userrole"), nullable=False),
        sa.Column("clearance", sa.Integer(), nullable=False),
        sa.Column("department", sa.String(length=120), nullable=False),
        sa.Column("suspended", sa.Boolean(), nullable=True),
        _timestamp(),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )
    op.create_index("ix_users_department", "users", ["department"])

    # Documents
    op.create_table(
        "documents",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("type", sa.Enum(*DOCUMENT_TYPES, name="documenttype"), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "draft",
                "published",
                "archived",
                "in_validation",
                "refused",
                name="documentstatus",
            ),
            nullable=True,
        ),
        sa.Column("clearance", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("department", sa.String(length=120), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("reference_id", sa.String(length=120), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=True),
        _timestamp(),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_documents_author_id", "documents", ["author_id"])
    op.create_index("ix_documents_status", "documents", ["status"])
    op.create_index("ix_documents_department", "documents", ["department"])

    op.create_table(
        "document_versions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "document_id", sa.Uuid(), sa.ForeignKey("documents.id"), nullable=False
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("edited_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("change_summary", sa.Text(), nullable=True),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "document_id", "version", name="uq_document_versions_doc_version"
        ),
    )
    op.create_index(
        "ix_document_versions_document_id", "document_versions", ["document_id"]
    )

    op.create_table(
        "document_permissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "document_id", sa.Uuid(), sa.ForeignKey("documents.id"), nullable=False
        ),
        sa.Column(
            "permission_type",
            sa.Enum(
                "role", "department", "whitelist", "blacklist", name="permissiontype"
            ),
            nullable=False,
        ),
        sa.Column("target_id", sa.String(length=255), nullable=False),
        sa.Column("is_allowed", sa.Boolean(), nullable=True),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_document_permissions_natural_key",
        "document_permissions",
        ["document_id", "permission_type", "target_id"],
    )

    op.create_table(
        "document_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "document_id", sa.Uuid(), sa.ForeignKey("documents.id"), nullable=False
        ),
        sa.Column(
            "action", sa.Enum(*DOCUMENT_ACTIONS, name="documentaction"), nullable=False
        ),
        sa.Column("actor_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_document_logs_document_id", "document_logs", ["document_id"])
    op.create_index(
        "ix_document_logs_actor_action", "document_logs", ["actor_id", "action"]
    )

    # Messaging
    op.create_table(
        "message_aliases",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=True),
        sa.Column("admin_only", sa.Boolean(), nullable=True),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "user_alias_permissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "alias_id", sa.Uuid(), sa.ForeignKey("message_aliases.id"), nullable=False
        ),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "alias_id", name="uq_user_alias_permissions"),
    )

    op.create_table(
        "messages",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("sender_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "recipient_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("subject", sa.String(length=500), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column(
            "priority",
            sa.Enum("information", "alerte", "critique", name="messagepriority"),
            nullable=True,
        ),
        sa.Column(
            "sender_alias_id",
            sa.Uuid(),
            sa.ForeignKey("message_aliases.id"),
            nullable=True,
        ),
        sa.Column("thread_id", sa.Uuid(), nullable=True),
        sa.Column("is_draft", sa.Boolean(), nullable=True),
        _timestamp(),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_messages_sender_created", "messages", ["sender_id", "created_at"]
    )

    op.create_table(
        "mailboxes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "message_id", sa.Uuid(), sa.ForeignKey("messages.id"), nullable=False
        ),
        sa.Column(
            "folder",
            sa.Enum(
                "inbox", "sent", "drafts", "archived", "trash", name="mailboxfolder"
            ),
            nullable=False,
        ),
        sa.Column("is_read", sa.Boolean(), nullable=True),
        sa.Column("archived", sa.Boolean(), nullable=True),
        sa.Column("deleted", sa.Boolean(), nullable=True),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "user_id", "message_id", "folder", name="uq_mailboxes_user_message_folder"
        ),
    )
    op.create_index("ix_mailboxes_user_folder", "mailboxes", ["user_id", "folder"])

    op.create_table(
        "message_attachments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "message_id", sa.Uuid(), sa.ForeignKey("messages.id"), nullable=False
        ),
        sa.Column(
            "document_id", sa.Uuid(), sa.ForeignKey("documents.id"), nullable=False
        ),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "user_message_restrictions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "restriction_type",
            sa.Enum("send_blocked", name="restrictiontype"),
            nullable=False,
        ),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("blocked_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_user_message_restrictions_user_id", "user_message_restrictions", ["user_id"]
    )

    # Administration
    op.create_table(
        "rh_notes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("author_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("note", sa.Text(), nullable=False),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rh_notes_user_id", "rh_notes", ["user_id"])

    op.create_table(
        "logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_logs_action", "logs", ["action"])
    op.create_index("ix_logs_created_at", "logs", ["created_at"])

    op.create_table(
        "modules",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=80), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=True),
        sa.Column("config", sa.JSON(), nullable=True),
        _timestamp(),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "role_permissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.String(length=80), nullable=False),
        sa.Column("permission", sa.String(length=120), nullable=False),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("role", "permission", name="uq_role_permissions"),
    )

    op.create_table(
        "user_permissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("permission", sa.String(length=120), nullable=False),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=True),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "permission", name="uq_user_permissions"),
    )

    op.create_table(
        "announcements",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "priority",
            sa.Enum("low", "medium", "high", "critical", name="announcementpriority"),
            nullable=True,
        ),
        sa.Column(
            "scope",
            sa.Enum("global", "department", "clearance", name="announcementscope"),
            nullable=True,
        ),
        sa.Column("scope_value", sa.String(length=120), nullable=True),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("valid_from", sa.DateTime(timezone=True), nullable=True),
        sa.Column("valid_to", sa.DateTime(timezone=True), nullable=True),
        _timestamp(),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("announcements")
    op.drop_table("user_permissions")
    op.drop_table("role_permissions")
    op.drop_table("modules")
    op.drop_index("ix_logs_created_at", table_name="logs")
    op.drop_index("ix_logs_action", table_name="logs")
    op.drop_table("logs")
    op.drop_index("ix_rh_notes_user_id", table_name="rh_notes")
    op.drop_table("rh_notes")
    op.drop_index(
        "ix_user_message_restrictions_user_id", table_name="user_message_restrictions"
    )
    op.drop_table("user_message_restrictions")
    op.drop_table("message_attachments")
    op.drop_index("ix_mailboxes_user_folder", table_name="mailboxes")
    op.drop_table("mailboxes")
    op.drop_index("ix_messages_sender_created", table_name="messages")
    op.drop_table("messages")
    op.drop_table("user_alias_permissions")
    op.drop_table("message_aliases")
    op.drop_index("ix_document_logs_actor_action", table_name="document_logs")
    op.drop_index("ix_document_logs_document_id", table_name="document_logs")
    op.drop_table("document_logs")
    op.drop_index(
        "ix_document_permissions_natural_key", table_name="document_permissions"
    )
    op.drop_table("document_permissions")
    op.drop_index(
        "ix_document_versions_document_id", table_name="document_versions"
    )
    op.drop_table("document_versions")
    op.drop_index("ix_documents_department", table_name="documents")
    op.drop_index("ix_documents_status", table_name="documents")
    op.drop_index("ix_documents_author_id", table_name="documents")
    op.drop_table("documents")
    op.drop_index("ix_users_department", table_name="users")
    op.drop_table("users")
