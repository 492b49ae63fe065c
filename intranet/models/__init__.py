from intranet.models.user import User, UserRole  # noqa: F401
from intranet.models.document import (  # noqa: F401
    Document,
    DocumentAction,
    DocumentLog,
    DocumentPermission,
    DocumentStatus,
    DocumentType,
    DocumentVersion,
    PermissionType,
)
from intranet.models.message import (  # noqa: F401
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
from intranet.models.admin import (  # noqa: F401
    Announcement,
    AnnouncementPriority,
    AnnouncementScope,
    AuditLog,
    HRNote,
    Module,
    RolePermission,
    UserPermission,
)
