from intranet.db import get_db
from intranet.services.auth_dependencies import (
    get_current_user,
    require_module,
    require_role,
    require_user_auth,
)

__all__ = [
    "get_current_user",
    "get_db",
    "require_module",
    "require_role",
    "require_user_auth",
]
