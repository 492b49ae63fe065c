import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from intranet.config import settings
from intranet.models.admin import Module, RolePermission
from intranet.models.user import User, UserRole
from intranet.services.auth import hash_password
from intranet.services.modules import DEFAULT_MODULES
from intranet.services.permissions import DEFAULT_ROLE_PERMISSIONS

logger = logging.getLogger(__name__)


def seed_modules(db: Session) -> None:
    existing = set(db.scalars(select(Module.name)).all())
    for name, description in DEFAULT_MODULES.items():
        if name not in existing:
            db.add(Module(name=name, description=description, enabled=True, config={}))


def seed_role_permissions(db: Session) -> None:
    existing = {
        (row.role, row.permission) for row in db.scalars(select(RolePermission)).all()
    }
    for role, grants in DEFAULT_ROLE_PERMISSIONS.items():
        for permission in grants:
            if (role, permission) not in existing:
                db.add(RolePermission(role=role, permission=permission))


def seed_bootstrap_admin(db: Session) -> None:
    username = settings.bootstrap_admin_username
    password = settings.bootstrap_admin_password
    if not username or not password:
        return
    if db.scalars(select(User).where(User.username == username)).first():
        return
    db.add(
        User(
            username=username,
            password_hash=hash_password(password),
            role=UserRole.admin,
            clearance=6,
            department="Administration",
        )
    )
    logger.info("Created bootstrap admin account %s", username)


def seed_defaults(db: Session) -> None:
    seed_modules(db)
    seed_role_permissions(db)
    seed_bootstrap_admin(db)
    db.commit()
