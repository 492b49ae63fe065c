from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from intranet.models.admin import Module
from intranet.services.audit import log_action
from intranet.services.auth import SessionClaim
from intranet.services.common import coerce_uuid

logger = logging.getLogger(__name__)

DEFAULT_MODULES = {
    "messagerie": "Messagerie interne",
    "documents": "Gestion documentaire",
    "annuaire": "Annuaire du personnel",
    "rh": "Ressources humaines",
}


def _require_admin(claim: SessionClaim) -> None:
    if claim.role != "admin":
        raise HTTPException(status_code=403, detail="Admin only")


def _get_module(db: Session, name: str) -> Module:
    module = db.scalars(select(Module).where(Module.name == name)).first()
    if not module:
        raise HTTPException(status_code=404, detail="Module not found")
    return module


def is_enabled(db: Session, name: str) -> bool:
    """A module without a row is enabled."""
    module = db.scalars(select(Module).where(Module.name == name)).first()
    return module is None or bool(module.enabled)


class Modules:
    @staticmethod
    def list(db: Session) -> list[Module]:
        return db.scalars(select(Module).order_by(Module.name)).all()

    @staticmethod
    def set_enabled(
        db: Session,
        claim: SessionClaim,
        name: str,
        enabled: bool,
        ip_address: str | None = None,
    ) -> Module:
        _require_admin(claim)
        module = _get_module(db, name)
        module.enabled = enabled
        log_action(
            db,
            "MODULE_UPDATE",
            coerce_uuid(claim.id),
            f"Module: {name}, Status: {'enabled' if enabled else 'disabled'}",
            ip_address,
        )
        db.commit()
        db.refresh(module)
        logger.info("Module %s enabled=%s", name, enabled)
        return module

    @staticmethod
    def set_config(
        db: Session,
        claim: SessionClaim,
        name: str,
        config: dict,
        ip_address: str | None = None,
    ) -> Module:
        _require_admin(claim)
        module = _get_module(db, name)
        module.config = dict(config)
        log_action(
            db,
            "MODULE_CONFIG_UPDATE",
            coerce_uuid(claim.id),
            f"Module: {name}",
            ip_address,
        )
        db.commit()
        db.refresh(module)
        logger.info("Updated config of module %s", name)
        return module


modules = Modules()
