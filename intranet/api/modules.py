from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from intranet.api.deps import get_db, require_user_auth
from intranet.schemas.module import ModuleConfigUpdate, ModuleRead, ModuleToggle
from intranet.services import modules as module_service
from intranet.services.auth import SessionClaim
from intranet.services.common import client_ip

router = APIRouter(prefix="/modules", tags=["modules"])


@router.get("", response_model=list[ModuleRead])
def list_modules(db: Session = Depends(get_db)):
    return module_service.modules.list(db)


@router.patch("/{name}", response_model=ModuleRead)
def toggle_module(
    name: str,
    payload: ModuleToggle,
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return module_service.modules.set_enabled(
        db, claim, name, payload.enabled, client_ip(request)
    )


@router.put("/{name}", response_model=ModuleRead)
def update_module_config(
    name: str,
    payload: ModuleConfigUpdate,
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return module_service.modules.set_config(
        db, claim, name, payload.config, client_ip(request)
    )
