from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from intranet.api.deps import get_current_user, get_db
from intranet.models.user import User
from intranet.schemas.common import StatusResponse
from intranet.schemas.message import AliasCreate, AliasGrant, AliasRead
from intranet.services import aliases as alias_service
from intranet.services.common import client_ip

router = APIRouter(prefix="/aliases", tags=["aliases"])


@router.get("", response_model=list[AliasRead])
def list_aliases(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return alias_service.aliases.list(db, user)


@router.post("", response_model=AliasRead, status_code=status.HTTP_201_CREATED)
def create_alias(
    payload: AliasCreate,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return alias_service.aliases.create(db, user, payload, client_ip(request))


@router.post("/{alias_id}/grant", response_model=StatusResponse)
def grant_alias(
    alias_id: str,
    payload: AliasGrant,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    alias_service.aliases.grant(db, user, alias_id, payload.user_id, client_ip(request))
    return {"message": "Permission granted"}


@router.post("/{alias_id}/revoke", response_model=StatusResponse)
def revoke_alias(
    alias_id: str,
    payload: AliasGrant,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    alias_service.aliases.revoke(
        db, user, alias_id, payload.user_id, client_ip(request)
    )
    return {"message": "Permission revoked"}


@router.patch("/{alias_id}/disable", response_model=AliasRead)
def disable_alias(
    alias_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return alias_service.aliases.disable(db, user, alias_id, client_ip(request))
