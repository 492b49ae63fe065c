from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from intranet.api.deps import get_db, require_user_auth
from intranet.schemas.common import StatusResponse
from intranet.schemas.rbac import UserPermissionGrant, UserPermissions
from intranet.services import permissions as permission_service
from intranet.services.auth import SessionClaim
from intranet.services.common import client_ip

router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get("/roles", response_model=dict[str, list[str]])
def list_role_permissions(
    claim: SessionClaim = Depends(require_user_auth), db: Session = Depends(get_db)
):
    return permission_service.permissions.list_roles(db, claim)


@router.post("/roles/{role}/grant/{permission}", response_model=StatusResponse)
def grant_role_permission(
    role: str,
    permission: str,
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    permission_service.permissions.grant_role(
        db, claim, role, permission, client_ip(request)
    )
    return {"message": "Permission granted"}


@router.delete("/roles/{role}/revoke/{permission}", response_model=StatusResponse)
def revoke_role_permission(
    role: str,
    permission: str,
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    permission_service.permissions.revoke_role(
        db, claim, role, permission, client_ip(request)
    )
    return {"message": "Permission revoked"}


@router.get("/users/{user_id}", response_model=UserPermissions)
def get_user_permissions(user_id: str, db: Session = Depends(get_db)):
    return permission_service.permissions.for_user(db, user_id)


@router.post("/users/{user_id}/grant/{permission}", response_model=StatusResponse)
def grant_user_permission(
    user_id: str,
    permission: str,
    request: Request,
    payload: UserPermissionGrant | None = None,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    permission_service.permissions.grant_user(
        db,
        claim,
        user_id,
        permission,
        payload.valid_until if payload else None,
        client_ip(request),
    )
    return {"message": "Permission granted to user"}


@router.delete("/users/{user_id}/revoke/{permission}", response_model=StatusResponse)
def revoke_user_permission(
    user_id: str,
    permission: str,
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    permission_service.permissions.revoke_user(
        db, claim, user_id, permission, client_ip(request)
    )
    return {"message": "Permission revoked from user"}
