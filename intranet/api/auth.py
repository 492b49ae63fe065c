from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from intranet.api.deps import get_db, require_user_auth
from intranet.models.user import User
from intranet.schemas.auth import LoginRequest, LoginResponse, MeResponse
from intranet.services import auth as auth_service
from intranet.services.auth import SessionClaim
from intranet.services.common import client_ip, coerce_uuid

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)):
    result = auth_service.login(
        db, payload.username, payload.password, client_ip(request)
    )
    user = result["user"]
    return {
        "token": result["token"],
        "user": {
            "id": user.id,
            "username": user.username,
            "role": user.role.value,
            "clearance": user.clearance,
            "department": user.department,
        },
    }


@router.get("/me", response_model=MeResponse)
def me(
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    user = db.get(User, coerce_uuid(claim.id))
    return {
        "id": claim.id,
        "username": claim.username,
        "role": claim.role,
        "clearance": claim.clearance,
        "department": user.department if user else None,
        "suspended": bool(user.suspended) if user else False,
    }
