from __future__ import annotations

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from intranet.db import get_db
from intranet.models.user import User
from intranet.services.auth import SessionClaim, decode_access_token
from intranet.services.common import coerce_uuid
from intranet.services.modules import is_enabled

bearer = HTTPBearer(auto_error=False)


def require_user_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> SessionClaim:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="No token provided")
    claim = decode_access_token(credentials.credentials)
    if claim is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return claim


def require_role(*roles: str):
    allowed = set(roles)

    def _check(claim: SessionClaim = Depends(require_user_auth)) -> SessionClaim:
        if claim.role not in allowed:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return claim

    return _check


def get_current_user(
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
) -> User:
    """Load the stored account behind the claim (department is not in the token)."""
    user = db.get(User, coerce_uuid(claim.id))
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token")
    if user.suspended:
        raise HTTPException(status_code=403, detail="Account suspended")
    return user


def require_module(name: str):
    def _check(db: Session = Depends(get_db)) -> None:
        if not is_enabled(db, name):
            raise HTTPException(status_code=403, detail="Module disabled")

    return _check
