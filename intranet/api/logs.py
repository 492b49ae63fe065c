from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from intranet.api.deps import get_db, require_user_auth
from intranet.schemas.audit import AuditLogRead
from intranet.services import audit as audit_service
from intranet.services.auth import SessionClaim

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("", response_model=list[AuditLogRead])
def list_logs(
    action: str | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return audit_service.audit_logs.list(db, claim.role, action, limit, offset)
