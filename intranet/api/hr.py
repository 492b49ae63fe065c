from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from intranet.api.deps import get_db, require_user_auth
from intranet.schemas.common import StatusResponse
from intranet.schemas.hr import (
    ClearanceUpdate,
    HRNoteCreate,
    HRNoteRead,
    PasswordReset,
    RoleUpdate,
    SuspendUpdate,
    UserCreate,
    UserCreated,
    UserFiche,
    UserRead,
)
from intranet.services import hr as hr_service
from intranet.services.auth import SessionClaim
from intranet.services.common import client_ip

router = APIRouter(prefix="/rh", tags=["rh"])


@router.get("/users", response_model=list[UserRead])
def list_users(
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return hr_service.human_resources.list_users(db, claim, client_ip(request))


@router.post("/users", response_model=UserCreated, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    user, temporary_password = hr_service.human_resources.create_user(
        db, claim, payload, client_ip(request)
    )
    return {
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "clearance": user.clearance,
        "department": user.department,
        "suspended": user.suspended,
        "created_at": user.created_at,
        "temporary_password": temporary_password,
    }


@router.get("/users/{user_id}", response_model=UserFiche)
def get_user(
    user_id: str,
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return hr_service.human_resources.get_fiche(db, claim, user_id, client_ip(request))


@router.delete("/users/{user_id}", response_model=StatusResponse)
def delete_user(
    user_id: str,
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    hr_service.human_resources.delete_user(db, claim, user_id, client_ip(request))
    return {"message": "User deleted successfully"}


@router.patch("/clearance/{user_id}", response_model=UserRead)
def set_clearance(
    user_id: str,
    payload: ClearanceUpdate,
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return hr_service.human_resources.set_clearance(
        db, claim, user_id, payload.clearance, client_ip(request)
    )


@router.post(
    "/notes/{user_id}", response_model=HRNoteRead, status_code=status.HTTP_201_CREATED
)
def add_note(
    user_id: str,
    payload: HRNoteCreate,
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return hr_service.human_resources.add_note(
        db, claim, user_id, payload.content, client_ip(request)
    )


@router.get("/notes/{user_id}", response_model=list[HRNoteRead])
def list_notes(
    user_id: str,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return hr_service.human_resources.list_notes(db, claim, user_id)


@router.patch("/suspend/{user_id}", response_model=UserRead)
def set_suspended(
    user_id: str,
    payload: SuspendUpdate,
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return hr_service.human_resources.set_suspended(
        db, claim, user_id, payload.suspended, client_ip(request)
    )


@router.patch("/role/{user_id}", response_model=UserRead)
def set_role(
    user_id: str,
    payload: RoleUpdate,
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return hr_service.human_resources.set_role(
        db, claim, user_id, payload.role, client_ip(request)
    )


@router.post("/reset-password/{user_id}", response_model=PasswordReset)
def reset_password(
    user_id: str,
    request: Request,
    claim: SessionClaim = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    temporary_password = hr_service.human_resources.reset_password(
        db, claim, user_id, client_ip(request)
    )
    return {
        "message": "Password reset successfully",
        "temporary_password": temporary_password,
    }
