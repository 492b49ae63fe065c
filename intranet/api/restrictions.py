from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from intranet.api.deps import get_current_user, get_db
from intranet.models.user import User
from intranet.schemas.common import StatusResponse
from intranet.schemas.message import RestrictionCreate, RestrictionRead
from intranet.services import restrictions as restriction_service
from intranet.services.common import client_ip

router = APIRouter(prefix="/restrictions", tags=["restrictions"])


@router.get("/user/{user_id}", response_model=list[RestrictionRead])
def list_restrictions(
    user_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return restriction_service.restrictions.list_for_user(db, user, user_id)


@router.post("", response_model=RestrictionRead, status_code=status.HTTP_201_CREATED)
def add_restriction(
    payload: RestrictionCreate,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return restriction_service.restrictions.add(db, user, payload, client_ip(request))


@router.delete("/{restriction_id}", response_model=StatusResponse)
def remove_restriction(
    restriction_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    restriction_service.restrictions.remove(
        db, user, restriction_id, client_ip(request)
    )
    return {"message": "Restriction removed"}
