from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from intranet.api.deps import get_current_user, get_db
from intranet.models.user import User
from intranet.schemas.dashboard import AnnouncementCreate, AnnouncementRead, Dashboard
from intranet.services import dashboard as dashboard_service
from intranet.services.common import client_ip

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=Dashboard)
def get_dashboard(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return dashboard_service.dashboards.build(db, user, client_ip(request))


@router.post(
    "/announcements",
    response_model=AnnouncementRead,
    status_code=status.HTTP_201_CREATED,
)
def create_announcement(
    payload: AnnouncementCreate,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return dashboard_service.dashboards.create_announcement(
        db, user, payload, client_ip(request)
    )
