from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from intranet.api.deps import get_current_user, get_db
from intranet.models.user import User
from intranet.schemas.common import StatusResponse
from intranet.schemas.message import (
    DraftSave,
    FolderMove,
    MessageAck,
    MessageDetail,
    MessageItem,
    MessagePage,
    MessageSend,
    UnreadCount,
)
from intranet.services import messages as message_service
from intranet.services.common import client_ip

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/inbox", response_model=MessagePage)
def list_folder(
    folder: str = "inbox",
    page: int = Query(default=0, ge=0),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return message_service.messages.list_folder(db, user, folder, page)


@router.get("/folders", response_model=dict[str, int])
def folder_counts(
    user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    return message_service.messages.folder_counts(db, user)


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(
    user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    return {"unread": message_service.messages.unread_count(db, user)}


@router.get("/search/query", response_model=list[MessageItem])
def search_messages(
    q: str = "",
    folder: str = "inbox",
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return message_service.messages.search(db, user, q, folder)


@router.post("/send", response_model=MessageAck, status_code=status.HTTP_201_CREATED)
def send_message(
    payload: MessageSend,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    message = message_service.messages.send(db, user, payload, client_ip(request))
    return {"id": message.id, "message": "Message sent successfully"}


@router.post("/draft", response_model=MessageAck)
def save_draft(
    payload: DraftSave,
    response: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    draft, created = message_service.messages.save_draft(db, user, payload)
    if created:
        response.status_code = status.HTTP_201_CREATED
        return {"id": draft.id, "message": "Draft saved"}
    return {"id": draft.id, "message": "Draft updated"}


@router.get("/{message_id}", response_model=MessageDetail)
def get_message(
    message_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return message_service.messages.get(db, user, message_id)


@router.patch("/{message_id}/read", response_model=StatusResponse)
def mark_read(
    message_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    message_service.messages.set_read(db, user, message_id, True)
    return {"message": "Marked as read"}


@router.patch("/{message_id}/unread", response_model=StatusResponse)
def mark_unread(
    message_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    message_service.messages.set_read(db, user, message_id, False)
    return {"message": "Marked as unread"}


@router.patch("/{message_id}/folder", response_model=StatusResponse)
def move_message(
    message_id: str,
    payload: FolderMove,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    message_service.messages.move_to_folder(db, user, message_id, payload.folder)
    return {"message": "Message moved"}


@router.delete("/{message_id}", response_model=StatusResponse)
def delete_message(
    message_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    message_service.messages.delete(db, user, message_id, client_ip(request))
    return {"message": "Message deleted"}
