from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from intranet.api.deps import get_current_user, get_db
from intranet.config import settings
from intranet.models.user import User
from intranet.schemas.common import ListResponse
from intranet.schemas.document import (
    DocumentCreate,
    DocumentLogRead,
    DocumentPermissionRead,
    DocumentPermissionSet,
    DocumentRead,
    DocumentUpdate,
    DocumentVersionRead,
)
from intranet.services import documents as doc_service
from intranet.services.common import client_ip

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("", response_model=ListResponse[DocumentRead])
def list_documents(
    search: str | None = None,
    doc_type: str | None = Query(default=None, alias="type"),
    department: str | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    clearance: int | None = Query(default=None, ge=0, le=6),
    limit: int = Query(default=settings.documents_page_size, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return doc_service.documents.list_response(
        db,
        user,
        search,
        doc_type,
        department,
        status_filter,
        clearance,
        limit,
        offset,
    )


@router.post("", response_model=DocumentRead, status_code=status.HTTP_201_CREATED)
def create_document(
    payload: DocumentCreate,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return doc_service.documents.create(db, user, payload, client_ip(request))


@router.get("/{document_id}", response_model=DocumentRead)
def get_document(
    document_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return doc_service.documents.get(db, user, document_id, client_ip(request))


@router.patch("/{document_id}", response_model=DocumentRead)
def update_document(
    document_id: str,
    payload: DocumentUpdate,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return doc_service.documents.update(
        db, user, document_id, payload, client_ip(request)
    )


@router.post("/{document_id}/publish", response_model=DocumentRead)
def publish_document(
    document_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return doc_service.documents.publish(db, user, document_id, client_ip(request))


@router.post("/{document_id}/archive", response_model=DocumentRead)
def archive_document(
    document_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return doc_service.documents.archive(db, user, document_id, client_ip(request))


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    document_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    doc_service.documents.delete(db, user, document_id, client_ip(request))


@router.get("/{document_id}/versions", response_model=list[DocumentVersionRead])
def list_versions(
    document_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return doc_service.documents.list_versions(
        db, user, document_id, client_ip(request)
    )


@router.post(
    "/{document_id}/permissions", response_model=DocumentPermissionRead | None
)
def set_permission(
    document_id: str,
    payload: DocumentPermissionSet,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return doc_service.documents.set_permission(
        db, user, document_id, payload, client_ip(request)
    )


@router.get(
    "/{document_id}/permissions", response_model=list[DocumentPermissionRead]
)
def list_permissions(
    document_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return doc_service.documents.list_permissions(db, user, document_id)


@router.get("/{document_id}/logs", response_model=list[DocumentLogRead])
def list_logs(
    document_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return doc_service.documents.list_logs(db, user, document_id)
