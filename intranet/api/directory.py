from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from intranet.api.deps import get_db
from intranet.schemas.directory import DirectoryEntry
from intranet.services import directory as directory_service

router = APIRouter(prefix="/annuaire", tags=["annuaire"])


@router.get("", response_model=list[DirectoryEntry])
def list_directory(db: Session = Depends(get_db)):
    return directory_service.directory.list(db)


@router.get("/search", response_model=list[DirectoryEntry])
def search_directory(q: str | None = None, db: Session = Depends(get_db)):
    return directory_service.directory.search(db, q)
