import uuid
from datetime import datetime, timezone

from fastapi import HTTPException


def coerce_uuid(value):
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid identifier: {value}")


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive values (SQLite drops the offset on read)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def apply_pagination(query, limit, offset):
    return query.limit(limit).offset(offset)


def client_ip(request) -> str:
    if request is None or request.client is None:
        return "unknown"
    return request.client.host
