from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException
from jose import JWTError, jwt
from passlib.hash import pbkdf2_sha256 as hasher
from sqlalchemy import select
from sqlalchemy.orm import Session

from intranet.config import settings
from intranet.models.user import User
from intranet.services.audit import log_action

logger = logging.getLogger(__name__)

_TEMP_PASSWORD_ALPHABET = string.ascii_uppercase + string.digits
TEMP_PASSWORD_LENGTH = 8


@dataclass(frozen=True)
class SessionClaim:
    id: str
    username: str
    role: str
    clearance: int


def hash_password(password: str) -> str:
    return hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return hasher.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def generate_temporary_password() -> str:
    return "".join(
        secrets.choice(_TEMP_PASSWORD_ALPHABET) for _ in range(TEMP_PASSWORD_LENGTH)
    )


def create_access_token(user: User) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role.value,
        "clearance": user.clearance,
        "iat": now,
        "exp": now + timedelta(hours=settings.jwt_expire_hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> SessionClaim | None:
    """Return the claim carried by ``token``, or None when it does not verify."""
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
        return SessionClaim(
            id=str(payload["sub"]),
            username=str(payload["username"]),
            role=str(payload["role"]),
            clearance=int(payload["clearance"]),
        )
    except (JWTError, KeyError, TypeError, ValueError):
        return None


def login(db: Session, username: str, password: str, ip_address: str) -> dict:
    if not username or not password:
        raise HTTPException(status_code=400, detail="Username and password required")

    user = db.scalars(select(User).where(User.username == username)).first()
    if not user:
        log_action(
            db, "LOGIN_FAILED", None, f"Username not found: {username}", ip_address
        )
        db.commit()
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if user.suspended:
        log_action(db, "LOGIN_FAILED", user.id, "Account suspended", ip_address)
        db.commit()
        raise HTTPException(status_code=403, detail="Account suspended")

    if not verify_password(password, user.password_hash):
        log_action(db, "LOGIN_FAILED", user.id, "Invalid password", ip_address)
        db.commit()
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(user)
    log_action(db, "LOGIN_SUCCESS", user.id, None, ip_address)
    db.commit()
    logger.info("User %s logged in", user.id)
    return {"token": token, "user": user}
