from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException
from jose import jwt
from sqlalchemy import select

from intranet.config import settings
from intranet.models.admin import AuditLog
from intranet.services import auth as auth_service
from tests.conftest import PASSWORD


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = auth_service.hash_password("s3cret")
        assert hashed != "s3cret"
        assert auth_service.verify_password("s3cret", hashed)
        assert not auth_service.verify_password("wrong", hashed)

    def test_verify_garbage_hash(self):
        assert auth_service.verify_password("s3cret", "not-a-hash") is False

    def test_temporary_password_shape(self):
        temp = auth_service.generate_temporary_password()
        assert len(temp) == 8
        assert all(c.isupper() or c.isdigit() for c in temp)


class TestTokens:
    def test_round_trip_claim(self, scientist):
        claim = auth_service.decode_access_token(
            auth_service.create_access_token(scientist)
        )
        assert claim == auth_service.SessionClaim(
            id=str(scientist.id),
            username=scientist.username,
            role="scientifique",
            clearance=2,
        )

    def test_expired_token_rejected(self, scientist):
        past = datetime.now(timezone.utc) - timedelta(hours=25)
        token = jwt.encode(
            {
                "sub": str(scientist.id),
                "username": scientist.username,
                "role": "scientifique",
                "clearance": 2,
                "iat": past,
                "exp": past + timedelta(hours=24),
            },
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        assert auth_service.decode_access_token(token) is None

    def test_foreign_signature_rejected(self, scientist):
        token = jwt.encode(
            {"sub": str(scientist.id)}, "other-secret", algorithm="HS256"
        )
        assert auth_service.decode_access_token(token) is None


class TestLoginService:
    def _actions(self, db_session):
        return [row.action for row in db_session.scalars(select(AuditLog)).all()]

    def test_login_success(self, db_session, scientist):
        result = auth_service.login(db_session, scientist.username, PASSWORD, "1.2.3.4")
        assert result["user"].id == scientist.id
        assert auth_service.decode_access_token(result["token"]).id == str(scientist.id)
        assert self._actions(db_session) == ["LOGIN_SUCCESS"]

    def test_missing_fields(self, db_session):
        with pytest.raises(HTTPException) as exc:
            auth_service.login(db_session, "", "", "1.2.3.4")
        assert exc.value.status_code == 400

    def test_unknown_user(self, db_session):
        with pytest.raises(HTTPException) as exc:
            auth_service.login(db_session, "ghost", PASSWORD, "1.2.3.4")
        assert exc.value.status_code == 401
        assert self._actions(db_session) == ["LOGIN_FAILED"]

    def test_wrong_password(self, db_session, scientist):
        with pytest.raises(HTTPException) as exc:
            auth_service.login(db_session, scientist.username, "nope", "1.2.3.4")
        assert exc.value.status_code == 401
        assert self._actions(db_session) == ["LOGIN_FAILED"]

    def test_suspended_account(self, db_session, make_user):
        user = make_user(suspended=True)
        with pytest.raises(HTTPException) as exc:
            auth_service.login(db_session, user.username, PASSWORD, "1.2.3.4")
        assert exc.value.status_code == 403


class TestAuthEndpoints:
    def test_login_endpoint(self, client, scientist):
        resp = client.post(
            "/auth/login", json={"username": scientist.username, "password": PASSWORD}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["user"]["role"] == "scientifique"
        assert data["user"]["department"] == "Recherche"
        assert data["token"]

    def test_login_missing_password(self, client, scientist):
        resp = client.post("/api/auth/login", json={"username": scientist.username})
        assert resp.status_code == 400

    def test_me(self, client, auth_headers, scientist):
        resp = client.get("/auth/me", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["username"] == scientist.username
        assert resp.json()["department"] == "Recherche"

    def test_me_without_token(self, client):
        resp = client.get("/auth/me")
        assert resp.status_code == 401
        assert resp.json()["message"] == "No token provided"

    def test_me_with_invalid_token(self, client):
        resp = client.get("/auth/me", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid token"

    def test_suspended_user_blocked_on_protected_routes(
        self, client, db_session, scientist, auth_headers
    ):
        scientist.suspended = True
        db_session.commit()
        resp = client.get("/documents", headers=auth_headers)
        assert resp.status_code == 403
        assert resp.json()["message"] == "Account suspended"
