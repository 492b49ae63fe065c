import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DISCORD_WEBHOOK_URL", "https://discord.test/webhook")

import uuid
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import intranet.models  # noqa: F401
from intranet.db import Base, get_db
from intranet.main import app
from intranet.models.admin import Module
from intranet.models.document import Document, DocumentStatus, DocumentType
from intranet.models.user import User, UserRole
from intranet.services.auth import create_access_token, hash_password

PASSWORD = "correct-horse"


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def client(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def event_delay():
    with patch("intranet.tasks.events.process_event.delay") as mocked:
        yield mocked


@pytest.fixture()
def make_user(db_session):
    def _make(
        role: str = "scientifique",
        clearance: int = 2,
        department: str = "Recherche",
        username: str | None = None,
        suspended: bool = False,
    ) -> User:
        user = User(
            username=username or f"{role}-{uuid.uuid4().hex[:8]}",
            password_hash=hash_password(PASSWORD),
            role=UserRole(role),
            clearance=clearance,
            department=department,
            suspended=suspended,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_document(db_session):
    def _make(author: User, **overrides) -> Document:
        defaults = dict(
            title="Rapport de garde",
            body="Rien à signaler.",
            type=DocumentType.journal_garde,
            status=DocumentStatus.draft,
            clearance=0,
            author_id=author.id,
            department=author.department,
            tags=[],
            version=1,
        )
        defaults.update(overrides)
        document = Document(**defaults)
        db_session.add(document)
        db_session.commit()
        db_session.refresh(document)
        return document

    return _make


@pytest.fixture()
def auth_headers_for():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers


@pytest.fixture()
def scientist(make_user):
    return make_user("scientifique", clearance=2, department="Recherche")


@pytest.fixture()
def staff_user(make_user):
    return make_user("staff", clearance=6, department="Supervision")


@pytest.fixture()
def admin_user(make_user):
    return make_user("admin", clearance=6, department="Administration")


@pytest.fixture()
def auth_headers(auth_headers_for, scientist):
    return auth_headers_for(scientist)


@pytest.fixture()
def disabled_module(db_session):
    def _disable(name: str) -> Module:
        module = Module(name=name, enabled=False, config={})
        db_session.add(module)
        db_session.commit()
        return module

    return _disable
