"""
Pytest configuration and fixtures.

Tests run against an in-memory SQLite database and a fake identity
provider, so no PostgreSQL or network access is required.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tests.test_constants import (
    MEMBER_EMAIL,
    MEMBER_ID,
    MEMBER_TOKEN,
    OUTSIDER_EMAIL,
    OUTSIDER_ID,
    OUTSIDER_TOKEN,
    OWNER_EMAIL,
    OWNER_ID,
    OWNER_TOKEN,
)

# Force a throwaway database; don't inherit from .env
os.environ["DATABASE_URL"] = "sqlite+pysqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = ""

from eduty.services.identity import (  # noqa: E402
    NOT_FOUND,
    Identity,
    LookupResult,
    LookupStatus,
    normalize_email,
)


class FakeIdentityVerifier:
    """In-memory stand-in for the identity provider."""

    def __init__(self) -> None:
        self.users: dict[UUID, Identity] = {}
        self.tokens: dict[str, UUID] = {}
        self.unavailable = False

    def add_user(self, user_id: UUID, email: str, token: str | None = None, **extra) -> Identity:
        identity = Identity(id=user_id, email=email, **extra)
        self.users[user_id] = identity
        if token:
            self.tokens[token] = user_id
        return identity

    def verify_token(self, token: str) -> Identity | None:
        user_id = self.tokens.get(token)
        return self.users.get(user_id) if user_id else None

    def get_user_by_id(self, user_id) -> LookupResult:
        if self.unavailable:
            return LookupResult(LookupStatus.UNKNOWN)
        identity = self.users.get(UUID(str(user_id)))
        if identity is None:
            return NOT_FOUND
        return LookupResult(LookupStatus.FOUND, identity)

    def get_user_by_email(self, email: str) -> LookupResult:
        if self.unavailable:
            return LookupResult(LookupStatus.UNKNOWN)
        wanted = normalize_email(email)
        for identity in self.users.values():
            if normalize_email(identity.email) == wanted:
                return LookupResult(LookupStatus.FOUND, identity)
        return NOT_FOUND

    def email_for(self, user_id, default: str = "Unknown") -> str:
        return self.get_user_by_id(user_id).email or default


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def db() -> Iterator[Session]:
    """Fresh in-memory database per test with all tables created."""
    import eduty.models  # noqa: F401
    from eduty.db.session import Base

    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def verifier() -> FakeIdentityVerifier:
    fake = FakeIdentityVerifier()
    fake.add_user(OWNER_ID, OWNER_EMAIL, OWNER_TOKEN)
    fake.add_user(MEMBER_ID, MEMBER_EMAIL, MEMBER_TOKEN)
    fake.add_user(OUTSIDER_ID, OUTSIDER_EMAIL, OUTSIDER_TOKEN)
    return fake


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client with no overrides (public routes only)."""
    from eduty.main import app

    return TestClient(app)


@pytest.fixture
def api_client(db: Session, verifier: FakeIdentityVerifier) -> Iterator[TestClient]:
    """TestClient wired to the test session and the fake identity provider.

    Authentication goes through the real require_auth dependency; use
    ``tests.helpers.auth(token)`` for headers.
    """
    from eduty.api.deps import get_db, get_identity_verifier
    from eduty.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_verifier] = lambda: verifier
    c = TestClient(app)
    yield c
    app.dependency_overrides.clear()
