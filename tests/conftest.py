import os

# must be set before taskboard.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import taskboard.models  # noqa: F401
from taskboard.db import Base, get_db, make_engine
from taskboard.main import create_app
from taskboard.models.enums import Role
from taskboard.models.user import User

@pytest.fixture()
def db_session() -> Session:
    # fresh in-memory schema per test
    engine = make_engine("sqlite+pysqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session: Session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()

@pytest.fixture()
def client(db_session: Session) -> TestClient:
    app = create_app()

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)

def _register(client, email: str, name: str, password: str = "secret123") -> dict:
    r = client.post("/auth/register", json={"name": name, "email": email, "password": password})
    assert r.status_code == 201, r.text
    return r.json()

def _auth(jwt: str) -> dict[str, str]:
    return {"authorization": f"bearer {jwt}"}

@pytest.fixture()
def make_user(client, db_session):
    """Register a user through the api, then set its role directly in the db."""

    def _make(role: Role, name: str | None = None) -> tuple[str, uuid.UUID]:
        slug = role.value.replace(" ", "").lower()
        email = f"{slug}+{uuid.uuid4().hex[:8]}@example.com"
        body = _register(client, email, name or role.value)

        user = db_session.get(User, uuid.UUID(body["user"]["id"]))
        assert user is not None
        user.role = role.value
        db_session.commit()
        return body["access_token"], user.id

    return _make
