import os
import tempfile
from typing import Generator

# Point the app at a throwaway database before it is imported
_tmpdir = tempfile.mkdtemp(prefix="arcadefinder-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_tmpdir, 'app.db')}")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from arcadefinder.db import Base, get_db
from arcadefinder.main import app


@pytest.fixture(scope="function")
def db_session() -> Generator:
    # Use in-memory SQLite with a single connection
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    # Match the app engine: SQLite only enforces foreign keys when asked
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture(scope="function")
def client(db_session):
    # Override dependency to use the same session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = override_get_db
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user and return (auth headers, user json)."""
    def _register(username="alice", email=None, password="secret"):
        email = email or f"{username}@example.com"
        r = client.post("/api/auth/register", json={"username": username, "email": email, "password": password})
        assert r.status_code == 201, r.text
        body = r.json()
        return {"Authorization": f"Bearer {body['token']}"}, body["user"]
    return _register


@pytest.fixture
def make_arcade(client):
    def _make(headers, **fields):
        payload = {
            "name": "Pixel Palace",
            "address": "1 Joystick Way",
            "days_open": "Mon-Sun",
            "hours_of_operation": "10:00-23:00",
            "serves_alcohol": False,
        }
        payload.update(fields)
        r = client.post("/api/arcades", json=payload, headers=headers)
        assert r.status_code == 200, r.text
        return r.json()
    return _make
