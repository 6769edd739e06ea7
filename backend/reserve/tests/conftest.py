"""
Pytest fixtures: in-memory SQLite database, API client and users.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import random

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from reserve.db.base import Base
from reserve.db.session import engine_options, get_db, init_db
from reserve.main import app
from reserve.models import User


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine("sqlite://", poolclass=StaticPool, **engine_options("sqlite://"))
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory):
    """TestClient bound to the test database."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a device through the API; returns (user json, auth headers)."""
    def _register(device_id: str = "device-owner", **profile):
        response = client.post("/api/users/current", json={"deviceId": device_id, **profile})
        assert response.status_code in (200, 201), response.text
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['accessToken']}"}
    return _register


@pytest.fixture
def auth_headers(register):
    _, headers = register()
    return headers


@pytest.fixture
def make_user(db_session):
    """Create users directly in the database for service-level tests."""
    def _make_user(device_id: str, **fields) -> User:
        user = User(
            device_id=device_id,
            summary_frequency_weeks=fields.pop("summary_frequency_weeks", 2),
            rainy_day_moment_count=fields.pop("rainy_day_moment_count", 1),
            **fields
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def user(make_user):
    return make_user("service-user")


@pytest.fixture
def rng():
    return random.Random(1234)
