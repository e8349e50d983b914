# backend/tests/conftest.py
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from timegrid.config import settings
from timegrid.database import get_db, init_db
from timegrid.main import app

ADMIN_TOKEN = "test-admin-token"
SHOP = "demo-store.myshopify.com"


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine, monkeypatch):
    """TestClient bound to the in-memory database."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr(settings, "admin_token", ADMIN_TOKEN)
    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def operator_headers():
    return {"X-Admin-Token": ADMIN_TOKEN, "X-Shop-Domain": SHOP}
