# backend/tests/conftest.py
from __future__ import annotations

import os

# Must be set before app.config is imported anywhere.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("AUTH_MODE", "dev")
os.environ.setdefault("APP_ENV", "local")
os.environ.setdefault("JWT_SECRET", "pgstay-test-secret-0123456789abcdef0123456789")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app import models  # noqa: E402,F401
from app.db import Base, SessionLocal, engine  # noqa: E402
from app.main import create_app  # noqa: E402


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client():
    return TestClient(create_app())
