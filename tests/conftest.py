"""Global test fixtures."""

import os

# Point the app at an in-memory database before core.database is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["POSTHOG_KEY"] = ""
os.environ["POSTHOG_HOST"] = ""

import pytest
from fastapi.testclient import TestClient

from core.database import Base, SessionLocal, engine, init_db


@pytest.fixture(autouse=True)
def schema():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from main import app

    with TestClient(app) as c:
        yield c
