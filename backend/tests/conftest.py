import os

# Use in-memory sqlite for tests; must be set before app modules import settings
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["METRICS_SOURCE"] = "profile"
os.environ.pop("VITAL_API_KEY", None)

import pytest  # noqa: E402


@pytest.fixture
def client():
    from app.main import app
    from fastapi.testclient import TestClient
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    from app.main import app  # noqa: F401  (creates tables)
    from app.db import SessionLocal
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
