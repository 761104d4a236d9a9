"""Pytest configuration and fixtures."""

import os
import tempfile

# Keep the module-level app in apps.crm.main off Postgres and the working directory
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", os.path.join(tempfile.gettempdir(), "followup-crm-test-uploads"))

import pytest
from fastapi.testclient import TestClient

from apps.crm.config import Settings
from apps.crm.database import Base
from apps.crm.main import create_app
from apps.crm.models import User, UserRole


@pytest.fixture
def settings(tmp_path):
    """Settings for an isolated in-memory database and local storage."""
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        storage_backend="local",
        upload_dir=str(tmp_path / "uploads"),
        public_base_url="http://testserver",
        seed_secret="test-seed-secret",
        seed_window_minutes=60,
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    """Create test application with a fresh schema."""
    application = create_app(settings)
    Base.metadata.create_all(application.state.engine)
    yield application
    Base.metadata.drop_all(application.state.engine)
    application.state.engine.dispose()


@pytest.fixture
def client(app):
    """Create test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(app):
    """Session on the same database the app uses."""
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sales_user(db):
    """A persisted sales user."""
    user = User(name="王磊", email="wanglei@company.com", role=UserRole.SALES)
    db.add(user)
    db.commit()
    return user
