# salespath_admin/conftest.py
import os

import pytest

# Must be set before salespath_admin.core.config builds its Settings
os.environ.setdefault("SKIP_ENV_VALIDATION", "1")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("ADMIN_KEY", "test-admin-key")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from salespath_admin.core.database import build_engine, get_db, metadata  # noqa: E402
from salespath_admin.features.email.service import LoggingEmailSender, get_email_sender  # noqa: E402
from salespath_admin.features.monitoring.service import (  # noqa: E402
    MonitoringStatsAggregator,
    get_monitoring_aggregator,
)

ADMIN_KEY = os.environ["ADMIN_KEY"]


@pytest.fixture(scope="function")
def engine():
    """
    Fresh in-memory sqlite database per test.

    StaticPool keeps a single connection so every session sees the same data.
    """
    eng = build_engine("sqlite:///:memory:")
    metadata.create_all(bind=eng)
    yield eng
    metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def email_sender():
    return LoggingEmailSender()


@pytest.fixture(scope="function")
def client(session_factory, email_sender):
    """TestClient with the DB, aggregator and mail sender bound to the test database."""
    from salespath_admin.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_monitoring_aggregator] = lambda: MonitoringStatsAggregator(session_factory)
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": ADMIN_KEY}
