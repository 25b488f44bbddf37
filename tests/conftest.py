import os
import re
import tempfile

# Environment must be in place BEFORE the app (and its settings) are imported
os.environ["SQLALCHEMY_DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SMS_LOCAL_ECHO"] = "true"
os.environ["ADMIN_PHONES"] = "8888888888"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="civic-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from civic_tracker.config import get_settings
from civic_tracker.database import Base, build_engine, get_db
from civic_tracker.core.dependencies import get_sms_gateway
from civic_tracker.core.security import create_access_token
from civic_tracker.main import app
from civic_tracker.services.sms_service import DeliveryResult
import civic_tracker.models  # noqa: F401


class FakeGateway:
    """Records every message; can be told to hard-fail like a broken provider."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []
        self.local_echo = False

    def send(self, to, body):
        self.sent.append({"to": to, "body": body})
        if self.fail:
            return DeliveryResult(delivered=False, via_local_echo=False, error="provider down")
        return DeliveryResult(delivered=True, via_local_echo=False)

    @property
    def last_code(self) -> str:
        return re.search(r"OTP is (\d+)", self.sent[-1]["body"]).group(1)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(session_factory, gateway):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sms_gateway] = lambda: gateway
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def citizen_headers(settings):
    token = create_access_token(settings, "9999999999", "citizen")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(settings):
    token = create_access_token(settings, "8888888888", "admin")
    return {"Authorization": f"Bearer {token}"}


def serialized_sqlite_engine(path):
    """
    File-backed SQLite engine for threaded tests. SQLite has no row locks;
    BEGIN IMMEDIATE serializes writers the way SELECT ... FOR UPDATE does on
    PostgreSQL.
    """
    engine = build_engine(f"sqlite:///{path}")

    @event.listens_for(engine, "connect")
    def _no_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(engine)
    return engine
