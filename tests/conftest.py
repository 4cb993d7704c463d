"""
Shared fixtures.

The database and media directory are pointed at a throwaway directory before
``signage`` is imported, because both are read from the environment at import
time.
"""
import os
import tempfile

_TEST_ROOT = tempfile.mkdtemp(prefix="signage-tests-")
os.environ["SIGNAGE_DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_ROOT, 'test.db')}"
os.environ["SIGNAGE_MEDIA_DIR"] = os.path.join(_TEST_ROOT, "media")
os.environ.pop("SIGNAGE_API_KEY", None)

import pytest
from fastapi.testclient import TestClient

from signage.db import Base, SessionLocal
from signage.main import app
from signage.models.user import User
from signage.services.realtime import ConnectionRegistry, NotificationDispatcher

OPERATOR_ID = "operator-1"
OTHER_OPERATOR_ID = "operator-2"


class FakeChannel:
    """Stands in for a websocket-backed channel."""

    def __init__(self, open=True, fail=False):
        self.sent = []
        self.closed_with = None
        self._open = open
        self._fail = fail

    @property
    def is_open(self):
        return self._open and self.closed_with is None

    async def send(self, message):
        if self._fail:
            raise ConnectionResetError("peer went away")
        self.sent.append(message)

    async def close(self, code=1000):
        self.closed_with = code


@pytest.fixture(autouse=True)
def clean_state():
    """Fresh registry per test, and empty tables afterwards."""
    app.state.registry = ConnectionRegistry()
    app.state.dispatcher = NotificationDispatcher(app.state.registry)
    yield
    session = SessionLocal()
    try:
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def operator_headers():
    return {"X-Account-ID": OPERATOR_ID}


@pytest.fixture
def other_operator_headers():
    return {"X-Account-ID": OTHER_OPERATOR_ID}


@pytest.fixture
def operator(db):
    user = User(id=OPERATOR_ID, role="client")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def fake_channel():
    return FakeChannel
