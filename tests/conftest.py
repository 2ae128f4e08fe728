"""Shared test fixtures for the docledger test suite.

Every test gets its own SQLite file under pytest's tmp_path, opened through
an explicit ``Database`` handle with the schema created from the models.
API tests inject that handle into ``create_app`` so the app and the test
share one store.
"""

import os
import threading

# Force auth off before any app imports.
os.environ["AUTH_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"

import pytest
from fastapi.testclient import TestClient

from docledger.core.auth import Principal
from docledger.core.config import Settings
from docledger.database import Database
from docledger.main import create_app
from docledger.models import ActorType, Visibility
from docledger.services import DocumentService

TEST_SECRET = "test-secret-key-for-tokens"


@pytest.fixture()
def database(tmp_path):
    """Opened database with all tables created; closed after the test."""
    db = Database(f"sqlite:///{tmp_path / 'ledger.db'}").open()
    db.create_schema()
    yield db
    db.close()


@pytest.fixture()
def db(database):
    """Per-test database session."""
    session = database.session()
    yield session
    session.close()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        auth_enabled=False,
        jwt_secret_key=TEST_SECRET,
        log_format="text",
    )


@pytest.fixture()
def client(database, settings):
    """TestClient over an app wired to the test database."""
    app = create_app(settings=settings, database=database)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def alice() -> Principal:
    return Principal("alice")


@pytest.fixture()
def bob() -> Principal:
    return Principal("bob")


@pytest.fixture()
def assistant() -> Principal:
    return Principal("assistant-1", ActorType.AI)


@pytest.fixture()
def document(db, alice):
    """Private, empty document owned by alice."""
    return DocumentService(db).create_document("Design Notes", alice, content="")


@pytest.fixture()
def team_document(db, alice):
    """Team-visible document owned by alice, readable by any caller."""
    return DocumentService(db).create_document(
        "Team Handbook", alice, content="v0", visibility=Visibility.TEAM
    )


@pytest.fixture()
def run_in_parallel(database):
    """Run ``work(session)`` on N threads at once, one session per thread.

    Returns one outcome per thread: whatever ``work`` returned, or the
    exception it raised.
    """
    def _run(work, workers=8):
        barrier = threading.Barrier(workers)
        outcomes = [None] * workers

        def worker(index):
            session = database.session()
            try:
                barrier.wait()
                outcomes[index] = work(session)
            except Exception as e:
                outcomes[index] = e
            finally:
                session.close()

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)
        return outcomes

    return _run


def headers(user_id: str = "alice", actor_type: str = "user") -> dict:
    """Identity headers for auth-disabled mode."""
    return {"X-User-Id": user_id, "X-Actor-Type": actor_type}


@pytest.fixture()
def user_headers() -> dict:
    return headers("alice", "user")


@pytest.fixture()
def ai_headers() -> dict:
    return headers("assistant-1", "ai")


@pytest.fixture()
def api_document(client, user_headers) -> dict:
    """Document created through the API; returns the response body."""
    resp = client.post(
        "/api/documents",
        json={"title": "API Doc", "content": "", "visibility": "team"},
        headers=user_headers,
    )
    assert resp.status_code == 201
    return resp.json()
