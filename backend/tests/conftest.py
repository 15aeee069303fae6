"""
Shared pytest fixtures for the Ontology Manager tests.

The application reads its settings at import time, so the environment is
pointed at a throwaway SQLite database before anything from
``ontology_manager`` is imported.
"""
import os
import tempfile
from pathlib import Path
from typing import Dict, Generator

import pytest

_DB_DIR = Path(tempfile.mkdtemp(prefix="ontology-manager-tests-"))
_DB_PATH = _DB_DIR / "test.db"

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

import httpx  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from neo4j.exceptions import ServiceUnavailable  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402

from ontology_manager.core.database import Base  # noqa: E402
from ontology_manager.core.security import create_access_token  # noqa: E402
from ontology_manager.main import app  # noqa: E402
from ontology_manager.models import database  # noqa: E402,F401
from ontology_manager.services.graph_service import graph_service  # noqa: E402

OWNER_ID = "user-owner"
OTHER_ID = "user-other"


@pytest.fixture(autouse=True)
def reset_database() -> Generator[None, None, None]:
    """Give every test empty tables."""
    sync_engine = create_engine(f"sqlite:///{_DB_PATH}")
    Base.metadata.drop_all(sync_engine)
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    yield


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


def bearer(user_id: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, email=f'{user_id}@example.com')}"}


@pytest.fixture
def owner_headers() -> Dict[str, str]:
    return bearer(OWNER_ID)


@pytest.fixture
def other_headers() -> Dict[str, str]:
    return bearer(OTHER_ID)


@pytest.fixture
def asgi_transport() -> httpx.ASGITransport:
    """Transport routing client façade calls straight into the app."""
    return httpx.ASGITransport(app=app)


class TokenCounter:
    """Token provider that mints a fresh token per call and counts calls."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        return create_access_token(self.user_id)


@pytest.fixture
def owner_tokens() -> TokenCounter:
    return TokenCounter(OWNER_ID)


@pytest.fixture
def other_tokens() -> TokenCounter:
    return TokenCounter(OTHER_ID)


# =============================================================================
# Graph database fakes
# =============================================================================


class FakeNode:

    def __init__(self, element_id, labels, **properties):
        self.element_id = element_id
        self.labels = frozenset(labels)
        self._properties = properties

    def items(self):
        return self._properties.items()


class FakeRelationship(FakeNode):

    def __init__(self, element_id, rel_type, start_node, end_node, **properties):
        super().__init__(element_id, [], **properties)
        self.type = rel_type
        self.start_node = start_node
        self.end_node = end_node


class FakeRecord(dict):
    """Records are read by key and through ``items()``, which ``dict`` provides."""


class FakeResult:

    def __init__(self, records):
        self._records = list(records)

    def __aiter__(self):
        self._iter = iter(self._records)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeSession:

    def __init__(self, driver):
        self.driver = driver

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def run(self, query, parameters):
        self.driver.queries.append((query, parameters))
        return FakeResult(self.driver.respond(query, parameters))


class FakeDriver:

    def __init__(self, responder=None, fail_connect=False):
        self.respond = responder or (lambda query, parameters: [])
        self.fail_connect = fail_connect
        self.queries = []
        self.closed = False

    async def verify_connectivity(self):
        if self.fail_connect:
            raise ServiceUnavailable("Unable to retrieve routing information")

    def session(self):
        return FakeSession(self)

    async def close(self):
        self.closed = True


@pytest.fixture
def graph_driver(monkeypatch) -> Generator[FakeDriver, None, None]:
    """Route the application's graph service to a fake driver."""
    driver = FakeDriver()
    monkeypatch.setattr(graph_service, "_driver_factory", lambda uri, auth: driver)
    yield driver
    graph_service._driver = None
