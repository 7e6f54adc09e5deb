"""Pytest configuration and fixtures for netention-mcp tests."""

from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio

from netention_mcp.backends import InMemoryNoteBackend
from netention_mcp.config import EngineSettings
from netention_mcp.engine import Engine
from netention_mcp.sandbox import FileSandbox
from netention_mcp.store import NoteStore


@pytest.fixture
def settings(tmp_path):
    """Settings with an isolated sandbox and no .env lookup."""
    return EngineSettings(
        _env_file=None,
        sandbox_dir=tmp_path / "safe_files",
        concurrency_limit=2,
        auto_run=False,
    )


@pytest.fixture
def sandbox(tmp_path):
    return FileSandbox.create(tmp_path / "sandbox")


@pytest.fixture
def store():
    return NoteStore(InMemoryNoteBackend())


@pytest.fixture
def http_requests():
    """Requests seen by the mock HTTP transport."""
    return []


@pytest.fixture
def http_responses():
    """Queue of responses returned by the mock HTTP transport; defaults to 200 {"ok": true}."""
    return []


@pytest_asyncio.fixture
async def http_client(http_requests, http_responses):
    def handler(request: httpx.Request) -> httpx.Response:
        http_requests.append(request)
        if http_responses:
            response = http_responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return httpx.Response(200, json={"ok": True})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def engine(settings, http_client):
    """Engine over in-memory storage with the scheduler stopped."""
    engine = await Engine.create(settings, http_client=http_client)
    yield engine
    await engine.close()


@pytest.fixture
def neo4j_session():
    return MagicMock(name="session")


@pytest.fixture
def neo4j_driver(neo4j_session):
    """Mock neo4j driver whose sessions all resolve to ``neo4j_session``."""
    driver = MagicMock(name="driver")
    driver.session.return_value.__enter__.return_value = neo4j_session
    driver.session.return_value.__exit__.return_value = False
    return driver
