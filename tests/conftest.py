"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable

import httpx
import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from dmflow.config import DmflowConfig
from dmflow.database.models import Base

TEST_CONFIG = DmflowConfig(
    port=3001,
    frontend_url="http://localhost:5173",
    spotify_client_id="test-client-id",
    spotify_client_secret="test-client-secret",
    spotify_redirect_uri="http://localhost:3001/api/spotify/callback",
)


def run_async(coro):
    """Run a coroutine to completion from a sync test."""
    return asyncio.run(coro)


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all dmflow tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used by the Spotify routes).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


# ---------------------------------------------------------------------------
# Fake Spotify
# ---------------------------------------------------------------------------
class FakeSpotify:
    """Canned responses for accounts.spotify.com and api.spotify.com.

    Register a reply with :meth:`on`; every request is recorded in
    :attr:`requests`.  Unregistered routes answer 404.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}

    def on(self, method: str, path: str, status: int = 200, json_body=None) -> None:
        def reply(request: httpx.Request) -> httpx.Response:
            if json_body is None:
                return httpx.Response(status)
            return httpx.Response(status, json=json_body)

        self._routes[(method, path)] = reply

    def on_error(self, method: str, path: str) -> None:
        def reply(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self._routes[(method, path)] = reply

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self._routes.get((request.method, request.url.path))
        if reply is None:
            return httpx.Response(404, json={"error": "not mocked"})
        return reply(request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path == path
        ]

    @staticmethod
    def json_of(request: httpx.Request):
        return json.loads(request.content)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def spotify() -> FakeSpotify:
    return FakeSpotify()


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------
@pytest.fixture
def client(db_engine: Engine, spotify: FakeSpotify):
    """FastAPI TestClient wired to the in-memory DB and the fake Spotify."""
    from fastapi.testclient import TestClient

    from dmflow.api.deps import get_config, get_engine, get_http_client
    from dmflow.api.main import app

    async def _http_client():
        async with httpx.AsyncClient(transport=spotify.transport()) as http:
            yield http

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: TEST_CONFIG
    app.dependency_overrides[get_http_client] = _http_client
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Small builders shared by the route tests
# ---------------------------------------------------------------------------
def make_campaign(client, name: str = "Lost Mine", **extra) -> dict:
    resp = client.post("/api/campaigns", json={"name": name, **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()


def make_node(client, campaign_id: str, **overrides) -> dict:
    body = {"type": "encounter", "label": "Goblin Ambush", "positionX": 0, "positionY": 0}
    body.update(overrides)
    resp = client.post(f"/api/flow/campaigns/{campaign_id}/nodes", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


def make_encounter(client, campaign_id: str, name: str = "Goblin Ambush", **extra) -> dict:
    resp = client.post(f"/api/encounters/campaigns/{campaign_id}", json={"name": name, **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()
