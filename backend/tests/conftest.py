"""Shared pytest fixtures for backend tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Callable, Iterator

os.environ.setdefault("SQLALCHEMY_DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("DEBUG", "false")

ROOT_DIR = Path(__file__).resolve().parents[1]
for path in (ROOT_DIR, ROOT_DIR / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app import database
from app.config import get_settings
from app.database import get_db
from app.main import app
from app.models import Base
from app.services.cache import get_cache
from app.services.language_seed import seed_languages
from app.services.translation import TranslationClient, get_translation_client
from parley.realtime import RealtimeRelay, RoomPresenceRegistry


@pytest.fixture()
def test_engine() -> Iterator[Engine]:
    """Provide an in-memory SQLite engine for isolated tests."""

    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(test_engine) -> sessionmaker[Session]:
    """Return a session factory bound to the test engine."""

    return sessionmaker(bind=test_engine, future=True)


@pytest.fixture()
def db_session(session_factory) -> Iterator[Session]:
    """Yield a SQLAlchemy session for unit tests."""

    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def media_root(tmp_path, monkeypatch) -> Path:
    root = tmp_path / "media"
    monkeypatch.setattr(get_settings(), "media_root", root)
    return root


@pytest.fixture()
def client(session_factory, media_root, monkeypatch) -> Iterator[TestClient]:
    """Yield a FastAPI TestClient with the database dependency overridden.

    WebSocket authentication opens its own short-lived sessions, so the
    module-level session factory is swapped too. Every test starts with an
    empty relay and an empty reset-token cache.
    """

    def override_get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr(database, "SessionLocal", session_factory)
    get_cache.cache_clear()
    registry = RoomPresenceRegistry()
    app.state.room_registry = registry
    app.state.relay = RealtimeRelay(registry)

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    get_cache.cache_clear()


@pytest.fixture()
def languages(db_session) -> dict[str, int]:
    """Seed the reference languages and map their codes to ids."""

    from app.models import Language

    seed_languages(db_session)
    return {language.code: language.id for language in db_session.query(Language).all()}


@pytest.fixture()
def register(client) -> Callable[..., dict[str, Any]]:
    """Register an account and return its id, token and auth headers."""

    def _register(username: str, password: str = "secret123", email: str | None = None) -> dict[str, Any]:
        response = client.post(
            "/api/auth/register",
            json={
                "username": username,
                "email": email or f"{username}@example.com",
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return {
            "id": body["user"]["id"],
            "token": body["token"],
            "headers": {"Authorization": f"Bearer {body['token']}"},
        }

    return _register


@pytest.fixture()
def translation_handler() -> dict[str, Any]:
    """Mutable hook deciding how the fake translation upstream answers."""

    return {"status": 200, "json": {"translatedText": "hola"}, "requests": []}


@pytest.fixture()
def fake_translation(translation_handler) -> Iterator[dict[str, Any]]:
    def handler(request: httpx.Request) -> httpx.Response:
        translation_handler["requests"].append(request)
        if isinstance(translation_handler.get("error"), Exception):
            raise translation_handler["error"]
        return httpx.Response(translation_handler["status"], json=translation_handler["json"])

    def override() -> TranslationClient:
        return TranslationClient(
            "http://translate.test/translate",
            api_key="test-key",
            transport=httpx.MockTransport(handler),
        )

    app.dependency_overrides[get_translation_client] = override
    yield translation_handler
    app.dependency_overrides.pop(get_translation_client, None)
