from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
import os
from pathlib import Path
import sys
import tempfile

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import Session, sessionmaker

from qwksearch import dependencies
from qwksearch.config import Settings
from qwksearch.infrastructure.database import Base

import qwksearch.auth.dependencies as auth_dependencies
import qwksearch.auth.user_manager as auth_user_manager
import qwksearch.search.dependencies as search_dependencies


class AsyncSessionWrapper:
    """Minimal async-compatible wrapper around a synchronous SQLAlchemy session."""

    def __init__(self, sync_session: Session) -> None:
        self._sync = sync_session

    def add(self, instance: object) -> None:
        self._sync.add(instance)

    async def execute(self, statement, *args, **kwargs):
        return self._sync.execute(statement, *args, **kwargs)

    async def commit(self) -> None:
        self._sync.commit()

    async def rollback(self) -> None:
        self._sync.rollback()

    async def flush(self) -> None:
        self._sync.flush()

    async def refresh(self, instance: object) -> None:
        self._sync.refresh(instance)

    async def delete(self, instance: object) -> None:
        self._sync.delete(instance)

    async def get(self, entity, ident, **kwargs):
        return self._sync.get(entity, ident, **kwargs)

    async def close(self) -> None:
        self._sync.close()

    def __getattr__(self, item: str):
        return getattr(self._sync, item)


class AsyncSessionContext:
    def __init__(self, factory: sessionmaker) -> None:
        self._factory = factory
        self._sync: Session | None = None

    async def __aenter__(self) -> AsyncSessionWrapper:
        self._sync = self._factory()
        return AsyncSessionWrapper(self._sync)

    async def __aexit__(self, exc_type, exc, tb) -> None:
        assert self._sync is not None
        if exc_type is not None:
            self._sync.rollback()
        self._sync.close()


class AsyncSessionFactory:
    def __init__(self, factory: sessionmaker) -> None:
        self._factory = factory

    def __call__(self) -> AsyncSessionContext:
        return AsyncSessionContext(self._factory)


@pytest.fixture
def settings() -> Settings:
    settings = Settings()
    settings.fastapi.secret_key = "test-secret"
    settings.search.private_instance = "https://search.test"
    settings.search.public_instances = ["mirror-one.test", "mirror-two.test"]
    return settings


@pytest.fixture
def app(monkeypatch: pytest.MonkeyPatch, settings: Settings, tmp_path: Path) -> Iterator[FastAPI]:
    """Provide a FastAPI app wired to a temporary SQLite database."""

    if hasattr(dependencies.get_settings, "cache_clear"):
        dependencies.get_settings.cache_clear()

    fd, db_path = tempfile.mkstemp(prefix="qwksearch_tests_", suffix=".db")
    os.close(fd)
    engine = create_engine(
        f"sqlite:///{db_path}",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    sync_session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    session_factory = AsyncSessionFactory(sync_session_factory)

    settings.storage.upload_dir = tmp_path

    original_get_db_session = dependencies.get_db_session
    original_get_settings = dependencies.get_settings

    async def _get_db_session():
        async with session_factory() as session:
            yield session

    def _get_session_factory() -> AsyncSessionFactory:
        return session_factory

    def _get_settings() -> Settings:
        return settings

    monkeypatch.setattr(dependencies, "get_db_session", _get_db_session)
    monkeypatch.setattr(dependencies, "get_session_factory", _get_session_factory)
    monkeypatch.setattr(dependencies, "get_settings", _get_settings)
    monkeypatch.setattr(auth_dependencies, "get_settings", _get_settings)
    monkeypatch.setattr(auth_user_manager, "get_db_session", _get_db_session)
    monkeypatch.setattr(auth_user_manager, "get_settings", _get_settings)
    monkeypatch.setattr(search_dependencies, "get_settings", _get_settings)

    from qwksearch.main import create_app

    app = create_app()
    app.dependency_overrides[original_get_db_session] = _get_db_session
    app.dependency_overrides[original_get_settings] = _get_settings
    app.state._session_factory = session_factory  # type: ignore[attr-defined]

    try:
        yield app
    finally:
        app.dependency_overrides.clear()
        engine.dispose()
        try:
            os.remove(db_path)
        except OSError:
            pass


@pytest.fixture
def session_factory(app: FastAPI) -> AsyncSessionFactory:
    """Expose the session factory for direct database access in tests."""

    return app.state._session_factory  # type: ignore[attr-defined]


@pytest.fixture
def login_user() -> Callable[..., Awaitable[dict[str, str]]]:
    """Return a coroutine registering an account and returning bearer headers."""

    async def _login(client: AsyncClient, email: str, password: str = "SuperSecret1!") -> dict[str, str]:
        register = await client.post("/auth/register", json={"email": email, "password": password})
        assert register.status_code == 201
        login = await client.post("/auth/jwt/login", data={"username": email, "password": password})
        assert login.status_code == 200
        return {"Authorization": f"Bearer {login.json()['access_token']}"}

    return _login
