"""Shared pytest fixtures configured to use SQLite in-memory for tests."""

import logging
import os
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlencode, urlparse

# Keep test runs from writing rotating log files or touching a real DB on startup
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ["WORKNEST_SKIP_LIFESPAN_DB"] = "1"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from worknest.core.models import BaseModel, Folder, Note, User, Workspace
from worknest.database import get_db_session
from worknest.main import app
from worknest.security.jwt import issue_token_pair
from worknest.security.oauth import (
    OAuthProvider,
    ProviderRegistry,
    ProviderTokens,
    StateMismatchError,
    get_provider_registry,
)

# Silence extremely verbose DEBUG logs from aiosqlite to keep test output readable
logging.getLogger("aiosqlite").setLevel(logging.WARNING)


class FakeProvider(OAuthProvider):
    """In-memory OAuth provider.

    Checks the state carried in the callback URL like a real client would,
    then hands back whatever ``token`` / ``id_claims`` the test configured.
    """

    name = "fake"

    def __init__(self):
        self.token: Dict[str, Any] = {
            "access_token": "provider-access",
            "token_type": "Bearer",
            "expires_in": 3600,
            "refresh_token": "provider-refresh",
            "scope": "openid email profile",
        }
        self.id_claims: Optional[Dict[str, Any]] = {
            "sub": "fake-123",
            "email": "ada@example.com",
            "email_verified": True,
            "name": "Ada Lovelace",
            "picture": "https://example.com/ada.png",
        }
        self.error: Optional[Exception] = None
        self.exchanges = []

    async def build_authorization_url(self, code_challenge: str, state: str) -> str:
        query = urlencode(
            {"code_challenge": code_challenge, "code_challenge_method": "S256", "state": state}
        )
        return f"https://idp.example.com/authorize?{query}"

    async def exchange_code(self, callback_url: str, code_verifier: str, state: str) -> ProviderTokens:
        self.exchanges.append(
            {"callback_url": callback_url, "code_verifier": code_verifier, "state": state}
        )
        if self.error is not None:
            raise self.error
        returned_state = parse_qs(urlparse(callback_url).query).get("state", [None])[0]
        if returned_state != state:
            raise StateMismatchError("CSRF Warning! State not equal in request and response.")
        return ProviderTokens(token=dict(self.token), id_claims=self.id_claims)


@pytest.fixture
async def test_engine():
    """Fresh SQLite in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,  # keep the same memory DB across connections
        connect_args={"check_same_thread": False},
    )

    # SQLite only enforces foreign keys (and CASCADE / SET NULL) when asked
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def test_session(test_engine):
    """Session shared by the test body and the app under test."""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def provider_registry(fake_provider):
    registry = ProviderRegistry()
    registry.register(fake_provider)
    return registry


@pytest.fixture
def test_app(test_session, provider_registry):
    """The FastAPI app with DB session and OAuth providers overridden."""

    async def _override_get_db():
        yield test_session

    app.dependency_overrides[get_db_session] = _override_get_db
    app.dependency_overrides[get_provider_registry] = lambda: provider_registry
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac


class Factory:
    """Creates committed rows for tests."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _add(self, obj):
        self.session.add(obj)
        await self.session.commit()
        return obj

    async def user(self, email: str, name: str = "Test User") -> User:
        return await self._add(User(email=email, name=name))

    async def workspace(self, user: User, name: str = "Research") -> Workspace:
        return await self._add(Workspace(user_id=user.id, name=name))

    async def folder(self, workspace: Workspace, name: str, parent: Optional[Folder] = None) -> Folder:
        return await self._add(
            Folder(
                workspace_id=workspace.id,
                parent_id=parent.id if parent is not None else None,
                name=name,
            )
        )

    async def note(self, workspace: Workspace, name: str, folder: Optional[Folder] = None) -> Note:
        return await self._add(
            Note(
                workspace_id=workspace.id,
                folder_id=folder.id if folder is not None else None,
                name=name,
            )
        )

    @staticmethod
    def headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {issue_token_pair(user.id).access_token}"}


@pytest.fixture
def factory(test_session):
    return Factory(test_session)


@pytest.fixture
async def test_user(factory):
    return await factory.user("owner@example.com", "Owner")


@pytest.fixture
async def other_user(factory):
    return await factory.user("intruder@example.com", "Intruder")


@pytest.fixture
def auth_headers(test_user):
    return Factory.headers(test_user)


@pytest.fixture
def other_headers(other_user):
    return Factory.headers(other_user)


@pytest.fixture
async def test_workspace(factory, test_user):
    return await factory.workspace(test_user)
