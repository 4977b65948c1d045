"""
Shared fixtures: in-memory SQLite database, fake media backend, HTTP client.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("MEDIA_BACKEND", "local")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from auth.session_manager import SessionManager
from auth.tokens import TokenIssuer
from database.accounts import CredentialStore
from database.models import Base
from media.base import MediaStorage
from utils.errors import MediaUploadError


class FakeMediaStorage(MediaStorage):
    """Records uploads and hands back predictable URLs."""

    def __init__(self):
        self.uploads = []
        self.existed = []
        self.failing = set()

    @property
    def backend_name(self) -> str:
        return "fake"

    async def upload(self, local_path: str) -> str:
        self.uploads.append(local_path)
        self.existed.append(os.path.exists(local_path))
        name = os.path.basename(local_path)
        if local_path in self.failing or name in self.failing:
            raise MediaUploadError(f"rejected {name}")
        return f"https://media.test/{name}"


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session):
    return CredentialStore(db_session)


@pytest.fixture
def token_issuer():
    return TokenIssuer(
        access_secret="test-access-secret",
        refresh_secret="test-refresh-secret",
        access_ttl=900,
        refresh_ttl=604800,
    )


@pytest.fixture
def media():
    return FakeMediaStorage()


@pytest.fixture
def manager(store, token_issuer, media):
    return SessionManager(store, token_issuer, media)


@pytest_asyncio.fixture
async def client(session_factory, token_issuer, media, tmp_path, monkeypatch):
    from auth.dependencies import get_token_issuer
    from config.settings import config
    from database.session import get_db_session
    from main import app
    from media.registry import get_media_storage

    async def _override_db():
        async with session_factory() as session:
            yield session

    monkeypatch.setattr(config, "upload_temp_dir", str(tmp_path / "temp"))
    app.dependency_overrides[get_db_session] = _override_db
    app.dependency_overrides[get_media_storage] = lambda: media
    app.dependency_overrides[get_token_issuer] = lambda: token_issuer

    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="https://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()
