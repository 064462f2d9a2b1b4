"""Shared pytest fixtures for API tests and database isolation."""

from __future__ import annotations

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("BILLETWEB_API_KEY", "")

import uuid  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from passlib.context import CryptContext  # noqa: E402
from sqlalchemy.engine import make_url  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from app.api.deps import get_db  # noqa: E402
from app.core import security  # noqa: E402
from app.core.config import settings  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.main import app  # noqa: E402
from app.models.admin import Admin  # noqa: E402
from app.services.availability_cache import AvailabilityCache  # noqa: E402
from app.services.billetweb_client import BilletwebClient  # noqa: E402
from app.services.billetweb_sync_service import BilletwebSyncService  # noqa: E402
from app.services.bookable_provider import default_providers  # noqa: E402
from app.services.sync_scheduler import SyncScheduler  # noqa: E402
from app.tests.utils import ADMIN_PASSWORD  # noqa: E402


@pytest.fixture(autouse=True)
def _use_plaintext_passwords(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(security, "pwd_context", CryptContext(schemes=["plaintext"]))


@pytest_asyncio.fixture()
async def session_factory(tmp_path) -> async_sessionmaker[AsyncSession]:
    database_url = settings.test_database_url or settings.database_url
    url = make_url(database_url)
    schema_name: str | None = None
    if url.drivername.startswith("postgresql"):
        engine = create_async_engine(database_url, future=True)
        # Isolate each test run in its own schema for parallel-friendly cleanup.
        schema_name = f"test_{uuid.uuid4().hex}"
        engine = engine.execution_options(schema_translate_map={None: schema_name})
    else:
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", future=True)
    async with engine.begin() as conn:
        if schema_name:
            await conn.exec_driver_sql(f'CREATE SCHEMA IF NOT EXISTS "{schema_name}"')
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    finally:
        async with engine.begin() as conn:
            if schema_name:
                await conn.exec_driver_sql(f'DROP SCHEMA IF EXISTS "{schema_name}" CASCADE')
            else:
                await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest_asyncio.fixture()
async def session(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def sync_scheduler(session_factory) -> SyncScheduler:
    """Scheduler wired to the test database and an unconfigured Billetweb client."""
    client = BilletwebClient(api_key="", cache=AvailabilityCache())
    service = BilletwebSyncService(client, default_providers(session_factory))
    scheduler = SyncScheduler(service, install_signal_handlers=False)
    yield scheduler
    scheduler.stop()


@pytest_asyncio.fixture()
async def client(session: AsyncSession, sync_scheduler: SyncScheduler) -> AsyncClient:
    async def _get_test_db():
        yield session

    app.dependency_overrides[get_db] = _get_test_db
    app.state.sync_scheduler = sync_scheduler
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as async_client:
        yield async_client
    app.dependency_overrides.pop(get_db, None)
    app.state.sync_scheduler = None


@pytest_asyncio.fixture()
async def admin(session: AsyncSession) -> Admin:
    account = Admin(
        email=f"admin_{uuid.uuid4().hex[:8]}@example.com",
        hashed_password=security.hash_password(ADMIN_PASSWORD),
        name="Admin",
    )
    session.add(account)
    await session.commit()
    return account
