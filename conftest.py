import os
from typing import AsyncGenerator
from unittest.mock import MagicMock

# Settings are read at import time, so the test environment goes in first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "development"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["SMTP_HOST"] = ""

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from libs.common.config import get_settings  # noqa: E402

# Clear cached settings to reload with the env vars above
get_settings.cache_clear()

from libs.auth.dependencies import get_current_user  # noqa: E402
from libs.common.supabase import get_supabase_admin_client, get_supabase_client  # noqa: E402
from libs.db.base import Base  # noqa: E402
from libs.db.session import get_async_db  # noqa: E402
from services.portal_service import models as _portal_models  # noqa: E402,F401
from services.portal_service.app.main import app  # noqa: E402
from services.portal_service.storage import StorageService, get_file_storage  # noqa: E402
from tests.factories import make_admin_user  # noqa: E402


@pytest_asyncio.fixture
async def test_engine():
    """
    A fresh in-memory SQLite database per test.

    pysqlite's own transaction handling breaks SAVEPOINT, so the driver is
    put in autocommit mode and SQLAlchemy emits BEGIN itself.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a database session that rolls back after the test.
    join_transaction_mode="create_savepoint" lets handlers commit as if the
    session were top level while the outer transaction stays open.
    """
    connection = await test_engine.connect()
    transaction = await connection.begin()

    session_factory = async_sessionmaker(
        bind=connection,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        join_transaction_mode="create_savepoint",
    )
    session = session_factory()

    try:
        yield session
    finally:
        await session.close()
        await transaction.rollback()
        await connection.close()


@pytest.fixture
def storage(tmp_path) -> StorageService:
    return StorageService("local", base_dir=str(tmp_path / "storage"))


@pytest.fixture
def supabase_admin() -> MagicMock:
    """Stand-in for the service-role Supabase client."""
    return MagicMock(name="supabase_admin")


@pytest.fixture
def supabase_anon() -> MagicMock:
    return MagicMock(name="supabase_anon")


@pytest_asyncio.fixture
async def client(
    db_session, storage, supabase_admin, supabase_anon
) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient for the portal app, signed in as an admin.
    Tests switch users with ``override_auth``.
    """
    admin = make_admin_user()
    app.dependency_overrides[get_async_db] = lambda: db_session
    app.dependency_overrides[get_current_user] = lambda: admin
    app.dependency_overrides[get_file_storage] = lambda: storage
    app.dependency_overrides[get_supabase_admin_client] = lambda: supabase_admin
    app.dependency_overrides[get_supabase_client] = lambda: supabase_anon

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    """Bearer header for tests that go through the real token check."""
    return {"Authorization": "Bearer mock-token"}
