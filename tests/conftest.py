"""Shared fixtures for keyforge tests."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import keyforge.models  # noqa: F401
from keyforge.repositories.api_key import ApiKeyRepository
from keyforge.stores.sql import SQLRowStore
from tests.fakes import FakeRowStore


@pytest.fixture
async def engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def sql_store(engine) -> SQLRowStore:
    """SQLRowStore over the in-memory engine."""
    return SQLRowStore(engine)


@pytest.fixture
def fake_store() -> FakeRowStore:
    """In-memory fake row store with failure injection."""
    return FakeRowStore()


@pytest.fixture
def repository(sql_store: SQLRowStore) -> ApiKeyRepository:
    """ApiKeyRepository backed by SQLite."""
    return ApiKeyRepository(sql_store, timeout=5.0, list_retries=0)


@pytest.fixture
def fake_repository(fake_store: FakeRowStore) -> ApiKeyRepository:
    """ApiKeyRepository backed by the fake store, with fast retries."""
    return ApiKeyRepository(fake_store, timeout=0.5, list_retries=2, retry_backoff=0.0)
