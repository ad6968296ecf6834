"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database built from the real
models, plus in-memory identity provider and notifier doubles.
"""

import os

os.environ.setdefault("ENV_MODE", "development")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from restaurant_api import models  # noqa: F401
from restaurant_api.database import Base
from restaurant_api.services.codes import CodeGenerator
from restaurant_api.services.identity import MockIdentityProvider
from restaurant_api.services.notifications import MockNotificationService
from restaurant_api.services.signup import SignupOrchestrator
from restaurant_api.services.storage import RestaurantStore


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    maker = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest.fixture
def store(session):
    return RestaurantStore(session)


@pytest.fixture
def identity():
    return MockIdentityProvider()


@pytest.fixture
def notifier():
    return MockNotificationService()


@pytest.fixture
def orchestrator(store, identity, notifier):
    return SignupOrchestrator(store=store, identity=identity, notifier=notifier)


@pytest.fixture
def codes():
    return CodeGenerator()
