"""Shared test fixtures for dashgate."""

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from dashgate.common.config import DashgateSettings
from dashgate.common.database import DatabaseManager
from dashgate.credentials.hasher import ApiKeyHasher


ADMIN_API_KEY = "test-admin-api-key"

# Argon2 parameters cheap enough for a test suite
FAST_HASH = {"time_cost": 1, "memory_cost": 64, "parallelism": 1}


def make_settings(**overrides) -> DashgateSettings:
    defaults = {
        "db_url": "sqlite+aiosqlite://",
        "admin_api_key": ADMIN_API_KEY,
        "hash_time_cost": FAST_HASH["time_cost"],
        "hash_memory_cost": FAST_HASH["memory_cost"],
        "hash_parallelism": FAST_HASH["parallelism"],
    }
    defaults.update(overrides)
    return DashgateSettings(**defaults)


@pytest.fixture
def hasher():
    return ApiKeyHasher(**FAST_HASH)


@pytest.fixture
async def db():
    manager = DatabaseManager(make_settings())
    await manager.init()
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def dashgate_logs(caplog):
    """caplog wired to the ``dashgate`` logger even after setup_logging()."""
    logger = logging.getLogger("dashgate")
    propagate = logger.propagate
    # caplog.handler already sits on the root logger; avoid double capture
    logger.propagate = False
    logger.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger="dashgate")
    yield caplog
    logger.removeHandler(caplog.handler)
    logger.propagate = propagate


@pytest.fixture
def app(monkeypatch):
    """Create a test app with in-memory DB."""
    monkeypatch.setenv("DASHGATE_DB_URL", "sqlite+aiosqlite://")
    monkeypatch.setenv("DASHGATE_ADMIN_API_KEY", ADMIN_API_KEY)
    monkeypatch.setenv("DASHGATE_HASH_TIME_COST", str(FAST_HASH["time_cost"]))
    monkeypatch.setenv("DASHGATE_HASH_MEMORY_COST", str(FAST_HASH["memory_cost"]))
    monkeypatch.setenv("DASHGATE_HASH_PARALLELISM", str(FAST_HASH["parallelism"]))

    # Clear caches and singletons so new env vars take effect
    from dashgate.common.config import get_settings
    get_settings.cache_clear()

    from dashgate.deps import reset_singletons
    reset_singletons()

    from dashgate.app import create_app
    yield create_app()

    get_settings.cache_clear()
    reset_singletons()


@pytest.fixture
async def client(app):
    # Manually init DB since ASGITransport doesn't run lifespan
    from dashgate.deps import get_db
    db = get_db()
    await db.init()
    await db.create_all()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await db.close()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Api-Key": ADMIN_API_KEY}
