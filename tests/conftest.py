"""Root conftest: shared test configuration and store fixtures.

Invariants:
    - Tests never reach a real PostgreSQL: DATABASE_URL defaults to SQLite
    - Every test that needs a store gets a fresh SQLite file under tmp_path
    - The cached Settings instance is cleared around each test
"""

import os

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("LOG_FORMAT", "text")

from catalog.config import Settings, get_settings  # noqa: E402
from catalog.infrastructure.database import PersistenceGateway  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}"


@pytest.fixture
def settings(database_url) -> Settings:
    return Settings(
        database_url=database_url, http_host="127.0.0.1", http_port=0,
        blocking_pool_size=2,
    )


@pytest.fixture
async def gateway(database_url):
    gw = PersistenceGateway.build(database_url)
    await gw.prepare()
    yield gw
    await gw.dispose()
