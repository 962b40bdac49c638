"""API test fixtures: FastAPI app over a real SQLite-backed gateway.

Invariants:
    - The AppContext is built per test and injected through create_app
    - httpx AsyncClient talks to the app in-process (ASGITransport)
"""

import pytest
from httpx import ASGITransport, AsyncClient

from catalog.context import AppContext
from catalog.main import create_app


@pytest.fixture
def context(settings, gateway) -> AppContext:
    return AppContext(settings, gateway)


@pytest.fixture
async def client(context):
    app = create_app(context)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
async def make_client(settings):
    """Build a client around an arbitrary (possibly fake) gateway."""
    clients = []

    def _make(gateway=None) -> AsyncClient:
        app = create_app(AppContext(settings, gateway))
        c = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(c)
        return c

    yield _make
    for c in clients:
        await c.aclose()
