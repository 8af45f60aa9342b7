"""Integration-test fixtures.

httpx's ASGITransport does not run the app lifespan, so each test installs a
fresh engine on ``app.state`` itself; no sweep task runs during these tests.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from src.main import app
from src.shuk_marketplace.container import Marketplace, build_marketplace


@pytest.fixture
def api_market() -> Marketplace:
    market = build_marketplace(Settings(CARD_LOOKUP_ENABLED=False))
    app.state.marketplace = market
    return market


@pytest.fixture
async def client(api_market: Marketplace) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register(client: AsyncClient) -> Callable[..., Awaitable[None]]:
    """Create a user through the API and optionally fund their wallet."""

    async def _register(user_id: str, deposit_cents: int = 0) -> None:
        resp = await client.post(
            "/api/v1/users",
            json={"id": user_id, "name": user_id.title(), "email": f"{user_id}@example.com"},
        )
        assert resp.status_code == 201, resp.text
        if deposit_cents:
            resp = await client.post(
                "/api/v1/wallet/deposit",
                json={"amount_cents": deposit_cents},
                headers={"X-User-Id": user_id},
            )
            assert resp.status_code == 200, resp.text

    return _register
