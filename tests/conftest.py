"""Shared test fixtures."""

from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from config.settings import Settings
from src.shuk_catalog.domain.models import DirectSaleTerms, Listing, ListingDraft, ListingTerms
from src.shuk_identity.domain.models import User
from src.shuk_identity.infrastructure.memory import InMemoryIdentityProvider
from src.shuk_marketplace.container import Marketplace, build_marketplace

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

USERS = {
    "seller": "Brock",
    "ash": "Ash",
    "misty": "Misty",
    "gary": "Gary",
}


class FakeClock:
    """Callable clock the services read instead of the wall clock."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def identity() -> InMemoryIdentityProvider:
    provider = InMemoryIdentityProvider()
    for user_id, name in USERS.items():
        provider.add_user(User(id=user_id, name=name, email=f"{user_id}@example.com"))
    return provider


@pytest.fixture
def settings() -> Settings:
    return Settings(CARD_LOOKUP_ENABLED=False)


@pytest.fixture
def market(
    settings: Settings, identity: InMemoryIdentityProvider, clock: FakeClock
) -> Marketplace:
    return build_marketplace(settings, identity=identity, clock=clock)


@pytest.fixture
def fund(market: Marketplace) -> Callable[[str, int], Awaitable[None]]:
    """Deposit through the wallet so the ledger always backs the balance."""

    async def _fund(user_id: str, cents: int) -> None:
        result = await market.wallet.deposit_funds(user_id, cents)
        assert result.success, result.message

    return _fund


@pytest.fixture
def make_listing(market: Marketplace) -> Callable[..., Awaitable[Listing]]:
    async def _make(
        seller_id: str = "seller",
        title: str = "Charizard Base Set Holo",
        price: int = 1000,
        terms: ListingTerms | None = None,
        **kwargs: Any,
    ) -> Listing:
        draft = ListingDraft(
            title=title, price=price, terms=terms or DirectSaleTerms(), **kwargs
        )
        return await market.catalog.create(seller_id, draft)

    return _make
