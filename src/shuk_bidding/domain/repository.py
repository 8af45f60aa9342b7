"""Bid storage Protocol. Append-only."""

from typing import Protocol

from src.shuk_bidding.domain.models import Bid


class BidRepositoryProtocol(Protocol):
    async def append(self, bid: Bid) -> None: ...

    async def list_by_listing(self, listing_id: str) -> list[Bid]: ...
