"""In-memory bid storage."""

from src.shuk_bidding.domain.models import Bid


class InMemoryBidRepository:
    def __init__(self) -> None:
        self._bids: dict[str, list[Bid]] = {}

    async def append(self, bid: Bid) -> None:
        self._bids.setdefault(bid.listing_id, []).append(bid)

    async def list_by_listing(self, listing_id: str) -> list[Bid]:
        """Insertion order."""
        return list(self._bids.get(listing_id, []))
