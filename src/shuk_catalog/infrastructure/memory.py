"""In-memory listing storage."""

from src.shuk_catalog.domain.models import Listing


class InMemoryListingRepository:
    def __init__(self) -> None:
        self._listings: dict[str, Listing] = {}
        self._order: list[str] = []

    async def add(self, listing: Listing) -> None:
        if listing.id in self._listings:
            raise ValueError(f"Duplicate listing id: {listing.id}")
        self._listings[listing.id] = listing
        # newest first
        self._order.insert(0, listing.id)

    async def get(self, listing_id: str) -> Listing | None:
        return self._listings.get(listing_id)

    async def replace(self, listing: Listing) -> bool:
        """Swap in a new version. Returns False when the id is unknown."""
        if listing.id not in self._listings:
            return False
        self._listings[listing.id] = listing
        return True

    async def list_all(self) -> list[Listing]:
        # a fresh list of immutable values is a consistent snapshot
        return [self._listings[lid] for lid in self._order]
