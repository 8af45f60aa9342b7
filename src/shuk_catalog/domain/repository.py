"""Repository Protocol — dependency inversion for testability.

The engine only talks to storage through this Protocol; the in-memory
implementation ships as the default and other stores can be injected.
"""

from typing import Protocol

from src.shuk_catalog.domain.models import Listing


class ListingRepositoryProtocol(Protocol):
    async def add(self, listing: Listing) -> None: ...

    async def get(self, listing_id: str) -> Listing | None: ...

    async def replace(self, listing: Listing) -> bool: ...

    async def list_all(self) -> list[Listing]: ...
