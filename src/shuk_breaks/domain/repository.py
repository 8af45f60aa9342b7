"""Storage Protocols for break entries, waitlists and live events."""

from typing import Protocol

from src.shuk_breaks.domain.models import BreakEntry, LiveEvent, WaitlistEntry


class BreakEntryRepositoryProtocol(Protocol):
    async def add(self, entry: BreakEntry) -> None: ...

    async def get(self, entry_id: str) -> BreakEntry | None: ...

    async def replace(self, entry: BreakEntry) -> None: ...

    async def list_by_listing(self, listing_id: str) -> list[BreakEntry]: ...


class WaitlistRepositoryProtocol(Protocol):
    async def add(self, row: WaitlistEntry) -> None: ...

    async def replace(self, row: WaitlistEntry) -> None: ...

    async def list_by_listing(self, listing_id: str) -> list[WaitlistEntry]: ...


class LiveEventRepositoryProtocol(Protocol):
    async def append(self, event: LiveEvent) -> None: ...

    async def list_by_listing(self, listing_id: str) -> list[LiveEvent]: ...
