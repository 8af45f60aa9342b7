"""In-memory break storage. Every list is returned in insertion order."""

from src.shuk_breaks.domain.models import BreakEntry, LiveEvent, WaitlistEntry


class InMemoryBreakEntryRepository:
    def __init__(self) -> None:
        self._entries: dict[str, BreakEntry] = {}

    async def add(self, entry: BreakEntry) -> None:
        self._entries[entry.id] = entry

    async def get(self, entry_id: str) -> BreakEntry | None:
        return self._entries.get(entry_id)

    async def replace(self, entry: BreakEntry) -> None:
        # dict keeps the original insertion slot, so join order is preserved
        self._entries[entry.id] = entry

    async def list_by_listing(self, listing_id: str) -> list[BreakEntry]:
        return [e for e in self._entries.values() if e.listing_id == listing_id]


class InMemoryWaitlistRepository:
    def __init__(self) -> None:
        self._rows: dict[str, WaitlistEntry] = {}

    async def add(self, row: WaitlistEntry) -> None:
        self._rows[row.id] = row

    async def replace(self, row: WaitlistEntry) -> None:
        self._rows[row.id] = row

    async def list_by_listing(self, listing_id: str) -> list[WaitlistEntry]:
        return [r for r in self._rows.values() if r.listing_id == listing_id]


class InMemoryLiveEventRepository:
    def __init__(self) -> None:
        self._events: dict[str, list[LiveEvent]] = {}

    async def append(self, event: LiveEvent) -> None:
        self._events.setdefault(event.listing_id, []).append(event)

    async def list_by_listing(self, listing_id: str) -> list[LiveEvent]:
        return list(self._events.get(listing_id, []))
