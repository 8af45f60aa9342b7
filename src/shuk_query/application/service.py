"""DiscoveryService — per-session filters over a catalog snapshot."""

from collections import OrderedDict
from collections.abc import Mapping

from src.shuk_catalog.application.service import CatalogService
from src.shuk_catalog.domain.models import Listing
from src.shuk_common.enums import AppScope, SearchScope, SortOption
from src.shuk_query.domain.filters import FilterSession, FilterState
from src.shuk_query.domain.projection import get_suggestions, project


class DiscoveryService:
    def __init__(
        self,
        catalog: CatalogService,
        set_release_dates: Mapping[str, str] | None = None,
        max_sessions: int = 10_000,
    ) -> None:
        self._catalog = catalog
        # least recently used first
        self._sessions: OrderedDict[str, FilterSession] = OrderedDict()
        self._max_sessions = max_sessions
        self._set_release_dates = dict(set_release_dates or {})

    def session(self, session_id: str) -> FilterSession:
        session = self._sessions.get(session_id)
        if session is None:
            session = self._sessions[session_id] = FilterSession()
            while len(self._sessions) > self._max_sessions:
                self._sessions.popitem(last=False)
        else:
            self._sessions.move_to_end(session_id)
        return session

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def set_filter(self, session_id: str, key: str, value: object) -> FilterState:
        return self.session(session_id).set_filter(key, value)

    def reset_filters(self, session_id: str) -> FilterState:
        return self.session(session_id).reset()

    async def search(
        self,
        app_scope: AppScope,
        filters: FilterState | None = None,
        sort: SortOption = SortOption.NEWEST,
    ) -> list[Listing]:
        snapshot = await self._catalog.list_all()
        return project(
            snapshot, app_scope, filters or FilterState(), sort, self._set_release_dates
        )

    async def search_session(
        self, session_id: str, app_scope: AppScope, sort: SortOption = SortOption.NEWEST
    ) -> list[Listing]:
        return await self.search(app_scope, self.session(session_id).state, sort)

    async def suggestions(self, scope: SearchScope, query: str) -> list[str]:
        snapshot = await self._catalog.list_all()
        return get_suggestions(snapshot, scope, query)
