"""Card lookup Protocol. Pure request/response; never touches engine state."""

from typing import Protocol

from src.shuk_enrichment.domain.models import CardInfo


class CardLookupProtocol(Protocol):
    async def lookup_card_by_id(self, card_id: str) -> CardInfo | None: ...
