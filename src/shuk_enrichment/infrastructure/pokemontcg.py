"""pokemontcg.io v2 card lookup.

Base URL: https://api.pokemontcg.io/v2/
Only ``GET /cards/{id}`` is used. Results (including misses) are cached
in-process for ``cache_ttl_seconds``. Any transport or HTTP failure is logged
and reported as ``None``: enrichment is best-effort and never blocks a listing.
"""

import logging
import time
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from src.shuk_enrichment.domain.models import CardInfo

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.pokemontcg.io/v2"


class _SetPayload(BaseModel):
    id: str
    name: str
    series: str | None = None
    releaseDate: str | None = None      # "YYYY/MM/DD"


class _CardPayload(BaseModel):
    id: str
    name: str
    number: str
    set: _SetPayload
    supertype: str | None = None
    types: list[str] = Field(default_factory=list)
    images: dict[str, str] | None = None

    def to_domain(self) -> CardInfo:
        release_year = self.set.releaseDate[:4] if self.set.releaseDate else None
        image_url = None
        if self.images:
            image_url = self.images.get("large") or self.images.get("small")
        return CardInfo(
            id=self.id,
            name=self.name,
            number=self.number,
            set_id=self.set.id,
            set_name=self.set.name,
            series=self.set.series,
            release_year=release_year,
            supertype=self.supertype,
            pokemon_type=self.types[0] if self.types else None,
            image_url=image_url,
        )


class PokemonTcgCardLookup:
    """Async card lookup against pokemontcg.io.

    Usage:
        lookup = PokemonTcgCardLookup(api_key="...")
        card = await lookup.lookup_card_by_id("sv1-25")
        await lookup.aclose()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str | None = None,
        cache_ttl_seconds: float = 3600.0,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"X-Api-Key": api_key} if api_key else {}
        self._client = httpx.AsyncClient(
            base_url=base_url, headers=headers, timeout=timeout, transport=transport
        )
        self._ttl = cache_ttl_seconds
        self._cache: dict[str, tuple[float, CardInfo | None]] = {}

    async def aclose(self) -> None:
        await self._client.aclose()

    async def lookup_card_by_id(self, card_id: str) -> CardInfo | None:
        cached = self._cache.get(card_id)
        if cached is not None and time.monotonic() - cached[0] < self._ttl:
            return cached[1]

        card = await self._fetch(card_id)
        self._cache[card_id] = (time.monotonic(), card)
        return card

    async def _fetch(self, card_id: str) -> CardInfo | None:
        try:
            response = await self._client.get(f"/cards/{card_id}")
        except httpx.RequestError as exc:
            logger.warning("Card lookup failed: card=%s error=%s", card_id, exc)
            return None

        if response.status_code == 404:
            logger.info("Card not found upstream: card=%s", card_id)
            return None
        if response.is_error:
            logger.warning(
                "Card lookup HTTP error: card=%s status=%d", card_id, response.status_code
            )
            return None

        body: dict[str, Any] = response.json()
        try:
            payload = _CardPayload.model_validate(body.get("data", body))
        except ValidationError as exc:
            logger.warning("Card lookup returned malformed payload: card=%s %s", card_id, exc)
            return None
        return payload.to_domain()
