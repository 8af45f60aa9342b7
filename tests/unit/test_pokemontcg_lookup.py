"""Tests for PokemonTcgCardLookup against a mocked transport."""

import httpx
import pytest

from src.shuk_enrichment.infrastructure.pokemontcg import PokemonTcgCardLookup

CARD_BODY = {
    "data": {
        "id": "sv3pt5-6",
        "name": "Charizard ex",
        "number": "6",
        "supertype": "Pokémon",
        "types": ["Fire"],
        "set": {
            "id": "sv3pt5",
            "name": "151",
            "series": "Scarlet & Violet",
            "releaseDate": "2023/09/22",
        },
        "images": {
            "small": "https://images.example/6.png",
            "large": "https://images.example/6_hires.png",
        },
    }
}


def _lookup(handler, **kwargs) -> PokemonTcgCardLookup:
    return PokemonTcgCardLookup(
        base_url="https://tcg.test/v2", transport=httpx.MockTransport(handler), **kwargs
    )


class TestLookupCardById:
    async def test_maps_payload(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=CARD_BODY)

        lookup = _lookup(handler, api_key="secret")
        card = await lookup.lookup_card_by_id("sv3pt5-6")
        await lookup.aclose()

        assert seen[0].url.path == "/v2/cards/sv3pt5-6"
        assert seen[0].headers["X-Api-Key"] == "secret"
        assert card.name == "Charizard ex"
        assert card.set_id == "sv3pt5"
        assert card.series == "Scarlet & Violet"
        assert card.release_year == "2023"
        assert card.pokemon_type == "Fire"
        assert card.image_url == "https://images.example/6_hires.png"

    async def test_results_are_cached(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200, json=CARD_BODY)

        lookup = _lookup(handler)
        await lookup.lookup_card_by_id("sv3pt5-6")
        await lookup.lookup_card_by_id("sv3pt5-6")
        await lookup.aclose()

        assert calls == 1

    async def test_expired_cache_refetches(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200, json=CARD_BODY)

        lookup = _lookup(handler, cache_ttl_seconds=0)
        await lookup.lookup_card_by_id("sv3pt5-6")
        await lookup.lookup_card_by_id("sv3pt5-6")
        await lookup.aclose()

        assert calls == 2

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(404, json={"error": "not found"}),
            httpx.Response(500, text="boom"),
            httpx.Response(200, json={"data": {"id": "x"}}),
        ],
    )
    async def test_failures_are_none(self, response) -> None:
        lookup = _lookup(lambda request: response)
        assert await lookup.lookup_card_by_id("x") is None
        await lookup.aclose()

    async def test_transport_error_is_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        lookup = _lookup(handler)
        assert await lookup.lookup_card_by_id("sv3pt5-6") is None
        await lookup.aclose()
