"""Read-only card metadata returned by enrichment lookups."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CardInfo:
    id: str                         # "{set_id}-{number}", e.g. "sv1-25"
    name: str
    number: str
    set_id: str
    set_name: str
    series: str | None = None
    release_year: str | None = None
    supertype: str | None = None    # Pokémon / Trainer / Energy
    pokemon_type: str | None = None
    image_url: str | None = None
