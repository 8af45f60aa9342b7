"""Search text helpers shared by the projection and suggestion paths."""

import re

_SYNONYMS: dict[str, str] = {
    "zard": "charizard",
    "pika": "pikachu",
    "nm": "near mint",
    "lp": "light played",
    "mp": "moderately played",
    "hp": "heavily played",
    "1st ed": "first edition",
    "fa": "full art",
    "aa": "alternate art",
}

_SYNONYM_PATTERNS = [
    (re.compile(rf"\b{re.escape(short)}\b"), full) for short, full in _SYNONYMS.items()
]

# (last release year, era name), checked in order
_ERAS: tuple[tuple[int, str], ...] = (
    (2002, "Vintage (WOTC)"),
    (2006, "EX Era"),
    (2010, "Diamond & Pearl"),
    (2013, "Black & White"),
    (2016, "XY"),
    (2019, "Sun & Moon"),
    (2022, "Sword & Shield"),
)
_LATEST_ERA = "Scarlet & Violet"

ERA_NAMES: tuple[str, ...] = tuple(name for _, name in _ERAS) + (_LATEST_ERA,)

POPULAR_POKEMON: tuple[str, ...] = (
    "Charizard",
    "Pikachu",
    "Mewtwo",
    "Mew",
    "Umbreon",
    "Rayquaza",
    "Lugia",
    "Gengar",
    "Eevee",
    "Blastoise",
    "Venusaur",
    "Gyarados",
)


def normalize_search_text(value: str) -> str:
    """Lower-case and expand collector shorthand: 'Zard NM' -> 'charizard near mint'."""
    text = value.lower()
    for pattern, full in _SYNONYM_PATTERNS:
        text = pattern.sub(full, text)
    return text


def _leading_year(raw: str | None) -> int | None:
    if not raw:
        return None
    match = re.match(r"\s*(\d{4})", raw)
    return int(match.group(1)) if match else None


def get_pokemon_era(raw_date: str | None = None, raw_year: str | None = None) -> str:
    """Map a release year (or ISO date) to its era name; '' when unknown.

    ``raw_year`` wins over ``raw_date`` when both are given.
    """
    year = _leading_year(raw_year) if raw_year else _leading_year(raw_date)
    if year is None:
        return ""
    for last_year, name in _ERAS:
        if year <= last_year:
            return name
    return _LATEST_ERA
