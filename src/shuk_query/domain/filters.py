"""Discovery filter state.

A FilterState is a per-session value: built from defaults, changed one field
at a time through FilterSession and never persisted.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, get_origin, get_type_hints

from pydantic import TypeAdapter, ValidationError

from src.shuk_common.enums import (
    BreakStatus,
    CardCategory,
    Condition,
    GradingCompany,
    ListingType,
    PokemonType,
    ProductCategory,
    SealedProductType,
    SearchScope,
    VariantTag,
)
from src.shuk_common.errors import InvalidFilterError


@dataclass(frozen=True)
class PriceRange:
    """Inclusive bounds in cents. ``None`` leaves that side open."""

    min: int | None = None
    max: int | None = None


@dataclass(frozen=True)
class FilterState:
    search_query: str = ""
    search_scope: SearchScope = SearchScope.ALL
    price_range: PriceRange = field(default_factory=PriceRange)
    pokemon_name: str = ""
    language: str = ""
    series: tuple[str, ...] = ()
    set_ids: tuple[str, ...] = ()
    booster_name: str = ""
    description_query: str = ""
    eras: tuple[str, ...] = ()
    listing_types: tuple[ListingType, ...] = ()
    category: ProductCategory | None = None
    # multi-select facets: OR within one facet, AND across facets
    condition: tuple[Condition, ...] = ()
    grading_company: tuple[GradingCompany, ...] = ()
    grades: tuple[str, ...] = ()
    variant_tags: tuple[VariantTag, ...] = ()
    pokemon_types: tuple[PokemonType, ...] = ()
    card_categories: tuple[CardCategory, ...] = ()
    sealed_product_type: tuple[SealedProductType, ...] = ()
    break_status: tuple[BreakStatus, ...] = ()


FILTER_FIELDS = frozenset(f.name for f in fields(FilterState))

# wire values are validated against the FilterState annotations
_FIELD_TYPES = get_type_hints(FilterState)
_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    name: TypeAdapter(tp) for name, tp in _FIELD_TYPES.items()
}
_MULTI_SELECT = frozenset(
    name for name, tp in _FIELD_TYPES.items() if get_origin(tp) is tuple
)
_DEFAULTS = FilterState()


def _coerce(key: str, value: Any) -> Any:
    if value is None:
        return getattr(_DEFAULTS, key)
    if key in _MULTI_SELECT:
        # a single selection is a one-element facet
        if isinstance(value, list | tuple | set | frozenset):
            value = tuple(value)
        else:
            value = (value,)
    try:
        return _ADAPTERS[key].validate_python(value)
    except ValidationError as exc:
        detail = "; ".join(err["msg"] for err in exc.errors())
        raise InvalidFilterError(key, detail) from exc


class FilterSession:
    """Mutable holder for one caller's FilterState."""

    def __init__(self) -> None:
        self.state = FilterState()

    def set_filter(self, key: str, value: Any) -> FilterState:
        if key not in FILTER_FIELDS:
            raise InvalidFilterError(key)
        self.state = replace(self.state, **{key: _coerce(key, value)})
        return self.state

    def reset(self) -> FilterState:
        self.state = FilterState()
        return self.state
