"""Catalog projection: scope -> free text -> equality filters -> facets -> price -> sort.

Pure functions over a listing snapshot. Every stage keeps input order, and the
final sort is stable, so equal keys keep the catalog's order.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime

from src.shuk_catalog.domain.models import Listing
from src.shuk_common.datetime_utils import FAR_FUTURE, ensure_utc
from src.shuk_common.enums import AppScope, ListingType, SearchScope, SortOption
from src.shuk_query.domain.filters import FilterState
from src.shuk_query.domain.text import POPULAR_POKEMON, get_pokemon_era, normalize_search_text

SUGGESTION_LIMIT = 10
_MIN_SUGGESTION_QUERY = 2


def _n(value: str | None) -> str:
    return normalize_search_text(value or "")


def _in_scope(listing: Listing, scope: AppScope) -> bool:
    if scope == AppScope.MARKETPLACE:
        return listing.type != ListingType.TIMED_BREAK
    if scope == AppScope.BREAKS:
        return listing.type == ListingType.TIMED_BREAK
    return True


def _matches_text(listing: Listing, query: str, scope: SearchScope) -> bool:
    attrs = listing.attributes
    if scope == SearchScope.TITLE:
        return query in _n(listing.title)
    if scope == SearchScope.POKEMON:
        return query in _n(attrs.pokemon_name)
    if scope == SearchScope.SET:
        return query in _n(attrs.set_name) or query in _n(attrs.series)
    if scope == SearchScope.SELLER:
        return query in _n(listing.seller.name)
    if scope == SearchScope.BOOSTER:
        return query in _n(attrs.booster_name)
    return any(
        query in _n(text)
        for text in (
            listing.title,
            attrs.pokemon_name,
            attrs.set_name,
            listing.description,
            listing.seller.name,
        )
    )


def _era_of(listing: Listing, set_release_dates: Mapping[str, str]) -> str:
    attrs = listing.attributes
    release_date = set_release_dates.get(attrs.set_id) if attrs.set_id else None
    return get_pokemon_era(release_date, attrs.release_year)


def _predicates(
    filters: FilterState, scope: AppScope, set_release_dates: Mapping[str, str]
) -> list[Callable[[Listing], bool]]:
    """One predicate per active filter, in pipeline order."""
    preds: list[Callable[[Listing], bool]] = []
    f = filters

    if f.search_query:
        query = normalize_search_text(f.search_query)
        preds.append(lambda l: _matches_text(l, query, f.search_scope))

    # equality filters
    if f.pokemon_name:
        name = normalize_search_text(f.pokemon_name)
        preds.append(lambda l: name in _n(l.attributes.pokemon_name))
    if f.language:
        preds.append(lambda l: l.attributes.language is not None
                     and l.attributes.language.value == f.language)
    if f.series:
        preds.append(lambda l: l.attributes.series in f.series)
    if f.set_ids:
        preds.append(lambda l: l.attributes.set_id in f.set_ids)
    if f.booster_name:
        booster = f.booster_name.lower()
        preds.append(lambda l: booster in (l.attributes.booster_name or "").lower())
    if f.description_query:
        desc = normalize_search_text(f.description_query)
        preds.append(lambda l: desc in _n(l.description))
    if f.eras:
        preds.append(lambda l: _era_of(l, set_release_dates) in f.eras)
    if f.listing_types and scope == AppScope.MARKETPLACE:
        preds.append(lambda l: l.type in f.listing_types)
    if f.category is not None:
        preds.append(lambda l: l.category == f.category)

    # facets
    if f.pokemon_types:
        preds.append(lambda l: l.attributes.pokemon_type in f.pokemon_types)
    if f.card_categories:
        preds.append(lambda l: l.attributes.card_category in f.card_categories)
    if f.variant_tags:
        preds.append(lambda l: any(t in f.variant_tags for t in l.attributes.variant_tags))
    if f.condition:
        preds.append(lambda l: l.attributes.condition in f.condition)
    if f.grading_company:
        preds.append(lambda l: l.attributes.grading_company in f.grading_company)
    if f.grades:
        preds.append(lambda l: l.attributes.grade is not None and l.attributes.grade in f.grades)
    if f.sealed_product_type:
        preds.append(lambda l: l.attributes.sealed_product_type in f.sealed_product_type)
    if f.break_status:
        preds.append(lambda l: l.break_status in f.break_status)

    # price
    low, high = f.price_range.min, f.price_range.max
    if low is not None:
        preds.append(lambda l: l.price >= low)
    if high is not None:
        preds.append(lambda l: l.price <= high)
    return preds


def _deadline(listing: Listing) -> datetime:
    return ensure_utc(listing.ends_at or listing.closes_at or FAR_FUTURE)


def sort_listings(listings: list[Listing], sort: SortOption) -> list[Listing]:
    # sorted() is stable, also with reverse=True
    if sort == SortOption.PRICE_ASC:
        return sorted(listings, key=lambda l: l.price)
    if sort == SortOption.PRICE_DESC:
        return sorted(listings, key=lambda l: l.price, reverse=True)
    if sort == SortOption.ENDING_SOON:
        return sorted(listings, key=_deadline)
    if sort == SortOption.MOST_BIDS:
        return sorted(listings, key=lambda l: l.bids_count, reverse=True)
    return sorted(listings, key=lambda l: ensure_utc(l.created_at), reverse=True)


def project(
    catalog: Iterable[Listing],
    app_scope: AppScope,
    filters: FilterState,
    sort: SortOption = SortOption.NEWEST,
    set_release_dates: Mapping[str, str] | None = None,
) -> list[Listing]:
    """Return the listings visible under ``app_scope`` and ``filters``, sorted.

    ``set_release_dates`` maps set id to ISO release date and is used for the
    era filter; listings without a known set fall back to ``release_year``.
    """
    preds = _predicates(filters, app_scope, set_release_dates or {})
    result = [
        l for l in catalog
        if _in_scope(l, app_scope) and all(p(l) for p in preds)
    ]
    return sort_listings(result, sort)


def get_suggestions(
    catalog: Iterable[Listing],
    scope: SearchScope,
    query: str,
    set_names: Sequence[str] = (),
) -> list[str]:
    """Autocomplete strings containing ``query``.

    Ranked exact match first, then prefix matches, then alphabetically.
    Queries shorter than two characters yield nothing.
    """
    if not query or len(query) < _MIN_SUGGESTION_QUERY:
        return []
    q = query.lower()
    found: dict[str, None] = {}

    def add(text: str | None) -> None:
        if text and q in text.lower():
            found[text] = None

    if scope in (SearchScope.ALL, SearchScope.POKEMON):
        for name in POPULAR_POKEMON:
            add(name)
    if scope in (SearchScope.ALL, SearchScope.SET):
        for name in set_names:
            add(name)

    for listing in catalog:
        attrs = listing.attributes
        if scope == SearchScope.ALL:
            add(listing.title)
            add(listing.description)
            add(attrs.pokemon_name)
        elif scope == SearchScope.TITLE:
            add(listing.title)
        elif scope == SearchScope.POKEMON:
            add(attrs.pokemon_name)
        elif scope == SearchScope.SET:
            add(attrs.set_name)
            add(attrs.series)
        elif scope == SearchScope.SELLER:
            add(listing.seller.name)
        elif scope == SearchScope.BOOSTER:
            add(attrs.booster_name)

    ranked = sorted(
        found,
        key=lambda s: (s.lower() != q, not s.lower().startswith(q), s.lower(), s),
    )
    return ranked[:SUGGESTION_LIMIT]
