"""CatalogService — the listing store.

``create`` stamps identity, counters and seller snapshot; ``update`` merges
fields with no business validation (the ledgers validate before calling it)
and is a silent no-op for unknown ids. The remaining methods are read-side
helpers used by discovery surfaces.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any

from src.shuk_catalog.domain.models import (
    AuctionTerms,
    BreakTerms,
    CardAttributes,
    DirectSaleTerms,
    Listing,
    ListingDraft,
    SellerSnapshot,
    merge_listing,
)
from src.shuk_catalog.domain.repository import ListingRepositoryProtocol
from src.shuk_catalog.infrastructure.memory import InMemoryListingRepository
from src.shuk_common.datetime_utils import FAR_FUTURE, ensure_utc, utc_now
from src.shuk_common.enums import BreakStatus, CardCategory, ListingType, PokemonType, UserRole
from src.shuk_common.errors import InvalidListingError, UserNotFoundError
from src.shuk_common.id_generator import generate_id
from src.shuk_enrichment.domain.lookup import CardLookupProtocol
from src.shuk_enrichment.domain.models import CardInfo
from src.shuk_identity.domain.repository import IdentityProviderProtocol

logger = logging.getLogger(__name__)

_POKEMON_TYPES = frozenset(t.value for t in PokemonType)
_SUPERTYPE_CATEGORY = {
    "Pokémon": CardCategory.POKEMON,
    "Pokemon": CardCategory.POKEMON,
    "Trainer": CardCategory.TRAINER,
    "Energy": CardCategory.ENERGY,
}


def _validate_draft(draft: ListingDraft) -> None:
    if not draft.title or not draft.title.strip():
        raise InvalidListingError("title is required")
    if isinstance(draft.price, bool) or not isinstance(draft.price, int) or draft.price <= 0:
        raise InvalidListingError(f"price must be a positive number of cents, got {draft.price!r}")
    terms = draft.terms
    if isinstance(terms, BreakTerms):
        if terms.target_participants < 1:
            raise InvalidListingError("target_participants must be at least 1")
        if terms.max_entries_per_user is not None and terms.max_entries_per_user < 1:
            raise InvalidListingError("max_entries_per_user must be at least 1")
        if terms.opens_at and terms.closes_at and terms.closes_at <= terms.opens_at:
            raise InvalidListingError("closes_at must be after opens_at")


def _initial_terms(draft: ListingDraft) -> DirectSaleTerms | AuctionTerms | BreakTerms:
    """Reset engine-owned counters regardless of what the draft carried."""
    terms = draft.terms
    if isinstance(terms, AuctionTerms):
        ends_at = ensure_utc(terms.ends_at) if terms.ends_at else None
        return AuctionTerms(ends_at=ends_at)
    if isinstance(terms, BreakTerms):
        return BreakTerms(
            target_participants=terms.target_participants,
            max_entries_per_user=terms.max_entries_per_user,
            opens_at=ensure_utc(terms.opens_at) if terms.opens_at else None,
            closes_at=ensure_utc(terms.closes_at) if terms.closes_at else None,
        )
    return DirectSaleTerms()


def _enrich(attributes: CardAttributes, card: CardInfo) -> CardAttributes:
    """Fill attributes the seller left blank from looked-up card metadata."""
    changes: dict[str, Any] = {}
    if attributes.pokemon_name is None and card.supertype in (None, "Pokémon", "Pokemon"):
        changes["pokemon_name"] = card.name
    if attributes.set_id is None:
        changes["set_id"] = card.set_id
    if attributes.set_name is None:
        changes["set_name"] = card.set_name
    if attributes.series is None and card.series:
        changes["series"] = card.series
    if attributes.release_year is None and card.release_year:
        changes["release_year"] = card.release_year
    if attributes.pokemon_type is None and card.pokemon_type in _POKEMON_TYPES:
        changes["pokemon_type"] = PokemonType(card.pokemon_type)
    if attributes.card_category is None and card.supertype in _SUPERTYPE_CATEGORY:
        changes["card_category"] = _SUPERTYPE_CATEGORY[card.supertype]
    return replace(attributes, **changes) if changes else attributes


class CatalogService:
    def __init__(
        self,
        identity: IdentityProviderProtocol,
        repo: ListingRepositoryProtocol | None = None,
        card_lookup: CardLookupProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._identity = identity
        self._clock = clock
        self._repo: ListingRepositoryProtocol = repo or InMemoryListingRepository()
        self._card_lookup = card_lookup

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    async def create(self, seller_id: str, draft: ListingDraft) -> Listing:
        _validate_draft(draft)
        seller = await self._identity.get_user(seller_id)
        if seller is None:
            raise UserNotFoundError(seller_id)

        attributes = draft.attributes
        if attributes.tcg_card_id and self._card_lookup is not None:
            card = await self._card_lookup.lookup_card_by_id(attributes.tcg_card_id)
            if card is not None:
                attributes = _enrich(attributes, card)

        listing = Listing(
            id=generate_id("lst"),
            title=draft.title.strip(),
            price=draft.price,
            seller=SellerSnapshot(
                id=seller.id,
                name=seller.shown_name,
                avatar_url=seller.avatar_url,
                verified=seller.is_verified_seller,
            ),
            terms=_initial_terms(draft),
            created_at=self._clock(),
            category=draft.category,
            description=draft.description,
            image_url=draft.image_url,
            attributes=attributes,
        )
        await self._repo.add(listing)
        if seller.role != UserRole.SELLER:
            await self._identity.set_fields(seller.id, role=UserRole.SELLER)

        logger.info(
            "Listing created: id=%s type=%s seller=%s price=%d",
            listing.id, listing.type.value, seller.id, listing.price,
        )
        return listing

    async def update(self, listing_id: str, **changes: Any) -> None:
        """Merge ``changes`` into the listing. Unknown ids are ignored."""
        listing = await self._repo.get(listing_id)
        if listing is None:
            logger.debug("update ignored: listing %s not found", listing_id)
            return
        await self._repo.replace(merge_listing(listing, changes))

    async def verify_seller_listings(self, seller_id: str) -> int:
        """Flag the seller verified and restamp their existing listings."""
        await self._identity.set_fields(seller_id, is_verified_seller=True)
        changed = 0
        for listing in await self._repo.list_all():
            if listing.seller_id == seller_id and not listing.seller.verified:
                await self._repo.replace(
                    replace(listing, seller=replace(listing.seller, verified=True))
                )
                changed += 1
        return changed

    # ------------------------------------------------------------------
    # Getters
    # ------------------------------------------------------------------

    async def get(self, listing_id: str) -> Listing | None:
        return await self._repo.get(listing_id)

    async def list_all(self) -> list[Listing]:
        return await self._repo.list_all()

    async def list_by_seller(self, seller_id: str) -> list[Listing]:
        return [l for l in await self._repo.list_all() if l.seller_id == seller_id]

    async def ending_soon_auctions(self, limit: int) -> list[Listing]:
        auctions = [
            l for l in await self._repo.list_all()
            if l.type == ListingType.AUCTION and not l.is_sold
        ]
        auctions.sort(key=lambda l: l.ends_at or FAR_FUTURE)
        return auctions[:limit]

    async def closing_breaks(self, limit: int) -> list[Listing]:
        """OPEN breaks, most-subscribed first."""
        breaks = [
            l for l in await self._repo.list_all()
            if l.break_status == BreakStatus.OPEN
        ]
        breaks.sort(key=lambda l: l.terms.current_participants, reverse=True)
        return breaks[:limit]

    async def related_listings(self, listing_id: str, limit: int = 4) -> list[Listing]:
        listing = await self._repo.get(listing_id)
        if listing is None:
            return []
        base = listing.attributes

        def _related(other: Listing) -> bool:
            attrs = other.attributes
            return (
                (base.set_id is not None and attrs.set_id == base.set_id)
                or (base.pokemon_name is not None and attrs.pokemon_name == base.pokemon_name)
                or (base.series is not None and attrs.series == base.series)
            )

        return [
            l for l in await self._repo.list_all()
            if l.id != listing.id and _related(l)
        ][:limit]
