"""Domain models for shuk_catalog — frozen dataclasses, no storage dependency.

A Listing carries its type-specific state in ``terms``, a tagged union of
DirectSaleTerms / AuctionTerms / BreakTerms. The variant decides the listing
type, so an auction can never carry a break status and vice versa.

Listings are immutable values: every mutation builds a new Listing and the
repository swaps it in whole, so readers always see a complete object.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, ClassVar

from src.shuk_common.enums import (
    BreakStatus,
    CardCategory,
    Condition,
    GradingCompany,
    Language,
    ListingType,
    PokemonType,
    ProductCategory,
    SealedProductType,
    VariantTag,
)


@dataclass(frozen=True)
class SellerSnapshot:
    """Seller identity copied onto the listing at creation time."""

    id: str
    name: str
    avatar_url: str | None = None
    verified: bool = False


@dataclass(frozen=True)
class CardAttributes:
    """Card / product attributes used by discovery facets."""

    pokemon_name: str | None = None
    pokemon_type: PokemonType | None = None
    card_category: CardCategory | None = None
    variant_tags: tuple[VariantTag, ...] = ()
    condition: Condition | None = None
    grading_company: GradingCompany | None = None
    grade: str | None = None
    sealed_product_type: SealedProductType | None = None
    language: Language | None = None
    series: str | None = None
    set_name: str | None = None
    set_id: str | None = None
    release_year: str | None = None
    booster_name: str | None = None
    tcg_card_id: str | None = None


@dataclass(frozen=True)
class DirectSaleTerms:
    TYPE: ClassVar[ListingType] = ListingType.DIRECT_SALE


@dataclass(frozen=True)
class AuctionTerms:
    TYPE: ClassVar[ListingType] = ListingType.AUCTION

    current_bid: int = 0            # cents, 0 until the first bid
    bids_count: int = 0
    high_bidder_id: str | None = None
    ends_at: datetime | None = None
    closed: bool = False            # set once the sweep has closed the auction


@dataclass(frozen=True)
class BreakTerms:
    TYPE: ClassVar[ListingType] = ListingType.TIMED_BREAK

    target_participants: int = 1
    current_participants: int = 0
    status: BreakStatus = BreakStatus.OPEN
    max_entries_per_user: int | None = None
    opens_at: datetime | None = None
    closes_at: datetime | None = None
    scheduled_live_at: datetime | None = None
    live_link: str | None = None
    live_started_at: datetime | None = None
    live_ended_at: datetime | None = None
    results_media: tuple[str, ...] = ()
    results_notes: str | None = None

    @property
    def is_full(self) -> bool:
        return self.current_participants >= self.target_participants


ListingTerms = DirectSaleTerms | AuctionTerms | BreakTerms


@dataclass(frozen=True)
class Listing:
    id: str
    title: str
    price: int                      # cents: asking price, starting bid or entry fee
    seller: SellerSnapshot
    terms: ListingTerms
    created_at: datetime
    category: ProductCategory = ProductCategory.RAW_CARD
    description: str = ""
    image_url: str = ""
    attributes: CardAttributes = field(default_factory=CardAttributes)
    is_sold: bool = False

    @property
    def type(self) -> ListingType:
        return self.terms.TYPE

    @property
    def seller_id(self) -> str:
        return self.seller.id

    @property
    def bids_count(self) -> int:
        return self.terms.bids_count if isinstance(self.terms, AuctionTerms) else 0

    @property
    def current_bid(self) -> int:
        return self.terms.current_bid if isinstance(self.terms, AuctionTerms) else 0

    @property
    def break_status(self) -> BreakStatus | None:
        return self.terms.status if isinstance(self.terms, BreakTerms) else None

    @property
    def ends_at(self) -> datetime | None:
        return self.terms.ends_at if isinstance(self.terms, AuctionTerms) else None

    @property
    def closes_at(self) -> datetime | None:
        return self.terms.closes_at if isinstance(self.terms, BreakTerms) else None


_LISTING_FIELDS = frozenset(f.name for f in fields(Listing))


def merge_listing(listing: Listing, changes: dict[str, Any]) -> Listing:
    """Return a copy of ``listing`` with ``changes`` merged in.

    Keys naming Listing fields are applied to the listing; every other key is
    applied to its terms. A key the terms variant does not have raises
    TypeError, which keeps e.g. ``status`` off an auction.
    """
    top = {k: v for k, v in changes.items() if k in _LISTING_FIELDS}
    term_changes = {k: v for k, v in changes.items() if k not in _LISTING_FIELDS}
    if term_changes:
        top["terms"] = replace(top.get("terms", listing.terms), **term_changes)
    return replace(listing, **top)


@dataclass
class ListingDraft:
    """Seller input for a new listing, before id/seller/timestamps are stamped."""

    title: str
    price: int
    terms: ListingTerms = field(default_factory=DirectSaleTerms)
    category: ProductCategory = ProductCategory.RAW_CARD
    description: str = ""
    image_url: str = ""
    attributes: CardAttributes = field(default_factory=CardAttributes)
