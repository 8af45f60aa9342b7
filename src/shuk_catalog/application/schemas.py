"""Pydantic schemas for the listing API.

The request is flat (one body for all three listing types); ``to_draft``
folds the type-specific fields into the matching terms variant.
"""

from dataclasses import asdict
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

from src.shuk_catalog.domain.models import (
    AuctionTerms,
    BreakTerms,
    CardAttributes,
    DirectSaleTerms,
    Listing,
    ListingDraft,
    ListingTerms,
)
from src.shuk_common.cents import cents_to_display
from src.shuk_common.enums import (
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


class CardAttributesIn(BaseModel):
    pokemon_name: str | None = None
    pokemon_type: PokemonType | None = None
    card_category: CardCategory | None = None
    variant_tags: list[VariantTag] = Field(default_factory=list)
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

    def to_domain(self) -> CardAttributes:
        data = self.model_dump()
        data["variant_tags"] = tuple(self.variant_tags)
        return CardAttributes(**data)


class CreateListingRequest(BaseModel):
    type: ListingType = ListingType.DIRECT_SALE
    title: str = Field(min_length=1, max_length=200)
    price_cents: int = Field(gt=0)
    description: str = ""
    image_url: str = ""
    category: ProductCategory = ProductCategory.RAW_CARD
    attributes: CardAttributesIn = Field(default_factory=CardAttributesIn)
    # AUCTION
    ends_at: datetime | None = None
    # TIMED_BREAK
    target_participants: int | None = Field(default=None, ge=1)
    max_entries_per_user: int | None = Field(default=None, ge=1)
    opens_at: datetime | None = None
    closes_at: datetime | None = None

    @model_validator(mode="after")
    def break_needs_target(self) -> "CreateListingRequest":
        if self.type == ListingType.TIMED_BREAK and self.target_participants is None:
            raise ValueError("target_participants is required for TIMED_BREAK")
        return self

    def to_draft(self) -> ListingDraft:
        terms: ListingTerms
        if self.type == ListingType.AUCTION:
            terms = AuctionTerms(ends_at=self.ends_at)
        elif self.type == ListingType.TIMED_BREAK:
            assert self.target_participants is not None
            terms = BreakTerms(
                target_participants=self.target_participants,
                max_entries_per_user=self.max_entries_per_user,
                opens_at=self.opens_at,
                closes_at=self.closes_at,
            )
        else:
            terms = DirectSaleTerms()
        return ListingDraft(
            title=self.title,
            price=self.price_cents,
            terms=terms,
            category=self.category,
            description=self.description,
            image_url=self.image_url,
            attributes=self.attributes.to_domain(),
        )


class SellerOut(BaseModel):
    id: str
    name: str
    avatar_url: str | None
    verified: bool


class ListingOut(BaseModel):
    id: str
    type: ListingType
    title: str
    price_cents: int
    price_display: str
    is_sold: bool
    created_at: datetime
    category: ProductCategory
    description: str
    image_url: str
    seller: SellerOut
    attributes: dict[str, Any]
    auction: dict[str, Any] | None = None
    timed_break: dict[str, Any] | None = None

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingOut":
        terms = asdict(listing.terms)
        return cls(
            id=listing.id,
            type=listing.type,
            title=listing.title,
            price_cents=listing.price,
            price_display=cents_to_display(listing.price),
            is_sold=listing.is_sold,
            created_at=listing.created_at,
            category=listing.category,
            description=listing.description,
            image_url=listing.image_url,
            seller=SellerOut(**asdict(listing.seller)),
            attributes=asdict(listing.attributes),
            auction=terms if listing.type == ListingType.AUCTION else None,
            timed_break=terms if listing.type == ListingType.TIMED_BREAK else None,
        )


def listings_payload(listings: list[Listing]) -> list[dict[str, Any]]:
    return [ListingOut.from_domain(l).model_dump(mode="json") for l in listings]
