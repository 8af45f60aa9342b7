"""Listing-level guards shared by the bid, purchase and break ledgers."""

from datetime import datetime

from src.shuk_catalog.domain.models import Listing
from src.shuk_common.datetime_utils import ensure_utc
from src.shuk_common.enums import ListingType
from src.shuk_common.errors import ListingClosedError, ListingTypeError, OwnListingError


def check_listing_type(listing: Listing, expected: ListingType) -> None:
    if listing.type != expected:
        raise ListingTypeError(listing.id, expected.value)


def check_not_own_listing(listing: Listing, user_id: str, action: str) -> None:
    if listing.seller_id == user_id:
        raise OwnListingError(action)


def check_not_sold(listing: Listing, detail: str = "Item already sold") -> None:
    if listing.is_sold:
        raise ListingClosedError(detail)


def auction_has_ended(listing: Listing, now: datetime) -> bool:
    ends_at = listing.ends_at
    return ends_at is not None and ensure_utc(now) >= ensure_utc(ends_at)


def check_auction_running(listing: Listing, now: datetime) -> None:
    check_not_sold(listing, "Auction already ended")
    if auction_has_ended(listing, now):
        raise ListingClosedError("Auction has expired")


def check_purchasable(listing: Listing, buyer_id: str, now: datetime) -> None:
    """Direct sale or running auction, not sold, not the buyer's own listing."""
    check_not_sold(listing)
    if listing.type == ListingType.TIMED_BREAK:
        raise ListingTypeError(listing.id, "direct sale or auction")
    if listing.type == ListingType.AUCTION and auction_has_ended(listing, now):
        raise ListingClosedError("Listing has ended")
    check_not_own_listing(listing, buyer_id, "buy")
