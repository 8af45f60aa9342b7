from src.shuk_catalog.domain.models import Listing
from src.shuk_common.errors import BidTooLowError


def check_bid_amount(listing: Listing, amount: int) -> None:
    """Raise BidTooLowError unless amount beats the auction's current state.

    With no bids yet the opening bid must reach the starting price; after that
    every bid must be strictly greater than ``current_bid``.
    """
    if listing.bids_count == 0:
        if amount < listing.price:
            raise BidTooLowError(amount, listing.price, inclusive=True)
    elif amount <= listing.current_bid:
        raise BidTooLowError(amount, listing.current_bid, inclusive=False)
