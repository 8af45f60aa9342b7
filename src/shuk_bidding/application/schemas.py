from datetime import datetime

from pydantic import BaseModel, Field

from src.shuk_bidding.domain.models import Bid


class PlaceBidRequest(BaseModel):
    amount_cents: int = Field(gt=0)


class BidOut(BaseModel):
    id: str
    listing_id: str
    bidder_id: str
    bidder_name: str
    amount_cents: int
    created_at: datetime

    @classmethod
    def from_domain(cls, bid: Bid) -> "BidOut":
        return cls(
            id=bid.id,
            listing_id=bid.listing_id,
            bidder_id=bid.bidder_id,
            bidder_name=bid.bidder_name,
            amount_cents=bid.amount,
            created_at=bid.created_at,
        )
