"""Domain models for shuk_bidding."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Bid:
    id: str
    listing_id: str
    bidder_id: str
    bidder_name: str
    amount: int                     # cents
    created_at: datetime
