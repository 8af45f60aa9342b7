"""BidLedger — auction bids and auction close-out.

Bids authorise only: the bidder's balance must cover the amount, but nothing
moves until the auction closes and the winner is charged.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from src.shuk_bidding.domain.models import Bid
from src.shuk_bidding.domain.repository import BidRepositoryProtocol
from src.shuk_bidding.domain.rules import check_bid_amount
from src.shuk_bidding.infrastructure.memory import InMemoryBidRepository
from src.shuk_catalog.application.service import CatalogService
from src.shuk_catalog.domain.models import AuctionTerms
from src.shuk_catalog.domain.rules import (
    auction_has_ended,
    check_auction_running,
    check_listing_type,
    check_not_own_listing,
)
from src.shuk_common.datetime_utils import utc_now
from src.shuk_common.enums import ListingType, NotificationType, TransactionType
from src.shuk_common.errors import (
    AppError,
    ListingClosedError,
    ListingNotFoundError,
    OperationResult,
    UserNotFoundError,
)
from src.shuk_common.id_generator import generate_id
from src.shuk_common.locks import KeyedLocks
from src.shuk_identity.domain.repository import IdentityProviderProtocol
from src.shuk_notify.application.service import NotificationEmitter
from src.shuk_wallet.application.service import WalletLedger
from src.shuk_wallet.domain.rules import check_funds

logger = logging.getLogger(__name__)


class BidLedger:
    def __init__(
        self,
        identity: IdentityProviderProtocol,
        catalog: CatalogService,
        wallet: WalletLedger,
        notifier: NotificationEmitter,
        listing_locks: KeyedLocks,
        repo: BidRepositoryProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._identity = identity
        self._catalog = catalog
        self._wallet = wallet
        self._notifier = notifier
        self._locks = listing_locks
        self._repo: BidRepositoryProtocol = repo or InMemoryBidRepository()
        self._clock = clock

    async def place_bid(self, listing_id: str, bidder_id: str, amount: int) -> OperationResult:
        async with self._locks.for_key(listing_id):
            try:
                listing = await self._catalog.get(listing_id)
                if listing is None:
                    raise ListingNotFoundError(listing_id)
                check_listing_type(listing, ListingType.AUCTION)
                check_not_own_listing(listing, bidder_id, "bid on")
                check_auction_running(listing, self._clock())
                check_bid_amount(listing, amount)
                bidder = await self._identity.get_user(bidder_id)
                if bidder is None:
                    raise UserNotFoundError(bidder_id)
                check_funds(bidder.wallet_balance, amount)
            except AppError as exc:
                logger.debug("Bid rejected: listing=%s bidder=%s amount=%d: %s",
                             listing_id, bidder_id, amount, exc.message)
                return OperationResult.fail(exc)

            previous_leader = listing.terms.high_bidder_id
            bid = Bid(
                id=generate_id("bid"),
                listing_id=listing_id,
                bidder_id=bidder_id,
                bidder_name=bidder.shown_name,
                amount=amount,
                created_at=self._clock(),
            )
            await self._repo.append(bid)
            await self._catalog.update(
                listing_id,
                current_bid=amount,
                bids_count=listing.bids_count + 1,
                high_bidder_id=bidder_id,
            )
            await self._notifier.emit(
                listing.seller_id,
                NotificationType.NEW_BID,
                "New bid",
                f'{bidder.shown_name} bid {amount} cents on "{listing.title}".',
                link_to=listing_id,
            )
            if previous_leader is not None and previous_leader != bidder_id:
                await self._notifier.emit(
                    previous_leader,
                    NotificationType.OUTBID,
                    "You have been outbid",
                    f'A higher bid of {amount} cents was placed on "{listing.title}".',
                    link_to=listing_id,
                )

        logger.info("Bid placed: listing=%s bidder=%s amount=%d", listing_id, bidder_id, amount)
        return OperationResult.ok("Bid placed successfully", bid_id=bid.id, current_bid=amount)

    async def bids_by_listing(self, listing_id: str) -> list[Bid]:
        """Highest first; equal amounts keep ledger order."""
        bids = await self._repo.list_by_listing(listing_id)
        return sorted(bids, key=lambda b: b.amount, reverse=True)

    async def close_auction(
        self, listing_id: str, now: datetime | None = None
    ) -> OperationResult:
        """Settle an ended auction: charge the high bidder and mark the listing sold."""
        async with self._locks.for_key(listing_id):
            try:
                listing = await self._catalog.get(listing_id)
                if listing is None:
                    raise ListingNotFoundError(listing_id)
                check_listing_type(listing, ListingType.AUCTION)
                terms = listing.terms
                assert isinstance(terms, AuctionTerms)
                if terms.closed or listing.is_sold:
                    raise ListingClosedError("Auction already closed")
                if not auction_has_ended(listing, now or self._clock()):
                    raise ListingClosedError("Auction is still running")
            except AppError as exc:
                return OperationResult.fail(exc)

            if terms.high_bidder_id is None:
                await self._catalog.update(listing_id, closed=True)
                await self._notifier.emit(
                    listing.seller_id,
                    NotificationType.INFO,
                    "Auction ended",
                    f'Your auction "{listing.title}" ended without bids.',
                    link_to=listing_id,
                )
                logger.info("Auction closed unsold: id=%s", listing_id)
                return OperationResult.ok("Auction closed without bids")

            winner_id = terms.high_bidder_id
            try:
                tx = await self._wallet.debit(
                    winner_id,
                    terms.current_bid,
                    TransactionType.PURCHASE,
                    f"Won auction: {listing.title}",
                    reference_type="LISTING",
                    reference_id=listing_id,
                )
            except AppError as exc:
                await self._catalog.update(listing_id, closed=True)
                for user_id in (winner_id, listing.seller_id):
                    await self._notifier.emit(
                        user_id,
                        NotificationType.INFO,
                        "Auction payment failed",
                        f'Payment for "{listing.title}" could not be captured.',
                        link_to=listing_id,
                    )
                logger.warning("Auction payment failed: id=%s winner=%s: %s",
                               listing_id, winner_id, exc.message)
                return OperationResult.fail(exc)

            await self._catalog.update(listing_id, closed=True, is_sold=True)
            await self._notifier.emit(
                winner_id,
                NotificationType.BID_WON,
                "You won!",
                f'You won "{listing.title}" for {terms.current_bid} cents.',
                link_to=listing_id,
            )
            await self._notifier.emit(
                listing.seller_id,
                NotificationType.SALE,
                "Auction sold",
                f'Your auction "{listing.title}" sold for {terms.current_bid} cents.',
                link_to=listing_id,
            )
        logger.info("Auction closed: id=%s winner=%s amount=%d",
                    listing_id, winner_id, terms.current_bid)
        return OperationResult.ok(
            "Auction closed", winner_id=winner_id, transaction_id=tx.id
        )

    async def close_ended_auctions(self, now: datetime | None = None) -> int:
        """Sweep hook: close every auction whose deadline has passed."""
        now = now or self._clock()
        closed = 0
        for listing in await self._catalog.list_all():
            terms = listing.terms
            if (
                isinstance(terms, AuctionTerms)
                and not terms.closed
                and not listing.is_sold
                and auction_has_ended(listing, now)
            ):
                result = await self.close_auction(listing.id, now)
                if result.success:
                    closed += 1
        return closed
