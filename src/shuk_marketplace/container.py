"""Composition root: wires the catalog, ledgers and discovery into one engine.

All services share one listing lock registry so a bid, a purchase and a break
mutation on the same listing serialise against each other.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from config.settings import Settings
from src.shuk_bidding.application.service import BidLedger
from src.shuk_breaks.application.service import BreakLedger
from src.shuk_catalog.application.service import CatalogService
from src.shuk_common.datetime_utils import utc_now
from src.shuk_common.locks import KeyedLocks
from src.shuk_enrichment.domain.lookup import CardLookupProtocol
from src.shuk_identity.domain.repository import IdentityProviderProtocol
from src.shuk_identity.infrastructure.memory import InMemoryIdentityProvider
from src.shuk_notify.application.service import NotificationEmitter
from src.shuk_query.application.service import DiscoveryService
from src.shuk_wallet.application.service import WalletLedger

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    expired_breaks: int = 0
    closed_auctions: int = 0


@dataclass
class Marketplace:
    identity: IdentityProviderProtocol
    catalog: CatalogService
    notifier: NotificationEmitter
    wallet: WalletLedger
    bids: BidLedger
    breaks: BreakLedger
    discovery: DiscoveryService
    listing_locks: KeyedLocks
    clock: Callable[[], datetime] = utc_now

    async def sweep(self, now: datetime | None = None) -> SweepReport:
        """One pass of time-driven transitions."""
        now = now or self.clock()
        report = SweepReport(
            expired_breaks=await self.breaks.expire_overdue_breaks(now),
            closed_auctions=await self.bids.close_ended_auctions(now),
        )
        if report.expired_breaks or report.closed_auctions:
            logger.info(
                "Sweep: expired_breaks=%d closed_auctions=%d",
                report.expired_breaks, report.closed_auctions,
            )
        return report


def build_marketplace(
    settings: Settings,
    identity: IdentityProviderProtocol | None = None,
    card_lookup: CardLookupProtocol | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> Marketplace:
    identity = identity or InMemoryIdentityProvider()
    locks = KeyedLocks()
    notifier = NotificationEmitter(clock=clock)
    catalog = CatalogService(identity, card_lookup=card_lookup, clock=clock)
    wallet = WalletLedger(identity, catalog, notifier, locks, clock=clock)
    return Marketplace(
        identity=identity,
        catalog=catalog,
        notifier=notifier,
        wallet=wallet,
        bids=BidLedger(identity, catalog, wallet, notifier, locks, clock=clock),
        breaks=BreakLedger(
            identity,
            catalog,
            wallet,
            notifier,
            locks,
            hold_days=settings.BREAK_AUTH_HOLD_DAYS,
            enforce_max_entries=settings.ENFORCE_MAX_ENTRIES_PER_USER,
            clock=clock,
        ),
        discovery=DiscoveryService(catalog, max_sessions=settings.DISCOVERY_MAX_SESSIONS),
        listing_locks=locks,
        clock=clock,
    )
