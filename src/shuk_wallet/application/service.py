"""WalletLedger — every balance change goes through here.

Each movement appends an immutable WalletTransaction carrying the resulting
``balance_after`` and only then asks the identity provider to apply the same
delta, after which the live balance is asserted to equal that balance_after.

Wallet mutations serialise per user. Callers that already hold a listing lock
may call ``debit``/``credit``; the wallet never takes a listing lock itself,
except in ``buy_now`` where it is the outermost lock.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from src.shuk_catalog.application.service import CatalogService
from src.shuk_catalog.domain.rules import check_purchasable
from src.shuk_common.datetime_utils import utc_now
from src.shuk_common.enums import NotificationType, TransactionType
from src.shuk_common.errors import (
    AppError,
    ListingNotFoundError,
    OperationResult,
    UserNotFoundError,
)
from src.shuk_common.id_generator import generate_id
from src.shuk_common.locks import KeyedLocks
from src.shuk_identity.domain.models import User
from src.shuk_identity.domain.repository import IdentityProviderProtocol
from src.shuk_notify.application.service import NotificationEmitter
from src.shuk_wallet.domain.invariants import verify_balance_matches_ledger
from src.shuk_wallet.domain.models import WalletTransaction
from src.shuk_wallet.domain.repository import WalletTransactionRepositoryProtocol
from src.shuk_wallet.domain.rules import check_funds, check_positive_amount
from src.shuk_wallet.infrastructure.memory import InMemoryWalletTransactionRepository

logger = logging.getLogger(__name__)


class WalletLedger:
    def __init__(
        self,
        identity: IdentityProviderProtocol,
        catalog: CatalogService,
        notifier: NotificationEmitter,
        listing_locks: KeyedLocks,
        repo: WalletTransactionRepositoryProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._identity = identity
        self._catalog = catalog
        self._notifier = notifier
        self._listing_locks = listing_locks
        self._user_locks = KeyedLocks()
        self._repo: WalletTransactionRepositoryProtocol = (
            repo or InMemoryWalletTransactionRepository()
        )
        self._clock = clock

    # ------------------------------------------------------------------
    # Ledger primitives
    # ------------------------------------------------------------------

    async def record(
        self,
        user_id: str,
        amount: int,
        type: TransactionType,
        description: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
    ) -> WalletTransaction:
        """Append a row with no funds check. Used for credits (deposits, refunds)."""
        async with self._user_locks.for_key(user_id):
            return await self._append(
                user_id, amount, type, description, reference_type, reference_id
            )

    async def credit(
        self,
        user_id: str,
        amount: int,
        type: TransactionType,
        description: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
    ) -> WalletTransaction:
        check_positive_amount(amount)
        return await self.record(user_id, amount, type, description, reference_type, reference_id)

    async def debit(
        self,
        user_id: str,
        amount: int,
        type: TransactionType,
        description: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
    ) -> WalletTransaction:
        """Check funds and append a negative row, atomically for this user."""
        check_positive_amount(amount)
        async with self._user_locks.for_key(user_id):
            user = await self._require_user(user_id)
            check_funds(user.wallet_balance, amount)
            return await self._append(
                user_id, -amount, type, description, reference_type, reference_id
            )

    async def release_hold(
        self,
        user_id: str,
        description: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
    ) -> WalletTransaction:
        """Zero-amount RELEASE row for an authorisation that ended uncaptured."""
        return await self.record(
            user_id, 0, TransactionType.RELEASE, description, reference_type, reference_id
        )

    async def _append(
        self,
        user_id: str,
        amount: int,
        type: TransactionType,
        description: str,
        reference_type: str | None,
        reference_id: str | None,
    ) -> WalletTransaction:
        user = await self._require_user(user_id)
        tx = WalletTransaction(
            id=generate_id("tx"),
            user_id=user_id,
            amount=amount,
            type=type,
            description=description,
            balance_after=user.wallet_balance + amount,
            created_at=self._clock(),
            reference_type=reference_type,
            reference_id=reference_id,
        )
        await self._repo.append(tx)
        updated = await self._identity.apply_balance_delta(user_id, amount)
        verify_balance_matches_ledger(user_id, updated.wallet_balance, tx)
        logger.info(
            "Wallet %s: user=%s amount=%d balance_after=%d ref=%s",
            type.value, user_id, amount, tx.balance_after, reference_id,
        )
        return tx

    async def _require_user(self, user_id: str) -> User:
        user = await self._identity.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    # ------------------------------------------------------------------
    # Mutators (typed results, never raise for business failures)
    # ------------------------------------------------------------------

    async def deposit_funds(self, user_id: str, amount: int) -> OperationResult:
        try:
            tx = await self.credit(user_id, amount, TransactionType.DEPOSIT, "Wallet Deposit")
        except AppError as exc:
            logger.debug("Deposit rejected: user=%s %s", user_id, exc.message)
            return OperationResult.fail(exc)
        return OperationResult.ok(
            "Funds deposited", transaction_id=tx.id, balance=tx.balance_after
        )

    async def withdraw_funds(self, user_id: str, amount: int) -> OperationResult:
        try:
            tx = await self.debit(
                user_id, amount, TransactionType.WITHDRAWAL, "Withdrawal to Bank"
            )
        except AppError as exc:
            logger.debug("Withdrawal rejected: user=%s %s", user_id, exc.message)
            return OperationResult.fail(exc)
        return OperationResult.ok(
            "Withdrawal processed", transaction_id=tx.id, balance=tx.balance_after
        )

    async def buy_now(self, listing_id: str, user_id: str) -> OperationResult:
        async with self._listing_locks.for_key(listing_id):
            try:
                listing = await self._catalog.get(listing_id)
                if listing is None:
                    raise ListingNotFoundError(listing_id)
                check_purchasable(listing, user_id, self._clock())
                tx = await self.debit(
                    user_id,
                    listing.price,
                    TransactionType.PURCHASE,
                    f"Bought {listing.title}",
                    reference_type="LISTING",
                    reference_id=listing.id,
                )
            except AppError as exc:
                logger.debug("buy_now rejected: listing=%s user=%s %s",
                             listing_id, user_id, exc.message)
                return OperationResult.fail(exc)

            await self._catalog.update(listing_id, is_sold=True)
            await self._notifier.emit(
                listing.seller_id,
                NotificationType.SALE,
                "Item sold",
                f'Your listing "{listing.title}" was purchased.',
                link_to=listing.id,
            )
        logger.info("Listing sold: id=%s buyer=%s price=%d", listing_id, user_id, listing.price)
        return OperationResult.ok(
            "Purchase successful!", transaction_id=tx.id, balance=tx.balance_after
        )

    # ------------------------------------------------------------------
    # Getters
    # ------------------------------------------------------------------

    async def transactions_for(self, user_id: str) -> list[WalletTransaction]:
        return await self._repo.list_for_user(user_id)

    async def balance_of(self, user_id: str) -> int:
        return (await self._require_user(user_id)).wallet_balance

    async def verify_user(self, user_id: str) -> None:
        """Re-check the balance against the ledger for one user."""
        user = await self._require_user(user_id)
        latest = await self._repo.latest_for_user(user_id)
        verify_balance_matches_ledger(user_id, user.wallet_balance, latest)
