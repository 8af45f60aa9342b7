"""BreakLedger — break entries, waitlists and the break status state machine.

Joining only authorises the entry fee: the joiner's balance must cover it but
no money moves. Funds are captured when the host completes the break and
returned as REFUND rows if a break with charged entries is cancelled.

Every mutator runs under the listing lock and validates before its first
write; wallet calls made from here take the user lock second.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any

from src.shuk_breaks.domain.models import BreakEntry, LiveEvent, WaitlistEntry
from src.shuk_breaks.domain.repository import (
    BreakEntryRepositoryProtocol,
    LiveEventRepositoryProtocol,
    WaitlistRepositoryProtocol,
)
from src.shuk_breaks.domain.rules import (
    check_can_remove,
    check_capacity,
    check_entry_limit,
    check_joinable,
    check_listing_owner,
)
from src.shuk_breaks.domain.state_machine import check_transition
from src.shuk_breaks.infrastructure.memory import (
    InMemoryBreakEntryRepository,
    InMemoryLiveEventRepository,
    InMemoryWaitlistRepository,
)
from src.shuk_catalog.application.service import CatalogService
from src.shuk_catalog.domain.models import BreakTerms, Listing
from src.shuk_catalog.domain.rules import check_listing_type
from src.shuk_common.datetime_utils import ensure_utc, utc_now
from src.shuk_common.enums import (
    BreakEntryStatus,
    BreakStatus,
    ListingType,
    LiveEventType,
    NotificationType,
    TransactionType,
    WaitlistStatus,
)
from src.shuk_common.errors import (
    AppError,
    BreakEntryNotFoundError,
    BreakStateError,
    ListingNotFoundError,
    OperationResult,
    ScheduleError,
    UserNotFoundError,
    WaitlistError,
)
from src.shuk_common.id_generator import generate_id
from src.shuk_common.locks import KeyedLocks
from src.shuk_identity.domain.repository import IdentityProviderProtocol
from src.shuk_notify.application.service import NotificationEmitter
from src.shuk_wallet.application.service import WalletLedger
from src.shuk_wallet.domain.rules import check_funds

logger = logging.getLogger(__name__)

_ENTRY_REFERENCE = "BREAK_ENTRY"


class BreakLedger:
    def __init__(
        self,
        identity: IdentityProviderProtocol,
        catalog: CatalogService,
        wallet: WalletLedger,
        notifier: NotificationEmitter,
        listing_locks: KeyedLocks,
        entries: BreakEntryRepositoryProtocol | None = None,
        waitlist: WaitlistRepositoryProtocol | None = None,
        live_events: LiveEventRepositoryProtocol | None = None,
        hold_days: int = 7,
        enforce_max_entries: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._identity = identity
        self._catalog = catalog
        self._wallet = wallet
        self._notifier = notifier
        self._locks = listing_locks
        self._entries: BreakEntryRepositoryProtocol = entries or InMemoryBreakEntryRepository()
        self._waitlist: WaitlistRepositoryProtocol = waitlist or InMemoryWaitlistRepository()
        self._events: LiveEventRepositoryProtocol = live_events or InMemoryLiveEventRepository()
        self._hold = timedelta(days=hold_days)
        self._enforce_max_entries = enforce_max_entries
        self._clock = clock

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _require_break(self, listing_id: str) -> tuple[Listing, BreakTerms]:
        listing = await self._catalog.get(listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        check_listing_type(listing, ListingType.TIMED_BREAK)
        assert isinstance(listing.terms, BreakTerms)
        return listing, listing.terms

    async def _active_user_ids(self, listing_id: str) -> list[str]:
        return [
            e.user_id for e in await self._entries.list_by_listing(listing_id)
            if e.status.holds_spot
        ]

    async def _append_event(
        self, listing_id: str, type: LiveEventType, payload: dict[str, Any]
    ) -> LiveEvent:
        event = LiveEvent(
            id=generate_id("evt"),
            listing_id=listing_id,
            type=type,
            created_at=self._clock(),
            payload=payload,
        )
        await self._events.append(event)
        return event

    async def _notify_participants(
        self, listing: Listing, type: NotificationType, title: str, message: str
    ) -> None:
        await self._notifier.emit_many(
            await self._active_user_ids(listing.id), type, title, message, link_to=listing.id
        )

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    async def join_break(self, listing_id: str, user_id: str) -> OperationResult:
        async with self._locks.for_key(listing_id):
            try:
                listing, terms = await self._require_break(listing_id)
                check_capacity(listing, terms)
                check_joinable(listing, terms)
                user = await self._identity.get_user(user_id)
                if user is None:
                    raise UserNotFoundError(user_id)
                entries = await self._entries.list_by_listing(listing_id)
                check_entry_limit(
                    terms,
                    [e for e in entries if e.user_id == user_id],
                    enforce=self._enforce_max_entries,
                )
                check_funds(user.wallet_balance, listing.price)
            except AppError as exc:
                logger.debug("join_break rejected: listing=%s user=%s: %s",
                             listing_id, user_id, exc.message)
                return OperationResult.fail(exc)

            now = self._clock()
            entry = BreakEntry(
                id=generate_id("be"),
                listing_id=listing_id,
                user_id=user_id,
                user_name=user.shown_name,
                user_avatar=user.avatar_url,
                status=BreakEntryStatus.AUTHORIZED,
                joined_at=now,
                auth_expires_at=now + self._hold,
            )
            await self._entries.add(entry)

            participants = terms.current_participants + 1
            is_full = participants >= terms.target_participants
            changes: dict[str, Any] = {"current_participants": participants}
            if is_full:
                check_transition(
                    listing_id, terms.status, BreakStatus.FULL_PENDING_SCHEDULE, "fill"
                )
                changes["status"] = BreakStatus.FULL_PENDING_SCHEDULE
            await self._catalog.update(listing_id, **changes)

            for row in await self._waitlist.list_by_listing(listing_id):
                if row.user_id == user_id and row.status == WaitlistStatus.WAITING:
                    await self._waitlist.replace(replace(row, status=WaitlistStatus.JOINED))

            if is_full:
                await self._notifier.emit(
                    listing.seller_id,
                    NotificationType.BREAK_FULL,
                    "Break Full!",
                    f'Your break "{listing.title}" has filled. Please schedule the live stream.',
                    link_to=listing_id,
                )
                await self._notifier.emit(
                    user_id,
                    NotificationType.BREAK_FULL,
                    "Break Full!",
                    f'The break "{listing.title}" is full and will be scheduled soon.',
                    link_to=listing_id,
                )

        logger.info("Break joined: listing=%s user=%s participants=%d/%d",
                    listing_id, user_id, participants, terms.target_participants)
        if is_full:
            message = "Spot secured! Break is now FULL."
        else:
            message = "Spot secured (Funds Authorized)"
        return OperationResult.ok(
            message, entry_id=entry.id, current_participants=participants, is_full=is_full
        )

    async def remove_break_entry(self, entry_id: str, actor_id: str) -> OperationResult:
        entry = await self._entries.get(entry_id)
        if entry is None:
            return OperationResult.fail(BreakEntryNotFoundError(entry_id))

        async with self._locks.for_key(entry.listing_id):
            try:
                # re-read under the lock; the entry may have changed meanwhile
                entry = await self._entries.get(entry_id)
                assert entry is not None
                listing, terms = await self._require_break(entry.listing_id)
                check_can_remove(listing, terms, entry, actor_id)
            except AppError as exc:
                logger.debug("remove_break_entry rejected: entry=%s actor=%s: %s",
                             entry_id, actor_id, exc.message)
                return OperationResult.fail(exc)

            if entry.status == BreakEntryStatus.CHARGED:
                await self._wallet.credit(
                    entry.user_id,
                    listing.price,
                    TransactionType.REFUND,
                    f"Left Break: {listing.title}",
                    reference_type=_ENTRY_REFERENCE,
                    reference_id=entry.id,
                )
                new_status = BreakEntryStatus.REFUNDED
            else:
                await self._wallet.release_hold(
                    entry.user_id,
                    f"Left Break: {listing.title}",
                    reference_type=_ENTRY_REFERENCE,
                    reference_id=entry.id,
                )
                new_status = BreakEntryStatus.CANCELLED
            await self._entries.replace(replace(entry, status=new_status))

            participants = max(0, terms.current_participants - 1)
            changes: dict[str, Any] = {"current_participants": participants}
            if terms.status in (BreakStatus.FULL_PENDING_SCHEDULE, BreakStatus.SCHEDULED):
                check_transition(listing.id, terms.status, BreakStatus.OPEN, "reopen")
                changes.update(status=BreakStatus.OPEN, scheduled_live_at=None, live_link=None)
            await self._catalog.update(listing.id, **changes)

            waiting = [
                r for r in await self._waitlist.list_by_listing(listing.id)
                if r.status == WaitlistStatus.WAITING
            ]
            if waiting:
                await self._notifier.emit(
                    waiting[0].user_id,
                    NotificationType.INFO,
                    "A spot opened up",
                    f'A spot is available in "{listing.title}".',
                    link_to=listing.id,
                )

        logger.info("Break entry removed: entry=%s listing=%s by=%s status=%s",
                    entry_id, listing.id, actor_id, new_status.value)
        return OperationResult.ok("Removed", entry_id=entry_id, current_participants=participants)

    async def entries_for(self, listing_id: str) -> list[BreakEntry]:
        """All entries for a break in join order, including cancelled ones."""
        return await self._entries.list_by_listing(listing_id)

    # ------------------------------------------------------------------
    # Host lifecycle
    # ------------------------------------------------------------------

    async def schedule_break(
        self, listing_id: str, actor_id: str, when: datetime, link: str
    ) -> OperationResult:
        async with self._locks.for_key(listing_id):
            try:
                listing, terms = await self._require_break(listing_id)
                check_listing_owner(listing, actor_id)
                when = ensure_utc(when)
                if when <= self._clock():
                    raise ScheduleError("Scheduled time must be in the future")
                if terms.status != BreakStatus.FULL_PENDING_SCHEDULE:
                    raise BreakStateError(listing_id, terms.status.value, "schedule")
            except AppError as exc:
                logger.debug("schedule_break rejected: listing=%s: %s", listing_id, exc.message)
                return OperationResult.fail(exc)

            await self._catalog.update(
                listing_id, status=BreakStatus.SCHEDULED, scheduled_live_at=when, live_link=link
            )
            await self._notify_participants(
                listing,
                NotificationType.INFO,
                "Break Scheduled",
                f"The break you joined is scheduled for {when.isoformat()}.",
            )
        logger.info("Break scheduled: listing=%s at=%s", listing_id, when.isoformat())
        return OperationResult.ok("Break scheduled & Participants notified")

    async def start_break(self, listing_id: str, actor_id: str) -> OperationResult:
        async with self._locks.for_key(listing_id):
            try:
                listing, terms = await self._require_break(listing_id)
                check_listing_owner(listing, actor_id)
                check_transition(listing_id, terms.status, BreakStatus.LIVE, "start")
            except AppError as exc:
                logger.debug("start_break rejected: listing=%s: %s", listing_id, exc.message)
                return OperationResult.fail(exc)

            await self._catalog.update(
                listing_id, status=BreakStatus.LIVE, live_started_at=self._clock()
            )
            await self._append_event(
                listing_id, LiveEventType.BREAK_START, {"message": "Stream Starting!"}
            )
            await self._notify_participants(
                listing,
                NotificationType.BREAK_LIVE,
                "Break LIVE!",
                "The break is happening now! Click to watch.",
            )
        logger.info("Break live: listing=%s", listing_id)
        return OperationResult.ok("Break is live")

    async def complete_break(
        self,
        listing_id: str,
        actor_id: str,
        media: list[str] | tuple[str, ...] = (),
        notes: str = "",
    ) -> OperationResult:
        async with self._locks.for_key(listing_id):
            try:
                listing, terms = await self._require_break(listing_id)
                check_listing_owner(listing, actor_id)
                check_transition(listing_id, terms.status, BreakStatus.COMPLETED, "complete")
            except AppError as exc:
                logger.debug("complete_break rejected: listing=%s: %s", listing_id, exc.message)
                return OperationResult.fail(exc)

            charged, failed = await self._settle(listing)
            active = await self._active_user_ids(listing_id)
            await self._catalog.update(
                listing_id,
                status=BreakStatus.COMPLETED,
                live_ended_at=self._clock(),
                results_media=tuple(media),
                results_notes=notes,
                current_participants=len(active),
            )
            await self._append_event(
                listing_id, LiveEventType.BREAK_END, {"message": "Break Completed"}
            )
            await self._notifier.emit_many(
                active,
                NotificationType.INFO,
                "Break Completed",
                f'Results for "{listing.title}" are posted.',
                link_to=listing_id,
            )
        logger.info("Break completed: listing=%s charged=%d failed=%d",
                    listing_id, charged, failed)
        return OperationResult.ok("Break completed", charged=charged, failed=failed)

    async def _settle(self, listing: Listing) -> tuple[int, int]:
        """Capture every AUTHORIZED entry. Returns (charged, failed)."""
        charged = failed = 0
        for entry in await self._entries.list_by_listing(listing.id):
            if entry.status != BreakEntryStatus.AUTHORIZED:
                continue
            try:
                await self._wallet.debit(
                    entry.user_id,
                    listing.price,
                    TransactionType.PURCHASE,
                    f"Purchase: {listing.title}",
                    reference_type=_ENTRY_REFERENCE,
                    reference_id=entry.id,
                )
            except AppError as exc:
                await self._entries.replace(replace(entry, status=BreakEntryStatus.CANCELLED))
                await self._notifier.emit(
                    entry.user_id,
                    NotificationType.INFO,
                    "Payment failed",
                    f'Your entry in "{listing.title}" could not be charged and was cancelled.',
                    link_to=listing.id,
                )
                logger.warning("Break capture failed: entry=%s user=%s: %s",
                               entry.id, entry.user_id, exc.message)
                failed += 1
                continue
            await self._entries.replace(replace(entry, status=BreakEntryStatus.CHARGED))
            charged += 1
        return charged, failed

    async def cancel_break(self, listing_id: str, actor_id: str) -> OperationResult:
        async with self._locks.for_key(listing_id):
            try:
                listing, terms = await self._require_break(listing_id)
                check_listing_owner(listing, actor_id)
                check_transition(listing_id, terms.status, BreakStatus.CANCELLED, "cancel")
            except AppError as exc:
                logger.debug("cancel_break rejected: listing=%s: %s", listing_id, exc.message)
                return OperationResult.fail(exc)

            # notify before statuses flip so the current participants are reached
            await self._notify_participants(
                listing,
                NotificationType.INFO,
                "Break Cancelled",
                f'The break "{listing.title}" was cancelled by the host.',
            )
            refunded = await self._release_entries(listing, refund_charged=True)
            await self._catalog.update(
                listing_id, status=BreakStatus.CANCELLED, current_participants=0
            )
            await self._close_waitlist(listing_id)
        logger.info("Break cancelled: listing=%s refunded=%d", listing_id, refunded)
        return OperationResult.ok("Break cancelled", refunded=refunded)

    async def _release_entries(self, listing: Listing, refund_charged: bool) -> int:
        """Cancel AUTHORIZED entries and refund CHARGED ones. Returns refunds issued."""
        refunded = 0
        for entry in await self._entries.list_by_listing(listing.id):
            if entry.status == BreakEntryStatus.AUTHORIZED:
                await self._entries.replace(replace(entry, status=BreakEntryStatus.CANCELLED))
                await self._wallet.release_hold(
                    entry.user_id,
                    f"Hold released: {listing.title}",
                    reference_type=_ENTRY_REFERENCE,
                    reference_id=entry.id,
                )
            elif entry.status == BreakEntryStatus.CHARGED and refund_charged:
                await self._wallet.credit(
                    entry.user_id,
                    listing.price,
                    TransactionType.REFUND,
                    f"Refund: {listing.title}",
                    reference_type=_ENTRY_REFERENCE,
                    reference_id=entry.id,
                )
                await self._entries.replace(replace(entry, status=BreakEntryStatus.REFUNDED))
                refunded += 1
        return refunded

    async def _close_waitlist(self, listing_id: str) -> None:
        for row in await self._waitlist.list_by_listing(listing_id):
            if row.status == WaitlistStatus.WAITING:
                await self._waitlist.replace(replace(row, status=WaitlistStatus.CANCELLED))

    async def expire_break(
        self, listing_id: str, now: datetime | None = None
    ) -> OperationResult:
        """Move an OPEN break whose ``closes_at`` has elapsed to EXPIRED."""
        now = ensure_utc(now or self._clock())
        async with self._locks.for_key(listing_id):
            try:
                listing, terms = await self._require_break(listing_id)
                check_transition(listing_id, terms.status, BreakStatus.EXPIRED, "expire")
                if terms.closes_at is None or ensure_utc(terms.closes_at) > now:
                    raise BreakStateError(listing_id, terms.status.value, "expire")
            except AppError as exc:
                return OperationResult.fail(exc)

            await self._notify_participants(
                listing,
                NotificationType.INFO,
                "Break Expired",
                f'The break "{listing.title}" did not fill in time. Your hold was released.',
            )
            await self._release_entries(listing, refund_charged=True)
            await self._catalog.update(
                listing_id, status=BreakStatus.EXPIRED, current_participants=0
            )
            await self._close_waitlist(listing_id)
            await self._notifier.emit(
                listing.seller_id,
                NotificationType.INFO,
                "Break Expired",
                f'Your break "{listing.title}" closed before filling.',
                link_to=listing_id,
            )
        logger.info("Break expired: listing=%s", listing_id)
        return OperationResult.ok("Break expired")

    async def expire_overdue_breaks(self, now: datetime | None = None) -> int:
        """Sweep hook: expire every OPEN break past its ``closes_at``."""
        now = ensure_utc(now or self._clock())
        expired = 0
        for listing in await self._catalog.list_all():
            closes_at = listing.closes_at
            if (
                listing.break_status == BreakStatus.OPEN
                and closes_at is not None
                and ensure_utc(closes_at) <= now
            ):
                result = await self.expire_break(listing.id, now)
                if result.success:
                    expired += 1
        return expired

    # ------------------------------------------------------------------
    # Waitlist
    # ------------------------------------------------------------------

    async def join_waitlist(self, listing_id: str, user_id: str) -> OperationResult:
        async with self._locks.for_key(listing_id):
            try:
                listing, terms = await self._require_break(listing_id)
                if terms.status.is_terminal:
                    raise BreakStateError(listing_id, terms.status.value, "join the waitlist of")
                user = await self._identity.get_user(user_id)
                if user is None:
                    raise UserNotFoundError(user_id)
                rows = await self._waitlist.list_by_listing(listing_id)
                if any(
                    r.user_id == user_id and r.status != WaitlistStatus.CANCELLED for r in rows
                ):
                    raise WaitlistError("Already on the waitlist")
            except AppError as exc:
                return OperationResult.fail(exc)

            row = WaitlistEntry(
                id=generate_id("wl"),
                listing_id=listing_id,
                user_id=user_id,
                user_name=user.shown_name,
                status=WaitlistStatus.WAITING,
                created_at=self._clock(),
            )
            await self._waitlist.add(row)
        position = await self.get_waitlist_position(listing_id, user_id)
        logger.info("Waitlist joined: listing=%s user=%s position=%d",
                    listing_id, user_id, position)
        return OperationResult.ok("Joined waitlist", position=position)

    async def get_waitlist_position(self, listing_id: str, user_id: str) -> int:
        """1-indexed rank among non-cancelled rows, -1 when not waitlisted.

        A row whose user has since joined the break keeps its place; leaving
        the waitlist cancels the row and everyone behind it moves up.
        """
        rows = [
            r for r in await self._waitlist.list_by_listing(listing_id)
            if r.status != WaitlistStatus.CANCELLED
        ]
        for index, row in enumerate(rows, start=1):
            if row.user_id == user_id:
                return index
        return -1

    async def leave_waitlist(self, listing_id: str, user_id: str) -> OperationResult:
        async with self._locks.for_key(listing_id):
            for row in await self._waitlist.list_by_listing(listing_id):
                if row.user_id == user_id and row.status == WaitlistStatus.WAITING:
                    await self._waitlist.replace(replace(row, status=WaitlistStatus.CANCELLED))
                    return OperationResult.ok("Left waitlist")
        return OperationResult.fail(WaitlistError("Not on the waitlist"))

    # ------------------------------------------------------------------
    # Live events
    # ------------------------------------------------------------------

    async def publish_live_event(
        self,
        listing_id: str,
        actor_id: str,
        type: LiveEventType,
        payload: dict[str, Any] | None = None,
    ) -> OperationResult:
        """Host-published stream event (wheel spin, card reveal, ...). LIVE breaks only."""
        async with self._locks.for_key(listing_id):
            try:
                listing, terms = await self._require_break(listing_id)
                check_listing_owner(listing, actor_id)
                if terms.status != BreakStatus.LIVE:
                    raise BreakStateError(listing_id, terms.status.value, "publish events for")
            except AppError as exc:
                return OperationResult.fail(exc)
            event = await self._append_event(listing_id, type, payload or {})
        return OperationResult.ok("Event published", event_id=event.id)

    async def live_events(self, listing_id: str) -> list[LiveEvent]:
        return await self._events.list_by_listing(listing_id)
