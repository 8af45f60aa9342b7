"""Unit tests for BreakLedger: capacity, state machine, settlement and waitlist."""

from datetime import timedelta

import pytest

from config.settings import Settings
from src.shuk_catalog.domain.models import BreakTerms, ListingDraft
from src.shuk_common.enums import (
    BreakEntryStatus,
    BreakStatus,
    LiveEventType,
    NotificationType,
    TransactionType,
)
from src.shuk_common.errors import ErrorCode
from src.shuk_marketplace.container import build_marketplace


@pytest.fixture
async def funded(fund) -> None:
    for user_id in ("ash", "misty", "gary"):
        await fund(user_id, 10_000)


async def _break(make_listing, target: int = 2, price: int = 2500, **terms):
    return await make_listing(
        title="Scarlet & Violet 151 Booster Box Break",
        price=price,
        terms=BreakTerms(target_participants=target, **terms),
    )


async def _fill(market, listing, users=("ash", "misty")) -> list[str]:
    entry_ids = []
    for user_id in users:
        result = await market.breaks.join_break(listing.id, user_id)
        assert result.success, result.message
        entry_ids.append(result.data["entry_id"])
    return entry_ids


async def _status(market, listing_id: str) -> BreakStatus:
    return (await market.catalog.get(listing_id)).break_status


class TestJoinBreak:
    async def test_fill_scenario(self, market, funded, make_listing) -> None:
        listing = await _break(make_listing, target=2)

        first = await market.breaks.join_break(listing.id, "ash")
        assert first.success and not first.data["is_full"]
        assert await _status(market, listing.id) == BreakStatus.OPEN

        second = await market.breaks.join_break(listing.id, "misty")
        assert second.success and second.data["is_full"]
        updated = await market.catalog.get(listing.id)
        assert updated.terms.current_participants == 2
        assert updated.break_status == BreakStatus.FULL_PENDING_SCHEDULE

        third = await market.breaks.join_break(listing.id, "gary")
        assert third.code == ErrorCode.BREAK_FULL
        assert (await market.catalog.get(listing.id)).terms.current_participants == 2

    async def test_join_authorises_without_moving_funds(
        self, market, funded, make_listing, clock
    ) -> None:
        listing = await _break(make_listing)

        await market.breaks.join_break(listing.id, "ash")

        entry = (await market.breaks.entries_for(listing.id))[0]
        assert entry.status == BreakEntryStatus.AUTHORIZED
        assert entry.auth_expires_at == clock.now + timedelta(days=7)
        assert await market.wallet.balance_of("ash") == 10_000

    async def test_fill_notifies_seller_and_joiner(self, market, funded, make_listing) -> None:
        listing = await _break(make_listing)
        await _fill(market, listing)

        seller = await market.notifier.notifications_for("seller")
        misty = await market.notifier.notifications_for("misty")
        ash = await market.notifier.notifications_for("ash")
        assert [n.type for n in seller] == [NotificationType.BREAK_FULL]
        assert [n.type for n in misty] == [NotificationType.BREAK_FULL]
        assert ash == []

    async def test_missing_listing(self, market) -> None:
        assert (await market.breaks.join_break("lst_nope", "ash")).code == ErrorCode.NOT_FOUND

    async def test_non_break_listing(self, market, funded, make_listing) -> None:
        listing = await make_listing()
        assert (await market.breaks.join_break(listing.id, "ash")).code == ErrorCode.VALIDATION

    async def test_insufficient_funds(self, market, fund, make_listing) -> None:
        await fund("ash", 100)
        listing = await _break(make_listing, price=2500)
        result = await market.breaks.join_break(listing.id, "ash")
        assert result.code == ErrorCode.INSUFFICIENT_FUNDS

    async def test_per_user_cap(self, market, funded, make_listing) -> None:
        listing = await _break(make_listing, target=5, max_entries_per_user=2)

        assert (await market.breaks.join_break(listing.id, "ash")).success
        assert (await market.breaks.join_break(listing.id, "ash")).success
        third = await market.breaks.join_break(listing.id, "ash")

        assert third.code == ErrorCode.VALIDATION
        assert "Max entries (2)" in third.message

    async def test_per_user_cap_can_be_disabled(self, identity, clock) -> None:
        relaxed = build_marketplace(
            Settings(CARD_LOOKUP_ENABLED=False, ENFORCE_MAX_ENTRIES_PER_USER=False),
            identity=identity,
            clock=clock,
        )
        await relaxed.wallet.deposit_funds("ash", 10_000)
        listing = await relaxed.catalog.create(
            "seller",
            ListingDraft(
                title="Crown Zenith Break",
                price=1000,
                terms=BreakTerms(target_participants=5, max_entries_per_user=1),
            ),
        )

        for _ in range(3):
            assert (await relaxed.breaks.join_break(listing.id, "ash")).success

    async def test_live_full_break_reports_full(
        self, market, funded, make_listing, clock
    ) -> None:
        listing = await _break(make_listing)
        await _fill(market, listing)
        await market.breaks.schedule_break(
            listing.id, "seller", clock.now + timedelta(days=1), "https://live.example/1"
        )
        assert (await market.breaks.start_break(listing.id, "seller")).success

        # capacity is checked before status
        result = await market.breaks.join_break(listing.id, "gary")
        assert result.code == ErrorCode.BREAK_FULL


class TestHostLifecycle:
    async def test_schedule_requires_future_time(self, market, funded, make_listing, clock) -> None:
        listing = await _break(make_listing)
        await _fill(market, listing)

        result = await market.breaks.schedule_break(listing.id, "seller", clock.now, "link")

        assert result.code == ErrorCode.VALIDATION
        assert await _status(market, listing.id) == BreakStatus.FULL_PENDING_SCHEDULE

    async def test_schedule_requires_full_break(self, market, funded, make_listing, clock) -> None:
        listing = await _break(make_listing)
        await market.breaks.join_break(listing.id, "ash")

        result = await market.breaks.schedule_break(
            listing.id, "seller", clock.now + timedelta(hours=3), "link"
        )

        assert result.code == ErrorCode.VALIDATION

    async def test_schedule_stores_time_and_link(self, market, funded, make_listing, clock) -> None:
        listing = await _break(make_listing)
        await _fill(market, listing)
        when = clock.now + timedelta(hours=3)

        result = await market.breaks.schedule_break(listing.id, "seller", when, "https://live/x")

        assert result.success
        updated = await market.catalog.get(listing.id)
        assert updated.break_status == BreakStatus.SCHEDULED
        assert updated.terms.scheduled_live_at == when
        assert updated.terms.live_link == "https://live/x"
        ash_types = [n.type for n in await market.notifier.notifications_for("ash")]
        assert NotificationType.INFO in ash_types

    async def test_host_actions_are_owner_only(self, market, funded, make_listing, clock) -> None:
        listing = await _break(make_listing)
        await _fill(market, listing)

        sched = await market.breaks.schedule_break(
            listing.id, "ash", clock.now + timedelta(hours=1), "link"
        )
        start = await market.breaks.start_break(listing.id, "ash")
        cancel = await market.breaks.cancel_break(listing.id, "ash")

        assert sched.code == start.code == cancel.code == ErrorCode.FORBIDDEN

    async def test_start_from_full_pending_emits_event(
        self, market, funded, make_listing, clock
    ) -> None:
        listing = await _break(make_listing)
        await _fill(market, listing)

        result = await market.breaks.start_break(listing.id, "seller")

        assert result.success
        updated = await market.catalog.get(listing.id)
        assert updated.break_status == BreakStatus.LIVE
        assert updated.terms.live_started_at == clock.now
        events = await market.breaks.live_events(listing.id)
        assert [e.type for e in events] == [LiveEventType.BREAK_START]
        misty_types = [n.type for n in await market.notifier.notifications_for("misty")]
        assert NotificationType.BREAK_LIVE in misty_types

    async def test_cannot_start_open_break(self, market, funded, make_listing) -> None:
        listing = await _break(make_listing)
        result = await market.breaks.start_break(listing.id, "seller")
        assert result.code == ErrorCode.VALIDATION

    async def test_complete_settles_authorized_entries(
        self, market, funded, make_listing, clock
    ) -> None:
        listing = await _break(make_listing, price=2500)
        await _fill(market, listing)
        await market.breaks.start_break(listing.id, "seller")

        result = await market.breaks.complete_break(
            listing.id, "seller", ["https://img/1.jpg"], "Pulled a Charizard ex SIR"
        )

        assert result.success
        assert result.data == {"charged": 2, "failed": 0}
        updated = await market.catalog.get(listing.id)
        assert updated.break_status == BreakStatus.COMPLETED
        assert updated.terms.results_media == ("https://img/1.jpg",)
        assert updated.terms.results_notes == "Pulled a Charizard ex SIR"
        assert updated.terms.live_ended_at == clock.now
        entries = await market.breaks.entries_for(listing.id)
        assert {e.status for e in entries} == {BreakEntryStatus.CHARGED}
        for user_id in ("ash", "misty"):
            assert await market.wallet.balance_of(user_id) == 7_500
            tx = (await market.wallet.transactions_for(user_id))[0]
            assert tx.type == TransactionType.PURCHASE
            assert tx.reference_type == "BREAK_ENTRY"
        events = await market.breaks.live_events(listing.id)
        assert events[-1].type == LiveEventType.BREAK_END

    async def test_complete_cancels_entries_that_cannot_pay(
        self, market, funded, make_listing
    ) -> None:
        listing = await _break(make_listing, price=2500)
        await _fill(market, listing)
        await market.wallet.withdraw_funds("misty", 9_000)
        await market.breaks.start_break(listing.id, "seller")

        result = await market.breaks.complete_break(listing.id, "seller")

        assert result.data == {"charged": 1, "failed": 1}
        statuses = {e.user_id: e.status for e in await market.breaks.entries_for(listing.id)}
        assert statuses == {
            "ash": BreakEntryStatus.CHARGED,
            "misty": BreakEntryStatus.CANCELLED,
        }
        assert (await market.catalog.get(listing.id)).terms.current_participants == 1
        assert await market.wallet.balance_of("misty") == 1_000

    async def test_complete_requires_live(self, market, funded, make_listing) -> None:
        listing = await _break(make_listing)
        await _fill(market, listing)
        result = await market.breaks.complete_break(listing.id, "seller")
        assert result.code == ErrorCode.VALIDATION

    async def test_cancel_releases_authorized_entries(self, market, funded, make_listing) -> None:
        listing = await _break(make_listing)
        await _fill(market, listing)

        result = await market.breaks.cancel_break(listing.id, "seller")

        assert result.success and result.data["refunded"] == 0
        updated = await market.catalog.get(listing.id)
        assert updated.break_status == BreakStatus.CANCELLED
        assert updated.terms.current_participants == 0
        entries = await market.breaks.entries_for(listing.id)
        assert {e.status for e in entries} == {BreakEntryStatus.CANCELLED}
        assert await market.wallet.balance_of("ash") == 10_000
        release = (await market.wallet.transactions_for("ash"))[0]
        assert release.type == TransactionType.RELEASE
        assert release.amount == 0
        assert release.balance_after == 10_000
        assert release.reference_id == entries[0].id

    async def test_terminal_break_cannot_be_cancelled(self, market, funded, make_listing) -> None:
        listing = await _break(make_listing)
        await _fill(market, listing)
        await market.breaks.start_break(listing.id, "seller")
        await market.breaks.complete_break(listing.id, "seller")

        result = await market.breaks.cancel_break(listing.id, "seller")

        assert result.code == ErrorCode.VALIDATION
        assert await _status(market, listing.id) == BreakStatus.COMPLETED

    async def test_publish_live_event_only_while_live(self, market, funded, make_listing) -> None:
        listing = await _break(make_listing)
        await _fill(market, listing)

        early = await market.breaks.publish_live_event(
            listing.id, "seller", LiveEventType.WHEEL_SPIN, {"result": "ash"}
        )
        await market.breaks.start_break(listing.id, "seller")
        spin = await market.breaks.publish_live_event(
            listing.id, "seller", LiveEventType.WHEEL_SPIN, {"result": "ash"}
        )
        stranger = await market.breaks.publish_live_event(
            listing.id, "gary", LiveEventType.SYSTEM_MSG
        )

        assert early.code == ErrorCode.VALIDATION
        assert spin.success
        assert stranger.code == ErrorCode.FORBIDDEN
        events = await market.breaks.live_events(listing.id)
        assert [e.type for e in events] == [LiveEventType.BREAK_START, LiveEventType.WHEEL_SPIN]
        assert events[1].payload == {"result": "ash"}


class TestRemoveEntry:
    async def test_removal_reverts_full_break_to_open(self, market, funded, make_listing) -> None:
        listing = await _break(make_listing)
        entry_ids = await _fill(market, listing)

        result = await market.breaks.remove_break_entry(entry_ids[0], "ash")

        assert result.success
        updated = await market.catalog.get(listing.id)
        assert updated.break_status == BreakStatus.OPEN
        assert updated.terms.current_participants == 1
        entries = await market.breaks.entries_for(listing.id)
        assert entries[0].status == BreakEntryStatus.CANCELLED
        [release, _deposit] = await market.wallet.transactions_for("ash")
        assert release.type == TransactionType.RELEASE
        assert await market.wallet.balance_of("ash") == 10_000
        # the freed spot can be taken again
        assert (await market.breaks.join_break(listing.id, "gary")).success

    async def test_removal_from_scheduled_clears_schedule(
        self, market, funded, make_listing, clock
    ) -> None:
        listing = await _break(make_listing)
        entry_ids = await _fill(market, listing)
        await market.breaks.schedule_break(
            listing.id, "seller", clock.now + timedelta(days=1), "https://live/x"
        )

        result = await market.breaks.remove_break_entry(entry_ids[1], "seller")

        assert result.success
        updated = await market.catalog.get(listing.id)
        assert updated.break_status == BreakStatus.OPEN
        assert updated.terms.scheduled_live_at is None
        assert updated.terms.live_link is None

    async def test_stranger_cannot_remove(self, market, funded, make_listing) -> None:
        listing = await _break(make_listing)
        entry_ids = await _fill(market, listing)

        result = await market.breaks.remove_break_entry(entry_ids[0], "gary")

        assert result.code == ErrorCode.FORBIDDEN

    async def test_participant_cannot_leave_live_break(self, market, funded, make_listing) -> None:
        listing = await _break(make_listing)
        entry_ids = await _fill(market, listing)
        await market.breaks.start_break(listing.id, "seller")

        own = await market.breaks.remove_break_entry(entry_ids[0], "ash")
        host = await market.breaks.remove_break_entry(entry_ids[1], "seller")

        assert own.code == ErrorCode.VALIDATION
        assert host.success
        assert await _status(market, listing.id) == BreakStatus.LIVE

    async def test_already_removed_entry(self, market, funded, make_listing) -> None:
        listing = await _break(make_listing)
        entry_ids = await _fill(market, listing)
        await market.breaks.remove_break_entry(entry_ids[0], "ash")

        again = await market.breaks.remove_break_entry(entry_ids[0], "ash")

        assert again.code == ErrorCode.VALIDATION
        assert (await market.catalog.get(listing.id)).terms.current_participants == 1

    async def test_unknown_entry(self, market) -> None:
        result = await market.breaks.remove_break_entry("be_missing", "ash")
        assert result.code == ErrorCode.NOT_FOUND

    async def test_removal_notifies_first_waitlisted_user(
        self, market, funded, make_listing
    ) -> None:
        listing = await _break(make_listing)
        entry_ids = await _fill(market, listing)
        await market.breaks.join_waitlist(listing.id, "gary")

        await market.breaks.remove_break_entry(entry_ids[0], "ash")

        gary = await market.notifier.notifications_for("gary")
        assert [n.title for n in gary] == ["A spot opened up"]


class TestWaitlist:
    async def test_positions_follow_join_order(self, market, make_listing) -> None:
        listing = await _break(make_listing)

        await market.breaks.join_waitlist(listing.id, "ash")
        await market.breaks.join_waitlist(listing.id, "misty")
        await market.breaks.join_waitlist(listing.id, "gary")

        assert await market.breaks.get_waitlist_position(listing.id, "ash") == 1
        assert await market.breaks.get_waitlist_position(listing.id, "gary") == 3

        await market.breaks.leave_waitlist(listing.id, "misty")

        assert await market.breaks.get_waitlist_position(listing.id, "gary") == 2
        assert await market.breaks.get_waitlist_position(listing.id, "misty") == -1

    async def test_not_waitlisted_is_minus_one(self, market, make_listing) -> None:
        listing = await _break(make_listing)
        assert await market.breaks.get_waitlist_position(listing.id, "ash") == -1

    async def test_duplicate_join_rejected(self, market, make_listing) -> None:
        listing = await _break(make_listing)
        await market.breaks.join_waitlist(listing.id, "ash")
        again = await market.breaks.join_waitlist(listing.id, "ash")
        assert again.code == ErrorCode.VALIDATION

    async def test_leave_when_absent(self, market, make_listing) -> None:
        listing = await _break(make_listing)
        result = await market.breaks.leave_waitlist(listing.id, "ash")
        assert not result.success

    async def test_joined_rows_keep_their_rank(self, market, funded, make_listing) -> None:
        listing = await _break(make_listing, target=3)
        await market.breaks.join_waitlist(listing.id, "ash")
        await market.breaks.join_waitlist(listing.id, "misty")

        await market.breaks.join_break(listing.id, "ash")

        assert await market.breaks.get_waitlist_position(listing.id, "ash") == 1
        assert await market.breaks.get_waitlist_position(listing.id, "misty") == 2
        assert not (await market.breaks.join_waitlist(listing.id, "ash")).success


class TestExpireBreak:
    async def test_expires_open_break_after_close(
        self, market, funded, make_listing, clock
    ) -> None:
        listing = await _break(make_listing, target=3, closes_at=clock.now + timedelta(hours=1))
        await market.breaks.join_break(listing.id, "ash")
        clock.advance(hours=2)

        result = await market.breaks.expire_break(listing.id)

        assert result.success
        updated = await market.catalog.get(listing.id)
        assert updated.break_status == BreakStatus.EXPIRED
        assert updated.terms.current_participants == 0
        entries = await market.breaks.entries_for(listing.id)
        assert entries[0].status == BreakEntryStatus.CANCELLED
        txs = await market.wallet.transactions_for("ash")
        assert [t.type for t in txs] == [TransactionType.RELEASE, TransactionType.DEPOSIT]

    async def test_not_before_close(self, market, make_listing, clock) -> None:
        listing = await _break(make_listing, closes_at=clock.now + timedelta(hours=1))
        result = await market.breaks.expire_break(listing.id)
        assert result.code == ErrorCode.VALIDATION

    async def test_full_break_does_not_expire(self, market, funded, make_listing, clock) -> None:
        listing = await _break(make_listing, closes_at=clock.now + timedelta(hours=1))
        await _fill(market, listing)
        clock.advance(hours=2)

        assert (await market.breaks.expire_break(listing.id)).code == ErrorCode.VALIDATION
        assert await market.breaks.expire_overdue_breaks() == 0

    async def test_sweep_hook(self, market, make_listing, clock) -> None:
        overdue = await _break(make_listing, closes_at=clock.now + timedelta(minutes=5))
        later = await _break(make_listing, closes_at=clock.now + timedelta(days=2))
        clock.advance(hours=1)

        assert await market.breaks.expire_overdue_breaks() == 1
        assert await _status(market, overdue.id) == BreakStatus.EXPIRED
        assert await _status(market, later.id) == BreakStatus.OPEN
