"""Tests for NotificationEmitter."""

from unittest.mock import AsyncMock

from src.shuk_common.enums import NotificationType
from src.shuk_common.errors import ErrorCode
from src.shuk_notify.application.service import NotificationEmitter


class TestEmit:
    async def test_stores_unread_notification(self) -> None:
        emitter = NotificationEmitter()

        n = await emitter.emit("ash", NotificationType.OUTBID, "Outbid", "msg", link_to="lst_1")

        assert n.id.startswith("ntf_")
        assert not n.is_read
        assert await emitter.notifications_for("ash") == [n]
        assert await emitter.unread_count("ash") == 1

    async def test_stamped_by_injected_clock(self, clock) -> None:
        emitter = NotificationEmitter(clock=clock)

        n = await emitter.emit("ash", NotificationType.INFO, "Hello", "")

        assert n.created_at == clock.now

    async def test_engine_notifications_use_engine_clock(
        self, market, fund, make_listing, clock
    ) -> None:
        await fund("ash", 5_000)
        listing = await make_listing(price=1_000)
        clock.advance(hours=3)

        await market.wallet.buy_now(listing.id, "ash")

        [sale] = await market.notifier.notifications_for("seller")
        assert sale.created_at == clock.now

    async def test_newest_first(self) -> None:
        emitter = NotificationEmitter()
        first = await emitter.emit("ash", NotificationType.INFO, "one", "")
        second = await emitter.emit("ash", NotificationType.INFO, "two", "")

        assert await emitter.notifications_for("ash") == [second, first]

    async def test_failing_sink_does_not_fail_emit(self) -> None:
        broken = AsyncMock()
        broken.deliver.side_effect = RuntimeError("push gateway down")
        working = AsyncMock()
        emitter = NotificationEmitter(sinks=[broken, working])

        n = await emitter.emit("ash", NotificationType.SALE, "Sold", "msg")

        working.deliver.assert_awaited_once_with(n)
        assert await emitter.notifications_for("ash") == [n]

    async def test_emit_many_dedupes_users(self) -> None:
        emitter = NotificationEmitter()

        sent = await emitter.emit_many(
            ["ash", "misty", "ash"], NotificationType.BREAK_LIVE, "Live", "msg"
        )

        assert [n.user_id for n in sent] == ["ash", "misty"]


class TestMarkRead:
    async def test_mark_read(self) -> None:
        emitter = NotificationEmitter()
        n = await emitter.emit("ash", NotificationType.INFO, "t", "m")

        result = await emitter.mark_read(n.id, "ash")

        assert result.success
        assert await emitter.unread_count("ash") == 0

    async def test_other_users_notification_is_not_found(self) -> None:
        emitter = NotificationEmitter()
        n = await emitter.emit("ash", NotificationType.INFO, "t", "m")

        result = await emitter.mark_read(n.id, "misty")

        assert result.code == ErrorCode.NOT_FOUND
        assert await emitter.unread_count("ash") == 1

    async def test_mark_all_read(self) -> None:
        emitter = NotificationEmitter()
        for _ in range(3):
            await emitter.emit("ash", NotificationType.INFO, "t", "m")
        await emitter.emit("misty", NotificationType.INFO, "t", "m")

        assert await emitter.mark_all_read("ash") == 3
        assert await emitter.mark_all_read("ash") == 0
        assert await emitter.unread_count("misty") == 1
