"""NotificationEmitter — append-only events raised on engine state transitions.

Emission never fails the calling mutator: the row is stored first, then each
sink gets a best-effort delivery attempt whose errors are logged.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime

from src.shuk_common.datetime_utils import utc_now
from src.shuk_common.enums import NotificationType
from src.shuk_common.errors import (
    AppError,
    NotificationNotFoundError,
    OperationResult,
)
from src.shuk_common.id_generator import generate_id
from src.shuk_notify.domain.models import Notification
from src.shuk_notify.domain.repository import (
    NotificationRepositoryProtocol,
    NotificationSinkProtocol,
)
from src.shuk_notify.infrastructure.memory import InMemoryNotificationRepository

logger = logging.getLogger(__name__)


class NotificationEmitter:
    def __init__(
        self,
        repo: NotificationRepositoryProtocol | None = None,
        sinks: Iterable[NotificationSinkProtocol] = (),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: NotificationRepositoryProtocol = repo or InMemoryNotificationRepository()
        self._sinks = list(sinks)
        self._clock = clock

    async def emit(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        link_to: str | None = None,
    ) -> Notification:
        notification = Notification(
            id=generate_id("ntf"),
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            created_at=self._clock(),
            link_to=link_to,
        )
        await self._repo.add(notification)
        logger.debug("Notification %s -> user=%s (%s)", type.value, user_id, title)
        for sink in self._sinks:
            try:
                await sink.deliver(notification)
            except Exception:
                logger.exception(
                    "Notification sink %r failed for %s", sink, notification.id
                )
        return notification

    async def emit_many(
        self,
        user_ids: Iterable[str],
        type: NotificationType,
        title: str,
        message: str,
        link_to: str | None = None,
    ) -> list[Notification]:
        # one notification per user even if they hold several entries
        seen: dict[str, None] = dict.fromkeys(user_ids)
        return [await self.emit(uid, type, title, message, link_to) for uid in seen]

    async def notifications_for(self, user_id: str) -> list[Notification]:
        return await self._repo.list_for_user(user_id)

    async def unread_count(self, user_id: str) -> int:
        return sum(1 for n in await self._repo.list_for_user(user_id) if not n.is_read)

    async def mark_read(self, notification_id: str, user_id: str) -> OperationResult:
        try:
            notification = await self._repo.get(notification_id)
            # another user's notification is reported as absent
            if notification is None or notification.user_id != user_id:
                raise NotificationNotFoundError(notification_id)
        except AppError as exc:
            return OperationResult.fail(exc)
        if not notification.is_read:
            await self._repo.replace(replace(notification, is_read=True))
        return OperationResult.ok("Notification marked read")

    async def mark_all_read(self, user_id: str) -> int:
        """Returns how many notifications flipped to read."""
        changed = 0
        for notification in await self._repo.list_for_user(user_id):
            if not notification.is_read:
                await self._repo.replace(replace(notification, is_read=True))
                changed += 1
        return changed
