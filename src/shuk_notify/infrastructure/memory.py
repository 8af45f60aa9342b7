"""In-memory notification storage."""

from src.shuk_notify.domain.models import Notification


class InMemoryNotificationRepository:
    def __init__(self) -> None:
        self._by_id: dict[str, Notification] = {}
        self._by_user: dict[str, list[str]] = {}

    async def add(self, notification: Notification) -> None:
        self._by_id[notification.id] = notification
        self._by_user.setdefault(notification.user_id, []).append(notification.id)

    async def get(self, notification_id: str) -> Notification | None:
        return self._by_id.get(notification_id)

    async def replace(self, notification: Notification) -> None:
        self._by_id[notification.id] = notification

    async def list_for_user(self, user_id: str) -> list[Notification]:
        """Newest first."""
        ids = self._by_user.get(user_id, [])
        return [self._by_id[nid] for nid in reversed(ids)]
