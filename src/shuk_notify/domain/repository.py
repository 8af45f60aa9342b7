"""Notification storage and delivery Protocols."""

from typing import Protocol

from src.shuk_notify.domain.models import Notification


class NotificationRepositoryProtocol(Protocol):
    async def add(self, notification: Notification) -> None: ...

    async def get(self, notification_id: str) -> Notification | None: ...

    async def replace(self, notification: Notification) -> None: ...

    async def list_for_user(self, user_id: str) -> list[Notification]: ...


class NotificationSinkProtocol(Protocol):
    """Downstream delivery (push, websocket, email). Fire-and-forget."""

    async def deliver(self, notification: Notification) -> None: ...
