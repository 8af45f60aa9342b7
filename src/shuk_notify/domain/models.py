"""Domain models for shuk_notify."""

from dataclasses import dataclass
from datetime import datetime

from src.shuk_common.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    created_at: datetime
    is_read: bool = False
    link_to: str | None = None      # listing id
