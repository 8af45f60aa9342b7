from datetime import datetime

from pydantic import BaseModel

from src.shuk_notify.domain.models import Notification


class NotificationOut(BaseModel):
    id: str
    type: str
    title: str
    message: str
    is_read: bool
    link_to: str | None
    created_at: datetime

    @classmethod
    def from_domain(cls, n: Notification) -> "NotificationOut":
        return cls(
            id=n.id,
            type=n.type.value,
            title=n.title,
            message=n.message,
            is_read=n.is_read,
            link_to=n.link_to,
            created_at=n.created_at,
        )
