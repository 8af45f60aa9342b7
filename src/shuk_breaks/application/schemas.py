from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.shuk_breaks.domain.models import BreakEntry, LiveEvent
from src.shuk_common.enums import LiveEventType


class ScheduleBreakRequest(BaseModel):
    scheduled_live_at: datetime
    live_link: str = Field(min_length=1)


class CompleteBreakRequest(BaseModel):
    results_media: list[str] = Field(default_factory=list)
    results_notes: str = ""


class PublishEventRequest(BaseModel):
    type: LiveEventType
    payload: dict[str, Any] = Field(default_factory=dict)


class BreakEntryOut(BaseModel):
    id: str
    listing_id: str
    user_id: str
    user_name: str
    user_avatar: str | None
    status: str
    joined_at: datetime
    auth_expires_at: datetime

    @classmethod
    def from_domain(cls, entry: BreakEntry) -> "BreakEntryOut":
        return cls(
            id=entry.id,
            listing_id=entry.listing_id,
            user_id=entry.user_id,
            user_name=entry.user_name,
            user_avatar=entry.user_avatar,
            status=entry.status.value,
            joined_at=entry.joined_at,
            auth_expires_at=entry.auth_expires_at,
        )


class LiveEventOut(BaseModel):
    id: str
    listing_id: str
    type: str
    payload: dict[str, Any]
    created_at: datetime

    @classmethod
    def from_domain(cls, event: LiveEvent) -> "LiveEventOut":
        return cls(
            id=event.id,
            listing_id=event.listing_id,
            type=event.type.value,
            payload=event.payload,
            created_at=event.created_at,
        )
