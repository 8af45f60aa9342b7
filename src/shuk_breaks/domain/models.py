"""Domain models for shuk_breaks."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.shuk_common.enums import BreakEntryStatus, LiveEventType, WaitlistStatus


@dataclass(frozen=True)
class BreakEntry:
    """One purchased spot in a timed break.

    AUTHORIZED entries hold a spot without moving funds; settlement at
    completion turns them into CHARGED entries backed by a PURCHASE row.
    """

    id: str
    listing_id: str
    user_id: str
    user_name: str
    status: BreakEntryStatus
    joined_at: datetime
    auth_expires_at: datetime
    user_avatar: str | None = None


@dataclass(frozen=True)
class WaitlistEntry:
    id: str
    listing_id: str
    user_id: str
    user_name: str
    status: WaitlistStatus
    created_at: datetime


@dataclass(frozen=True)
class LiveEvent:
    id: str
    listing_id: str
    type: LiveEventType
    created_at: datetime
    payload: dict[str, Any] = field(default_factory=dict)
