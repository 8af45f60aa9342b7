"""Domain models for shuk_identity — pure dataclasses."""

from dataclasses import dataclass, field
from datetime import datetime

from src.shuk_common.enums import UserRole


@dataclass
class User:
    id: str
    name: str                       # username, primary identifier
    email: str
    role: UserRole = UserRole.BUYER
    wallet_balance: int = 0         # cents, owned by the identity provider
    joined_at: datetime | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    is_verified_seller: bool = False
    joined_group_ids: list[str] = field(default_factory=list)

    @property
    def shown_name(self) -> str:
        return self.display_name or self.name
