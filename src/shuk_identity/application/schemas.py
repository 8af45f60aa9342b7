from datetime import datetime

from pydantic import BaseModel, Field

from src.shuk_common.cents import cents_to_display
from src.shuk_identity.domain.models import User


class CreateUserRequest(BaseModel):
    id: str = Field(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_\-]+$")
    name: str = Field(min_length=1, max_length=64)
    email: str
    display_name: str | None = None
    avatar_url: str | None = None


class UserOut(BaseModel):
    id: str
    name: str
    display_name: str | None
    email: str
    role: str
    wallet_balance_cents: int
    wallet_balance_display: str
    avatar_url: str | None
    is_verified_seller: bool
    joined_at: datetime | None

    @classmethod
    def from_domain(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            name=user.name,
            display_name=user.display_name,
            email=user.email,
            role=user.role.value,
            wallet_balance_cents=user.wallet_balance,
            wallet_balance_display=cents_to_display(user.wallet_balance),
            avatar_url=user.avatar_url,
            is_verified_seller=user.is_verified_seller,
            joined_at=user.joined_at,
        )
