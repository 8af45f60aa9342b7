"""In-process identity provider used by the app and the test-suite."""

import logging
from dataclasses import fields, replace
from typing import Any

from src.shuk_common.datetime_utils import utc_now
from src.shuk_common.errors import UserNotFoundError
from src.shuk_identity.domain.models import User

logger = logging.getLogger(__name__)

_PROTECTED_FIELDS = frozenset({"id", "wallet_balance"})


class InMemoryIdentityProvider:
    def __init__(self, users: list[User] | None = None) -> None:
        self._users: dict[str, User] = {}
        for user in users or []:
            self.add_user(user)

    def add_user(self, user: User) -> User:
        if user.joined_at is None:
            user = replace(user, joined_at=utc_now())
        self._users[user.id] = user
        return user

    async def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    async def apply_balance_delta(self, user_id: str, delta: int) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        updated = replace(user, wallet_balance=user.wallet_balance + delta)
        self._users[user_id] = updated
        logger.debug(
            "Balance delta applied: user=%s delta=%d balance=%d",
            user_id, delta, updated.wallet_balance,
        )
        return updated

    async def set_fields(self, user_id: str, **updates: Any) -> User:
        """Role, profile and membership changes. Balance moves go through the wallet."""
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        known = {f.name for f in fields(User)}
        unknown = set(updates) - known
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")
        blocked = set(updates) & _PROTECTED_FIELDS
        if blocked:
            raise ValueError(f"Fields cannot be set directly: {sorted(blocked)}")
        updated = replace(user, **updates)
        self._users[user_id] = updated
        return updated
