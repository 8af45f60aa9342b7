"""Identity collaborator Protocol.

The engine reads users and asks the provider to move balances; it never
mutates identity state directly.
"""

from typing import Any, Protocol

from src.shuk_identity.domain.models import User


class IdentityProviderProtocol(Protocol):
    def add_user(self, user: User) -> User: ...

    async def get_user(self, user_id: str) -> User | None: ...

    async def apply_balance_delta(self, user_id: str, delta: int) -> User: ...

    async def set_fields(self, user_id: str, **fields: Any) -> User: ...
