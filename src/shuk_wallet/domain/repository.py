"""Wallet ledger storage Protocol. Append-only: there is no update or delete."""

from typing import Protocol

from src.shuk_wallet.domain.models import WalletTransaction


class WalletTransactionRepositoryProtocol(Protocol):
    async def append(self, tx: WalletTransaction) -> None: ...

    async def list_for_user(self, user_id: str) -> list[WalletTransaction]: ...

    async def latest_for_user(self, user_id: str) -> WalletTransaction | None: ...
