"""In-memory wallet ledger storage."""

from src.shuk_wallet.domain.models import WalletTransaction


class InMemoryWalletTransactionRepository:
    def __init__(self) -> None:
        self._rows: dict[str, list[WalletTransaction]] = {}

    async def append(self, tx: WalletTransaction) -> None:
        self._rows.setdefault(tx.user_id, []).append(tx)

    async def list_for_user(self, user_id: str) -> list[WalletTransaction]:
        """Newest first."""
        return list(reversed(self._rows.get(user_id, [])))

    async def latest_for_user(self, user_id: str) -> WalletTransaction | None:
        rows = self._rows.get(user_id)
        return rows[-1] if rows else None
