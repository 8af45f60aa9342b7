"""Domain models for shuk_wallet."""

from dataclasses import dataclass
from datetime import datetime

from src.shuk_common.enums import TransactionType


@dataclass(frozen=True)
class WalletTransaction:
    id: str
    user_id: str
    amount: int                     # cents, positive=income negative=expense, 0=RELEASE
    type: TransactionType
    description: str
    balance_after: int              # cents, snapshot after this row, never recomputed
    created_at: datetime
    reference_type: str | None = None   # LISTING / BREAK_ENTRY
    reference_id: str | None = None
