from datetime import datetime

from pydantic import BaseModel, Field

from src.shuk_common.cents import cents_to_display
from src.shuk_wallet.domain.models import WalletTransaction


class AmountRequest(BaseModel):
    amount_cents: int = Field(gt=0)


class TransactionOut(BaseModel):
    id: str
    amount_cents: int
    amount_display: str
    type: str
    description: str
    balance_after_cents: int
    reference_type: str | None
    reference_id: str | None
    created_at: datetime

    @classmethod
    def from_domain(cls, tx: WalletTransaction) -> "TransactionOut":
        return cls(
            id=tx.id,
            amount_cents=tx.amount,
            amount_display=cents_to_display(tx.amount),
            type=tx.type.value,
            description=tx.description,
            balance_after_cents=tx.balance_after,
            reference_type=tx.reference_type,
            reference_id=tx.reference_id,
            created_at=tx.created_at,
        )


class BalanceOut(BaseModel):
    user_id: str
    balance_cents: int
    balance_display: str
