"""Wallet ledger invariant.

A live balance that disagrees with the ledger is a programming defect, not a
runtime condition: it raises AssertionError and is never caught by the engine.
"""

import logging

from src.shuk_wallet.domain.models import WalletTransaction

logger = logging.getLogger(__name__)


def verify_balance_matches_ledger(
    user_id: str, live_balance: int, latest: WalletTransaction | None
) -> None:
    """Live balance must equal balance_after of the user's most recent row."""
    if latest is None:
        return
    assert live_balance == latest.balance_after, (
        f"Ledger divergence: user={user_id} balance={live_balance} "
        f"!= ledger balance_after={latest.balance_after} (tx={latest.id})"
    )
    logger.debug("Wallet invariant OK: user=%s balance=%d", user_id, live_balance)
