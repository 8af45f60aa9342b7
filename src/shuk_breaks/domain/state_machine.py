"""Break status transition table.

OPEN -> FULL_PENDING_SCHEDULE -> SCHEDULED -> LIVE -> COMPLETED, with
CANCELLED reachable from every non-terminal state and EXPIRED only from OPEN.
FULL_PENDING_SCHEDULE and SCHEDULED fall back to OPEN when an entry is removed.
"""

from src.shuk_common.enums import BreakStatus
from src.shuk_common.errors import BreakStateError

_S = BreakStatus

TRANSITIONS: dict[BreakStatus, frozenset[BreakStatus]] = {
    _S.OPEN: frozenset({_S.FULL_PENDING_SCHEDULE, _S.EXPIRED, _S.CANCELLED}),
    _S.FULL_PENDING_SCHEDULE: frozenset({_S.SCHEDULED, _S.LIVE, _S.OPEN, _S.CANCELLED}),
    _S.SCHEDULED: frozenset({_S.LIVE, _S.OPEN, _S.CANCELLED}),
    _S.LIVE: frozenset({_S.COMPLETED, _S.CANCELLED}),
    _S.COMPLETED: frozenset(),
    _S.EXPIRED: frozenset(),
    _S.CANCELLED: frozenset(),
}


def can_transition(current: BreakStatus, target: BreakStatus) -> bool:
    return target in TRANSITIONS[current]


def check_transition(
    listing_id: str, current: BreakStatus, target: BreakStatus, action: str
) -> None:
    if not can_transition(current, target):
        raise BreakStateError(listing_id, current.value, action)
