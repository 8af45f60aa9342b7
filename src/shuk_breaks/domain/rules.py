"""Break-specific guards. Each raises an AppError subclass on failure."""

from src.shuk_breaks.domain.models import BreakEntry
from src.shuk_catalog.domain.models import BreakTerms, Listing
from src.shuk_common.enums import BreakStatus
from src.shuk_common.errors import (
    BreakFullError,
    BreakStateError,
    EntryInactiveError,
    EntryLimitError,
    EntryRemovalForbiddenError,
    NotListingOwnerError,
)

# statuses in which a participant may still withdraw their own entry
_SELF_REMOVABLE = frozenset(
    {BreakStatus.OPEN, BreakStatus.FULL_PENDING_SCHEDULE, BreakStatus.SCHEDULED}
)


def check_listing_owner(listing: Listing, actor_id: str) -> None:
    if listing.seller_id != actor_id:
        raise NotListingOwnerError(listing.id)


def check_capacity(listing: Listing, terms: BreakTerms) -> None:
    if terms.is_full:
        raise BreakFullError(listing.id)


def check_joinable(listing: Listing, terms: BreakTerms) -> None:
    if terms.status != BreakStatus.OPEN:
        raise BreakStateError(listing.id, terms.status.value, "join")


def check_entry_limit(
    terms: BreakTerms, user_entries: list[BreakEntry], enforce: bool = True
) -> None:
    """Active entries only; a cancelled or refunded spot does not count."""
    limit = terms.max_entries_per_user
    if not enforce or limit is None:
        return
    active = sum(1 for e in user_entries if e.status.holds_spot)
    if active >= limit:
        raise EntryLimitError(limit)


def check_can_remove(listing: Listing, terms: BreakTerms, entry: BreakEntry, actor_id: str) -> None:
    """The owner may remove any entry until the break ends; a participant only
    their own, and only before the break goes live."""
    if not entry.status.holds_spot:
        raise EntryInactiveError(entry.id, entry.status.value)
    if listing.seller_id == actor_id:
        if terms.status.is_terminal:
            raise BreakStateError(listing.id, terms.status.value, "remove entries from")
        return
    if entry.user_id != actor_id:
        raise EntryRemovalForbiddenError(entry.id)
    if terms.status not in _SELF_REMOVABLE:
        raise BreakStateError(listing.id, terms.status.value, "leave")
