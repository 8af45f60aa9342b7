"""Unified error codes, custom exceptions and the mutator result type.

Error code ranges:
  1xxx: Identity
  2xxx: Wallet
  3xxx: Catalog
  4xxx: Bids
  5xxx: Breaks
  9xxx: System

Rule checks raise AppError subclasses. Engine mutators catch them and hand the
caller an OperationResult instead, so business failures never escape as
exceptions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Failure taxonomy surfaced to callers of engine mutators."""

    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION"
    BID_TOO_LOW = "BID_TOO_LOW"
    BREAK_FULL = "BREAK_FULL"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    FORBIDDEN = "FORBIDDEN"
    INTERNAL = "INTERNAL"


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        kind: ErrorCode = ErrorCode.INTERNAL,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.kind = kind
        super().__init__(message)


# --- 1xxx: Identity ---

class UserNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1001, f"User not found: {user_id}", 404, ErrorCode.NOT_FOUND)


class SignInRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Please sign in", 401, ErrorCode.FORBIDDEN)


class UserExistsError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1003, f"User already exists: {user_id}", 409, ErrorCode.VALIDATION)


# --- 2xxx: Wallet ---

class InsufficientFundsError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient funds: required {required} cents, available {available} cents",
            422,
            ErrorCode.INSUFFICIENT_FUNDS,
        )


class InvalidAmountError(AppError):
    def __init__(self, amount: int) -> None:
        super().__init__(
            2002, f"Amount must be positive, got {amount}", 422, ErrorCode.VALIDATION
        )


# --- 3xxx: Catalog ---

class ListingNotFoundError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3001, f"Listing not found: {listing_id}", 404, ErrorCode.NOT_FOUND)


class ListingTypeError(AppError):
    def __init__(self, listing_id: str, expected: str) -> None:
        super().__init__(
            3002, f"Listing {listing_id} is not a {expected}", 422, ErrorCode.VALIDATION
        )


class ListingClosedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3003, detail, 422, ErrorCode.VALIDATION)


class InvalidListingError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3004, f"Invalid listing: {detail}", 422, ErrorCode.VALIDATION)


class NotListingOwnerError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(
            3005,
            f"Only the seller can perform this action on listing {listing_id}",
            403,
            ErrorCode.FORBIDDEN,
        )


class OwnListingError(AppError):
    def __init__(self, action: str) -> None:
        super().__init__(3006, f"Cannot {action} your own listing", 403, ErrorCode.FORBIDDEN)


class InvalidFilterError(AppError):
    def __init__(self, key: str, detail: str = "unknown filter") -> None:
        super().__init__(3007, f"Invalid filter {key}: {detail}", 422, ErrorCode.VALIDATION)


# --- 4xxx: Bids ---

class BidTooLowError(AppError):
    def __init__(self, amount: int, minimum: int, inclusive: bool) -> None:
        relation = "at least" if inclusive else "greater than"
        super().__init__(
            4001,
            f"Bid of {amount} cents is too low: must be {relation} {minimum} cents",
            422,
            ErrorCode.BID_TOO_LOW,
        )


# --- 5xxx: Breaks ---

class BreakFullError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(5001, f"Break is full: {listing_id}", 409, ErrorCode.BREAK_FULL)


class BreakStateError(AppError):
    def __init__(self, listing_id: str, status: str, action: str) -> None:
        super().__init__(
            5002,
            f"Cannot {action} break {listing_id} in status {status}",
            422,
            ErrorCode.VALIDATION,
        )


class EntryLimitError(AppError):
    def __init__(self, limit: int) -> None:
        super().__init__(5003, f"Max entries ({limit}) reached", 422, ErrorCode.VALIDATION)


class BreakEntryNotFoundError(AppError):
    def __init__(self, entry_id: str) -> None:
        super().__init__(5004, f"Break entry not found: {entry_id}", 404, ErrorCode.NOT_FOUND)


class EntryRemovalForbiddenError(AppError):
    def __init__(self, entry_id: str) -> None:
        super().__init__(
            5005, f"Not allowed to remove break entry {entry_id}", 403, ErrorCode.FORBIDDEN
        )


class ScheduleError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5006, detail, 422, ErrorCode.VALIDATION)


class WaitlistError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5007, detail, 422, ErrorCode.VALIDATION)


class EntryInactiveError(AppError):
    def __init__(self, entry_id: str, status: str) -> None:
        super().__init__(
            5008, f"Break entry {entry_id} is already {status}", 422, ErrorCode.VALIDATION
        )


class NotificationNotFoundError(AppError):
    def __init__(self, notification_id: str) -> None:
        super().__init__(
            5101, f"Notification not found: {notification_id}", 404, ErrorCode.NOT_FOUND
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


# ---------------------------------------------------------------------------
# Mutator result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OperationResult:
    """Outcome of an engine mutator. Failures carry the taxonomy code verbatim."""

    success: bool
    message: str
    code: ErrorCode | None = None
    error_code: int = 0
    http_status: int = 200
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, **data: Any) -> "OperationResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, exc: AppError) -> "OperationResult":
        return cls(
            success=False,
            message=exc.message,
            code=exc.kind,
            error_code=exc.code,
            http_status=exc.http_status,
        )
