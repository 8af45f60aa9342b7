"""Prefixed, time-ordered IDs for listings, bids, entries and ledger rows.

IDs look like ``lst_29753442304`` and sort by creation time within a prefix.
Single-process only: the sequence lives in this module.
"""

import threading
import time


class PrefixedIdGenerator:
    """``(milliseconds since 2026-01-01) << 12 | sequence``.

    When a millisecond's 4096 sequence numbers run out the generator borrows
    the next millisecond instead of waiting for the wall clock, and it never
    goes backwards when the wall clock does.
    """

    EPOCH_MS = 1_767_225_600_000
    SEQUENCE_BITS = 12

    def __init__(self) -> None:
        self._last = -1
        self._lock = threading.Lock()

    def next_int(self) -> int:
        candidate = (int(time.time() * 1000) - self.EPOCH_MS) << self.SEQUENCE_BITS
        with self._lock:
            self._last = max(candidate, self._last + 1)
            return self._last

    def next_id(self, prefix: str) -> str:
        return f"{prefix}_{self.next_int()}"


_ids = PrefixedIdGenerator()


def generate_id(prefix: str) -> str:
    return _ids.next_id(prefix)
