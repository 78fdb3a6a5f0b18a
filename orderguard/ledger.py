"""
Bounded per-client order ledger.

Holds ciphertext blobs in insertion order. Once the ledger is full, every
append drops the oldest entry first.
"""

import threading
from collections import deque
from typing import Deque, List, Optional

from .config import LEDGER_CAPACITY


class OrderLedger:
    """
    FIFO ledger with a hard capacity.

    Thread-safe: append and snapshot hold the ledger's own lock, so a reader
    never observes an append half-applied. Ledgers of different clients share
    nothing.
    """

    def __init__(self, capacity: int = LEDGER_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._entries: Deque[bytes] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, blob: bytes) -> Optional[bytes]:
        """
        Append a ciphertext blob.

        Returns:
            The evicted oldest blob if the ledger was full, else None
        """
        with self._lock:
            evicted = self._entries[0] if len(self._entries) == self._capacity else None
            self._entries.append(blob)
            return evicted

    def snapshot(self) -> List[bytes]:
        """Copy of the entries, oldest first."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
