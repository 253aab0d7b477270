"""
Result Handoff
==============
Single-slot, lock-protected exchange between a worker thread producing results
and the UI thread painting them.

Why is this file needed?
------------------------
1. Atomicity: The UI must never observe a half-built channel map. Workers
   build an immutable result and swap it in with one locked assignment.
2. Ordering: Every request takes a sequence number. A completion is accepted
   only if it is newer than what is already shown, so a slow old request that
   finishes late can never overwrite a fresh one.
"""
from __future__ import annotations

import logging
import threading
from typing import Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResultSlot(Generic[T]):

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._issued = 0
        self._accepted = 0
        self._current: Optional[T] = None

    def next_sequence(self) -> int:
        """Issue the number of a new request."""
        with self._lock:
            self._issued += 1
            return self._issued

    def publish(self, sequence: int, result: T) -> bool:
        """
        Offer a completed result.

        Returns:
            True if the result became current, False if it was stale.
        """
        with self._lock:
            if sequence <= self._accepted:
                logger.debug(f"Discarding stale result #{sequence} (current #{self._accepted}).")
                return False
            self._accepted = sequence
            self._current = result
            return True

    def current(self) -> Optional[T]:
        with self._lock:
            return self._current

    def clear(self) -> None:
        """Drop the current result and reject every request issued so far."""
        with self._lock:
            self._accepted = self._issued
            self._current = None

    def is_latest(self, sequence: int) -> bool:
        """True while no newer request has been issued."""
        with self._lock:
            return sequence == self._issued
