"""
Issue-order bookkeeping for concurrent requests.

Every request gets a monotonically increasing sequence number when it is
issued. A response is applied only if its number is higher than any response
applied before it, so results land in issue order no matter in which order
the transport completes them.

Usage:
    tracker = SequenceTracker("preview")
    seq = tracker.issue()
    ...
    if tracker.settle(seq):
        apply(result)      # newest so far
    # else: superseded, drop it
"""

from __future__ import annotations

import logging
from typing import Set

logger = logging.getLogger(__name__)


class SequenceTracker:
    """Monotonic sequence numbers plus the "highest resolved wins" rule."""

    def __init__(self, name: str):
        self.name = name
        self._counter: int = 0
        self._applied: int = 0
        self._in_flight: Set[int] = set()

    @property
    def latest_applied(self) -> int:
        return self._applied

    @property
    def in_flight(self) -> bool:
        return bool(self._in_flight)

    def issue(self) -> int:
        """Allocate the next sequence number and mark it in flight."""
        self._counter += 1
        self._in_flight.add(self._counter)
        return self._counter

    def settle(self, seq: int) -> bool:
        """
        Record a successful response for seq.

        Returns:
            True if the response should be applied, False if a response from a
            later request has already been applied.
        """
        self._in_flight.discard(seq)
        if seq <= self._applied:
            logger.debug(f"{self.name}: discarding stale response #{seq} (applied #{self._applied})")
            return False
        self._applied = seq
        return True

    def fail(self, seq: int) -> bool:
        """
        Record a failed request.

        Returns:
            True if the failure is still relevant (nothing newer was applied).
        """
        self._in_flight.discard(seq)
        return seq > self._applied
