"""
Host collaborators - identity allocation and time.

The settlement engine consumes these from its host rather than owning
them. The implementations here are what the CLI and tests run against:
- IdAllocator: unique asset ids (Keccak-256 of namespace || counter)
- SystemClock: wall-clock seconds, never moving backwards
- ManualClock: explicitly driven time for demos and tests
"""

import itertools
import threading
import time
from typing import Optional

from dutchx.crypto import keccak256


class IdAllocator:
    """
    Allocates unique 32-byte identifiers.

    Ids from different namespaces never collide, and a namespace never
    repeats an id within one allocator.
    """

    def __init__(self, namespace: bytes = b"dutchx"):
        self.namespace = namespace
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def next_id(self) -> bytes:
        with self._lock:
            n = next(self._counter)
        return keccak256(self.namespace + n.to_bytes(8, byteorder="big"))


class Clock:
    """Timestamp source. Subclasses return integer seconds."""

    def now(self) -> int:
        raise NotImplementedError


class SystemClock(Clock):
    """Wall-clock time, clamped to be monotonically non-decreasing."""

    def __init__(self):
        self._last = 0
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            self._last = max(self._last, int(time.time()))
            return self._last


class ManualClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: int = 0):
        self._now = start

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int) -> None:
        if timestamp < self._now:
            raise ValueError(f"Clock cannot move backwards: {timestamp} < {self._now}")
        self._now = timestamp

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("Cannot advance by a negative amount")
        self._now += seconds
        return self._now


def resolve_now(now: Optional[int], clock: Optional[Clock]) -> int:
    """Use an explicit timestamp if given, otherwise ask the clock."""
    if now is not None:
        return now
    if clock is None:
        raise ValueError("No timestamp given and no clock configured")
    return clock.now()
