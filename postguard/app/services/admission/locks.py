"""Striped per-key locking for per-client admission state."""

import threading
import zlib
from typing import List


class StripedLock:
    """A fixed set of reentrant locks, each key mapped to one stripe.

    Requests for the same key always serialize on the same lock; requests
    for different keys only contend when they hash to the same stripe.
    Reentrant so a component can call its own locked helpers while holding
    the key's lock.
    """

    DEFAULT_STRIPES = 64

    def __init__(self, stripes: int = DEFAULT_STRIPES):
        if stripes < 1:
            raise ValueError("stripes must be at least 1")
        self._locks: List[threading.RLock] = [threading.RLock() for _ in range(stripes)]

    def __len__(self) -> int:
        return len(self._locks)

    def for_key(self, key: str) -> threading.RLock:
        """Return the lock guarding the given key."""
        # crc32 is stable across processes, unlike hash() on str
        index = zlib.crc32(key.encode("utf-8", "surrogatepass")) % len(self._locks)
        return self._locks[index]
