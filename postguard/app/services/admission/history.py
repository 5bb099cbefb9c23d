"""Per-client history of recently submitted content."""

import threading
import time
from typing import Dict, List, Optional

from postguard.app.core.logging import get_logger
from postguard.app.services.admission.locks import StripedLock
from postguard.app.services.admission.models import HistoryEntry

logger = get_logger(__name__)


class HistoryStore:
    """In-memory, time-windowed content history keyed by client.

    Entries older than the window are dropped lazily whenever a client's
    history is read. Appending is left to the caller.
    """

    DEFAULT_WINDOW_SECONDS = 3600
    DEFAULT_MAX_ENTRIES = 200

    def __init__(
        self,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        locks: Optional[StripedLock] = None,
    ):
        """Initialize the history store.

        Args:
            window_seconds: How long an entry is remembered
            max_entries: Per-client cap; the oldest entries are dropped first
            locks: Lock stripes guarding per-client lists
        """
        self.window_seconds = window_seconds
        self.max_entries = max_entries
        self._locks = locks if locks is not None else StripedLock()
        self._entries: Dict[str, List[HistoryEntry]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def lock_for(self, key: str) -> threading.RLock:
        """Lock that makes a read-compare-append sequence atomic for a key."""
        return self._locks.for_key(key)

    def recent(self, key: str, now: Optional[float] = None) -> List[HistoryEntry]:
        """Return the client's non-expired entries, persisting the pruned list."""
        now = time.time() if now is None else now
        with self.lock_for(key):
            return list(self._prune(key, now))

    def _prune(self, key: str, now: float) -> List[HistoryEntry]:
        # Caller holds the key's lock.
        entries = self._entries.get(key)
        if entries is None:
            return []
        cutoff = now - self.window_seconds
        recent = [entry for entry in entries if entry.seen_at > cutoff]
        if recent:
            self._entries[key] = recent
        else:
            del self._entries[key]
        return recent

    def append(self, key: str, content: str, now: Optional[float] = None) -> None:
        now = time.time() if now is None else now
        with self.lock_for(key):
            entries = self._entries.setdefault(key, [])
            entries.append(HistoryEntry(content=content, seen_at=now))
            if len(entries) > self.max_entries:
                del entries[: len(entries) - self.max_entries]

    def sweep(self, now: Optional[float] = None) -> int:
        """Prune every client's history and drop clients left with nothing.

        Clients whose stripe is busy are skipped until a later sweep.

        Returns:
            Number of clients removed
        """
        now = time.time() if now is None else now
        removed = 0
        for key in list(self._entries):
            lock = self.lock_for(key)
            if not lock.acquire(blocking=False):
                continue
            try:
                if key in self._entries and not self._prune(key, now):
                    removed += 1
            finally:
                lock.release()
        if removed:
            logger.debug(f"History sweep removed {removed} idle clients")
        return removed
