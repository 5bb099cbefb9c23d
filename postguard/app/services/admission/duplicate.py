"""Near-duplicate detection over a client's recent submissions."""

import math
import re
import time
from typing import Optional, Set

from postguard.app.services.admission.history import HistoryStore
from postguard.app.services.admission.models import HistoryEntry
from postguard.app.services.admission.similarity import bounded_levenshtein_distance

_WHITESPACE = re.compile(r"\s+")


def normalize_content(content: str) -> str:
    """Lowercase, collapse whitespace runs to one space, strip."""
    return _WHITESPACE.sub(" ", content.lower()).strip()


class DuplicateDetector:
    """Flags content too similar to something the same client sent recently.

    Only content that is not flagged is remembered; a rejected resubmission
    does not extend the client's history.

    Comparisons run outside the client's lock. The lock is only held to
    snapshot the history and to append, and entries that arrive while a
    comparison is running are compared before the append.
    """

    DEFAULT_THRESHOLD = 0.9

    def __init__(
        self,
        store: Optional[HistoryStore] = None,
        threshold: float = DEFAULT_THRESHOLD,
    ):
        self.store = store if store is not None else HistoryStore()
        self.threshold = threshold

    def _too_similar(self, a: str, b: str) -> bool:
        longest = max(len(a), len(b))
        if longest == 0:
            return 1.0 > self.threshold
        # Similarity can never exceed shortest / longest.
        if min(len(a), len(b)) / longest <= self.threshold:
            return False
        # Any distance above this bound is already below the threshold.
        max_distance = math.ceil((1.0 - self.threshold) * longest)
        distance = bounded_levenshtein_distance(a, b, max_distance)
        return 1.0 - distance / longest > self.threshold

    def is_duplicate(self, key: str, content: str, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        normalized = normalize_content(content)
        checked: Set[HistoryEntry] = set()

        while True:
            with self.store.lock_for(key):
                pending = [e for e in self.store.recent(key, now) if e not in checked]
                if not pending:
                    self.store.append(key, normalized, now)
                    return False

            for entry in pending:
                if self._too_similar(normalized, entry.content):
                    return True
                checked.add(entry)
