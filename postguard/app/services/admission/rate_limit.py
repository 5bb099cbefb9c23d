"""Per-client sliding window rate limiter with daily quota and cooldown.

Each client has a short rolling window, a rolling 24 hour quota and a
minimum spacing between admitted requests. State lives in memory and is
bounded by an explicit sweep that drops clients with no recent hits.
"""

import math
import time
from typing import Dict, Optional

from postguard.app.core.logging import get_logger
from postguard.app.services.admission.locks import StripedLock
from postguard.app.services.admission.models import (
    Admitted,
    Decision,
    LimitKind,
    RateState,
    RejectedCooldown,
    RejectedRateLimited,
)

logger = get_logger(__name__)

DAY_SECONDS = 24 * 60 * 60


class SlidingWindowRateLimiter:
    """In-memory sliding window rate limiter.

    Suitable for single-instance deployments. Checks for the same client
    are serialized on that client's lock stripe.
    """

    def __init__(
        self,
        requests_per_window: int = 5,
        window_seconds: int = 300,
        daily_limit: int = 20,
        cooldown_seconds: int = 30,
        day_seconds: int = DAY_SECONDS,
        locks: Optional[StripedLock] = None,
    ):
        """Initialize rate limiter.

        Args:
            requests_per_window: Maximum admitted requests per window
            window_seconds: Short window length in seconds
            daily_limit: Maximum admitted requests per rolling day
            cooldown_seconds: Minimum spacing between admitted requests
            day_seconds: Length of the daily window
            locks: Lock stripes guarding per-client state
        """
        self.requests_per_window = requests_per_window
        self.window_seconds = window_seconds
        self.daily_limit = daily_limit
        self.cooldown_seconds = cooldown_seconds
        self.day_seconds = day_seconds
        self._locks = locks if locks is not None else StripedLock()
        self._states: Dict[str, RateState] = {}

    def __len__(self) -> int:
        return len(self._states)

    def get_state(self, key: str) -> Optional[RateState]:
        """Return the client's state record, if one is being tracked."""
        return self._states.get(key)

    def _trim(self, state: RateState, now: float) -> None:
        state.trim(now - self.window_seconds, now - self.day_seconds)

    def _cooling_down(self, state: RateState, now: float) -> bool:
        # A rolled-back admission leaves no hits but still owes its cooldown.
        return (
            state.last_request_at is not None
            and now - state.last_request_at < self.cooldown_seconds
        )

    def check(self, key: str, now: Optional[float] = None) -> Decision:
        """Check the client's limits and, if allowed, consume a slot."""
        now = time.time() if now is None else now

        with self._locks.for_key(key):
            state = self._states.setdefault(key, RateState())

            if self._cooling_down(state, now):
                elapsed = now - state.last_request_at
                return RejectedCooldown(
                    retry_after=math.ceil(self.cooldown_seconds - elapsed)
                )

            self._trim(state, now)

            if len(state.window_hits) >= self.requests_per_window:
                return RejectedRateLimited(
                    kind=LimitKind.WINDOW,
                    retry_after=math.ceil(self.window_seconds),
                    limit=self.requests_per_window,
                )

            if len(state.daily_hits) >= self.daily_limit:
                return RejectedRateLimited(
                    kind=LimitKind.DAILY,
                    retry_after=math.ceil(self.day_seconds),
                    limit=self.daily_limit,
                )

            state.window_hits.append(now)
            state.daily_hits.append(now)
            state.last_request_at = now

            return Admitted(
                remaining_window=self.requests_per_window - len(state.window_hits),
                remaining_daily=self.daily_limit - len(state.daily_hits),
                admitted_at=now,
            )

    def rollback(self, key: str, admitted_at: Optional[float] = None) -> bool:
        """Give back the quota slot consumed by an admission.

        The cooldown is left in place. Without ``admitted_at`` the most
        recent slot is returned.

        Returns:
            True if a slot was returned
        """
        with self._locks.for_key(key):
            state = self._states.get(key)
            if state is None:
                return False
            returned = False
            for hits in (state.window_hits, state.daily_hits):
                if not hits:
                    continue
                if admitted_at is None:
                    hits.pop()
                    returned = True
                elif admitted_at in hits:
                    # Remove the last occurrence; hits are time-ascending.
                    del hits[len(hits) - 1 - hits[::-1].index(admitted_at)]
                    returned = True
            return returned

    def sweep(self, now: Optional[float] = None) -> int:
        """Trim every client and drop those with no hits left.

        Clients whose stripe is busy are skipped until a later sweep.

        Returns:
            Number of clients removed
        """
        now = time.time() if now is None else now
        removed = 0
        for key in list(self._states):
            lock = self._locks.for_key(key)
            if not lock.acquire(blocking=False):
                continue
            try:
                state = self._states.get(key)
                if state is None:
                    continue
                self._trim(state, now)
                if state.is_empty and not self._cooling_down(state, now):
                    del self._states[key]
                    removed += 1
            finally:
                lock.release()
        if removed:
            logger.debug(f"Rate limit sweep removed {removed} idle clients")
        return removed
