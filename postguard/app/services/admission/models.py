"""Admission data models.

Decision variants returned by the admission engine, plus the per-client
state records owned by the rate limiter and the history store.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional


class LimitKind(str, Enum):
    """Which rate limit a request ran into."""
    WINDOW = "window"
    DAILY = "daily"


@dataclass(frozen=True)
class Decision:
    """Base class for admission decisions."""
    name: ClassVar[str] = "decision"
    admitted: ClassVar[bool] = False


@dataclass(frozen=True)
class Admitted(Decision):
    """Request may proceed upstream; carries the post-admission counters."""
    name: ClassVar[str] = "admitted"
    admitted: ClassVar[bool] = True

    remaining_window: int
    remaining_daily: int
    admitted_at: float


@dataclass(frozen=True)
class RejectedValidation(Decision):
    name: ClassVar[str] = "rejected_validation"

    reason: str


@dataclass(frozen=True)
class RejectedSpam(Decision):
    name: ClassVar[str] = "rejected_spam"


@dataclass(frozen=True)
class RejectedDuplicate(Decision):
    name: ClassVar[str] = "rejected_duplicate"


@dataclass(frozen=True)
class RejectedRateLimited(Decision):
    name: ClassVar[str] = "rejected_rate_limited"

    kind: LimitKind
    retry_after: int
    limit: int


@dataclass(frozen=True)
class RejectedCooldown(Decision):
    name: ClassVar[str] = "rejected_cooldown"

    retry_after: int


@dataclass
class RateState:
    """Sliding window state for one client.

    Both hit lists are time-ascending. The record can be dropped once both
    are empty.
    """
    window_hits: List[float] = field(default_factory=list)
    daily_hits: List[float] = field(default_factory=list)
    last_request_at: Optional[float] = None

    def trim(self, window_start: float, day_start: float) -> None:
        self.window_hits = [t for t in self.window_hits if t > window_start]
        self.daily_hits = [t for t in self.daily_hits if t > day_start]

    @property
    def is_empty(self) -> bool:
        return not self.window_hits and not self.daily_hits


@dataclass(frozen=True)
class HistoryEntry:
    """Normalized content previously seen from a client."""
    content: str
    seen_at: float
