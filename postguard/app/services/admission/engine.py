"""Admission engine.

Runs the admission pipeline for one request, cheapest and most decisive
checks first:

1. amortized sweep of idle per-client state
2. prompt validation
3. spam heuristics on the subject content
4. near-duplicate detection against the client's recent history
5. sliding window, daily quota and cooldown

The first failing step decides the outcome. An ``Admitted`` decision has
already consumed a quota slot; if the upstream call then fails the caller
reports it through ``on_upstream_failure`` to get the slot back.
"""

import time
from typing import Any, Optional

from postguard.app.core.config import Settings
from postguard.app.core.logging import get_log_context, get_logger
from postguard.app.services.admission.duplicate import DuplicateDetector
from postguard.app.services.admission.extractor import (
    SubjectExtractor,
    extract_original_post,
)
from postguard.app.services.admission.history import HistoryStore
from postguard.app.services.admission.locks import StripedLock
from postguard.app.services.admission.models import (
    Decision,
    RejectedDuplicate,
    RejectedSpam,
    RejectedValidation,
)
from postguard.app.services.admission.rate_limit import SlidingWindowRateLimiter
from postguard.app.services.admission.spam import SpamClassifier

logger = get_logger(__name__)


class AdmissionEngine:
    """Owns all per-client admission state for one process.

    Thread-safe: per-client read-modify-write sequences run under that
    client's lock stripe.
    """

    def __init__(
        self,
        rate_limiter: Optional[SlidingWindowRateLimiter] = None,
        duplicate_detector: Optional[DuplicateDetector] = None,
        subject_extractor: SubjectExtractor = extract_original_post,
        min_length: int = 10,
        max_length: int = 2000,
    ):
        self.rate_limiter = rate_limiter if rate_limiter is not None else SlidingWindowRateLimiter()
        self.duplicate_detector = (
            duplicate_detector if duplicate_detector is not None else DuplicateDetector()
        )
        self.subject_extractor = subject_extractor
        self.min_length = min_length
        self.max_length = max_length

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "AdmissionEngine":
        """Build an engine with its own stores from application settings."""
        locks = StripedLock(settings.lock_stripes)
        rate_limiter = SlidingWindowRateLimiter(
            requests_per_window=settings.requests_per_window,
            window_seconds=settings.window_seconds,
            daily_limit=settings.daily_limit,
            cooldown_seconds=settings.cooldown_seconds,
            locks=locks,
        )
        history = HistoryStore(
            window_seconds=settings.duplicate_window_seconds,
            max_entries=settings.duplicate_history_max_entries,
            locks=locks,
        )
        duplicate_detector = DuplicateDetector(
            store=history,
            threshold=settings.duplicate_similarity_threshold,
        )
        return cls(
            rate_limiter=rate_limiter,
            duplicate_detector=duplicate_detector,
            min_length=settings.min_post_length,
            max_length=settings.max_post_length,
            **kwargs,
        )

    @property
    def history(self) -> HistoryStore:
        return self.duplicate_detector.store

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop idle clients from the rate limiter and history store."""
        now = time.time() if now is None else now
        return self.rate_limiter.sweep(now) + self.history.sweep(now)

    def validate(self, content: Any) -> Optional[RejectedValidation]:
        if content is None or content == "":
            return RejectedValidation("Prompt is required")
        if not isinstance(content, str):
            return RejectedValidation("Invalid prompt format")
        if len(content) < self.min_length:
            return RejectedValidation(
                f"Prompt too short. Minimum {self.min_length} characters."
            )
        if len(content) > self.max_length:
            return RejectedValidation(
                f"Prompt too long. Maximum {self.max_length} characters."
            )
        return None

    def admit(self, key: str, content: Any, now: Optional[float] = None) -> Decision:
        """Decide whether a request may be forwarded upstream."""
        now = time.time() if now is None else now
        self.sweep(now)
        decision = self._decide(key, content, now)

        log_context = get_log_context(client_key=key, decision=decision.name)
        if decision.admitted:
            logger.info("Request admitted", extra=log_context)
        else:
            logger.warning(f"Request rejected: {decision}", extra=log_context)
        return decision

    def _decide(self, key: str, content: Any, now: float) -> Decision:
        rejection = self.validate(content)
        if rejection is not None:
            return rejection

        subject = self.subject_extractor(content)

        spam_check = SpamClassifier.classify(subject)
        if spam_check is not None:
            logger.debug(
                f"Spam check {spam_check.value} matched",
                extra=get_log_context(client_key=key),
            )
            return RejectedSpam()

        if self.duplicate_detector.is_duplicate(key, subject, now):
            return RejectedDuplicate()

        return self.rate_limiter.check(key, now)

    def on_upstream_failure(self, key: str, admitted_at: Optional[float] = None) -> None:
        """Return the quota slot of an admission whose upstream call failed.

        The cooldown started by the admission stays in force.
        """
        returned = self.rate_limiter.rollback(key, admitted_at)
        logger.info(
            "Quota slot returned after upstream failure" if returned
            else "No quota slot to return after upstream failure",
            extra=get_log_context(client_key=key),
        )
