"""Request admission: spam, near-duplicate and rate-limit checks."""

from postguard.app.services.admission.duplicate import DuplicateDetector, normalize_content
from postguard.app.services.admission.engine import AdmissionEngine
from postguard.app.services.admission.extractor import (
    QuotedSegmentExtractor,
    SubjectExtractor,
    extract_original_post,
    whole_content,
)
from postguard.app.services.admission.history import HistoryStore
from postguard.app.services.admission.locks import StripedLock
from postguard.app.services.admission.models import (
    Admitted,
    Decision,
    HistoryEntry,
    LimitKind,
    RateState,
    RejectedCooldown,
    RejectedDuplicate,
    RejectedRateLimited,
    RejectedSpam,
    RejectedValidation,
)
from postguard.app.services.admission.rate_limit import SlidingWindowRateLimiter
from postguard.app.services.admission.similarity import (
    bounded_levenshtein_distance,
    levenshtein_distance,
    similarity,
)
from postguard.app.services.admission.spam import SpamCheck, SpamClassifier, is_spam

__all__ = [
    # Models
    "Decision",
    "Admitted",
    "RejectedValidation",
    "RejectedSpam",
    "RejectedDuplicate",
    "RejectedRateLimited",
    "RejectedCooldown",
    "LimitKind",
    "RateState",
    "HistoryEntry",
    # Pure checks
    "similarity",
    "bounded_levenshtein_distance",
    "levenshtein_distance",
    "SpamCheck",
    "SpamClassifier",
    "is_spam",
    # Stateful components
    "StripedLock",
    "HistoryStore",
    "DuplicateDetector",
    "normalize_content",
    "SlidingWindowRateLimiter",
    # Engine
    "AdmissionEngine",
    "SubjectExtractor",
    "QuotedSegmentExtractor",
    "extract_original_post",
    "whole_content",
]
