"""Heuristic spam classifier for submitted content."""

import re
from enum import Enum
from typing import Optional


class SpamCheck(Enum):
    """Which heuristic flagged the content."""
    REPEATED_CHARACTER = "repeated_character"
    EXCESSIVE_UPPERCASE = "excessive_uppercase"
    REPEATED_PHRASE = "repeated_phrase"
    SPECIAL_CHARACTERS = "special_characters"
    TEST_PATTERN = "test_pattern"


# 11+ identical characters in a row
REPEATED_CHARACTER_PATTERN = re.compile(r"(.)\1{10,}")

# A 2-20 character unit followed by 5+ copies of itself. Runs of a single
# character are left to REPEATED_CHARACTER_PATTERN.
REPEATED_PHRASE_PATTERN = re.compile(r"(.{2,20})\1{5,}", re.IGNORECASE)

# Whole content is 50+ characters that are neither alphanumeric nor whitespace
SPECIAL_CHARACTERS_PATTERN = re.compile(r"^[^a-zA-Z0-9\s]{50,}$")

TEST_PATTERN = re.compile(r"(?:test){5,}", re.IGNORECASE)

UPPERCASE_PATTERN = re.compile(r"[A-Z]")

UPPERCASE_DENSITY_LIMIT = 0.7


def has_repeated_character(content: str) -> bool:
    return REPEATED_CHARACTER_PATTERN.search(content) is not None


def has_excessive_uppercase(content: str) -> bool:
    if not content:
        return False
    upper_count = len(UPPERCASE_PATTERN.findall(content))
    return upper_count / len(content) > UPPERCASE_DENSITY_LIMIT


def has_repeated_phrase(content: str) -> bool:
    return REPEATED_PHRASE_PATTERN.search(content) is not None


def is_special_characters_only(content: str) -> bool:
    return SPECIAL_CHARACTERS_PATTERN.search(content) is not None


def has_test_pattern(content: str) -> bool:
    return TEST_PATTERN.search(content) is not None


class SpamClassifier:
    """Pattern-based spam classifier.

    Content is spam if any check matches. Checks run cheapest first; the
    result is deterministic for a given input.
    """

    CHECKS = [
        (SpamCheck.REPEATED_CHARACTER, has_repeated_character),
        (SpamCheck.EXCESSIVE_UPPERCASE, has_excessive_uppercase),
        (SpamCheck.REPEATED_PHRASE, has_repeated_phrase),
        (SpamCheck.SPECIAL_CHARACTERS, is_special_characters_only),
        (SpamCheck.TEST_PATTERN, has_test_pattern),
    ]

    @classmethod
    def classify(cls, content: str) -> Optional[SpamCheck]:
        """Return the first check that flags the content, or None."""
        if not content:
            return None
        for check, predicate in cls.CHECKS:
            if predicate(content):
                return check
        return None

    @classmethod
    def is_spam(cls, content: str) -> bool:
        return cls.classify(content) is not None


def is_spam(content: str) -> bool:
    """Return True if the content trips any spam heuristic."""
    return SpamClassifier.is_spam(content)
