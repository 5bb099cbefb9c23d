"""Tests for the spam classifier."""

import pytest

from postguard.app.services.admission.spam import SpamCheck, SpamClassifier, is_spam


class TestRepeatedCharacter:
    """Single character runs."""

    def test_twelve_identical_characters_is_spam(self):
        assert is_spam("aaaaaaaaaaaa") is True

    def test_eleven_identical_characters_is_spam(self):
        assert is_spam("hello " + "!" * 11) is True

    def test_ten_identical_characters_is_not_spam(self):
        """Boundary: a run needs 11 characters."""
        assert is_spam("aaaaaaaaaa") is False

    def test_short_runs_in_text_are_not_spam(self):
        assert is_spam("Sooooo excited for the weekend") is False


class TestUppercaseDensity:
    """Uppercase letter ratio."""

    def test_all_uppercase_is_spam(self):
        assert is_spam("ABCDEFGHIJ") is True

    def test_mostly_lowercase_is_not_spam(self):
        assert is_spam("AbcdefghiJ") is False

    def test_exactly_seventy_percent_is_not_spam(self):
        assert is_spam("ABCDEFGhij") is False

    def test_shouting_sentence_is_spam(self):
        assert SpamClassifier.classify("BUY MY PRODUCT NOW") == SpamCheck.EXCESSIVE_UPPERCASE


class TestRepeatedPhrase:
    """Short units repeated back to back."""

    def test_phrase_followed_by_five_copies_is_spam(self):
        assert is_spam("click here " * 6) is True

    def test_repetition_is_case_insensitive(self):
        assert SpamClassifier.classify("Ha ha HA ha hA ha ") == SpamCheck.REPEATED_PHRASE

    def test_four_repetitions_is_not_spam(self):
        assert is_spam("click here " * 4) is False

    def test_phrase_longer_than_twenty_characters_is_not_checked(self):
        phrase = "this sentence is longer than twenty "
        assert is_spam(phrase * 6) is False


class TestSpecialCharacters:
    """Content made entirely of symbols."""

    def test_fifty_symbols_is_spam(self):
        content = "!@#$%^&*()" * 5
        assert SpamClassifier.classify(content) == SpamCheck.SPECIAL_CHARACTERS

    def test_forty_nine_symbols_is_not_spam(self):
        content = ("!@#$%^&*()" * 5)[:49]
        assert is_spam(content) is False

    def test_symbols_with_text_is_not_spam(self):
        content = "a" + "!@#$%^&*()" * 5
        assert is_spam(content) is False


class TestTestPattern:
    """The literal "test" repeated."""

    def test_five_tests_is_spam(self):
        assert SpamClassifier.classify("testtesttesttesttest") == SpamCheck.TEST_PATTERN

    def test_case_insensitive(self):
        assert is_spam("TestTESTtestTesttest") is True

    def test_four_tests_is_not_spam(self):
        assert is_spam("testtesttesttest") is False


class TestClassifier:
    """General classifier behaviour."""

    @pytest.mark.parametrize(
        "content",
        [
            "Just launched our new website, check it out!",
            "Three tips for better sleep: routine, darkness, no screens.",
            "Happy Friday everyone! What are your weekend plans?",
        ],
    )
    def test_ordinary_posts_are_not_spam(self, content):
        assert is_spam(content) is False
        assert SpamClassifier.classify(content) is None

    def test_empty_content_is_not_spam(self):
        assert is_spam("") is False

    def test_deterministic(self):
        content = "NEW NEW NEW NEW NEW NEW NEW"
        assert all(is_spam(content) == is_spam(content) for _ in range(5))
