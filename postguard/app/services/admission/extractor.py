"""Subject-content extraction.

Prompts sent by the post generator embed the user's post as
``Original post: "..."``; only that segment is classified. Any callable
taking the prompt and returning the subject can be plugged into the
admission engine instead.
"""

import re
from typing import Callable, Pattern

SubjectExtractor = Callable[[str], str]

ORIGINAL_POST_PATTERN = re.compile(r'Original post: "(.*?)"')


class QuotedSegmentExtractor:
    """Extract the first capture group of a pattern, or the whole content."""

    def __init__(self, pattern: Pattern[str] = ORIGINAL_POST_PATTERN):
        self.pattern = pattern

    def __call__(self, content: str) -> str:
        match = self.pattern.search(content)
        return match.group(1) if match else content


def whole_content(content: str) -> str:
    return content


extract_original_post = QuotedSegmentExtractor()
