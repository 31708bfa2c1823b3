"""Word-based name matching for file paths and titles."""

import logging
import re
from typing import Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

REGEX_PREFIX = "regex:"

_CAMEL_BOUNDARY = re.compile(
    r"(?<=[a-z])(?=[A-Z])|(?<=[A-Za-z])(?=\d)|(?<=\d)(?=[A-Za-z])"
)
_NON_WORD = re.compile(r"[^0-9a-zA-Z]+")


def tokenize(value: str) -> List[str]:
    """Split a string into lowercase words.

    Splits on anything that is not a letter or digit, on camelCase humps
    and between letters and digits: ``"AcmeStudios_2020.mkv"`` becomes
    ``["acme", "studios", "2020", "mkv"]``.
    """
    spaced = _CAMEL_BOUNDARY.sub(" ", value)
    return [word.lower() for word in _NON_WORD.split(spaced) if word]


def _contains_run(haystack: Sequence[str], needle: Sequence[str]) -> bool:
    size = len(needle)
    return any(
        list(haystack[i : i + size]) == list(needle)
        for i in range(len(haystack) - size + 1)
    )


class WordMatcher:
    """Decide whether a name occurs in a piece of text as whole words."""

    def __init__(self, ignore_single_names: bool = False):
        self.ignore_single_names = ignore_single_names

    def _compile(self, pattern: str) -> Optional[re.Pattern]:
        try:
            return re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            logger.warning(f"Ignoring invalid alias pattern '{pattern}': {e}")
            return None

    def matches(self, name: str, text: str) -> bool:
        """Check one name against one text.

        Names prefixed with ``regex:`` are searched as case-insensitive
        regular expressions against the raw text.
        """
        if name.startswith(REGEX_PREFIX):
            pattern = self._compile(name[len(REGEX_PREFIX) :])
            return bool(pattern and pattern.search(text))

        name_words = tokenize(name)
        if not name_words:
            return False
        if self.ignore_single_names and len(name_words) == 1:
            return False

        text_words = tokenize(text)
        if _contains_run(text_words, name_words):
            return True

        # "Acme Studios" should also match "acmestudios"
        squashed = "".join(name_words)
        return len(name_words) > 1 and squashed in text_words

    def matches_any(self, names: Iterable[str], texts: Iterable[Optional[str]]) -> bool:
        """Check whether any name occurs in any of the texts."""
        texts = [text for text in texts if text]
        return any(self.matches(name, text) for name in names for text in texts)
