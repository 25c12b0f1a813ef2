"""Keyword vocabulary and the single-regex keyword matcher.

The vocabulary is filled while parsing (every emphasis span is a keyword).
Once parsing is done, all keywords are compiled into one alternation regex
so that every inline text can be scanned in linear time.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

log = logging.getLogger(__name__)


class KeywordSet:
    """Insertion-ordered set of keywords with case-insensitive membership.

    Case-insensitivity is by `str.lower`, the same simple case mapping the
    `re.IGNORECASE` matcher uses, so a keyword in the set is always found by
    the matcher.

    Each keyword gets a stable index on first insertion. The spelling of the
    first insertion is the one kept.
    """

    __slots__ = ("_keywords", "_index_by_key")

    def __init__(self, keywords: Iterable[str] = ()) -> None:
        self._keywords: list[str] = []
        self._index_by_key: dict[str, int] = {}
        for keyword in keywords:
            self.add(keyword)

    @staticmethod
    def _key(keyword: str) -> str:
        return keyword.lower()

    def add(self, keyword: str) -> int:
        """Insert ``keyword`` if new; return its index either way."""
        if not keyword:
            raise ValueError("keyword cannot be empty")
        key = self._key(keyword)
        index = self._index_by_key.get(key)
        if index is None:
            index = len(self._keywords)
            self._keywords.append(keyword)
            self._index_by_key[key] = index
            log.debug("new keyword %r at index %d", keyword, index)
        return index

    def index_of(self, keyword: str) -> int | None:
        return self._index_by_key.get(self._key(keyword))

    def sorted(self) -> list[str]:
        """Keywords in case-insensitive alphabetical order."""
        return sorted(self._keywords, key=lambda k: (self._key(k), k))

    def __contains__(self, keyword: object) -> bool:
        return isinstance(keyword, str) and self._key(keyword) in self._index_by_key

    def __getitem__(self, index: int) -> str:
        return self._keywords[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self._keywords)

    def __len__(self) -> int:
        return len(self._keywords)

    def __repr__(self) -> str:
        return f"KeywordSet({self._keywords!r})"


@dataclass(frozen=True, slots=True)
class KeywordMatch:
    """A keyword occurrence found by the matcher in some text."""

    keyword_index: int
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class KeywordMatcher:
    """Compiled ``\\b(kwd1|kwd2|...)\\b`` regex over a keyword vocabulary."""

    pattern: re.Pattern[str]

    def finditer(self, text: str) -> Iterator[KeywordMatch]:
        for m in self.pattern.finditer(text):
            # Group names are "k<vocabulary index>"
            group = m.lastgroup
            assert group is not None
            yield KeywordMatch(int(group[1:]), m.start(), m.end())

    def find_all(self, text: str) -> list[KeywordMatch]:
        """Non-overlapping matches, left to right, longest keyword first."""
        return list(self.finditer(text))


def build_keyword_matcher(keywords: KeywordSet) -> KeywordMatcher | None:
    """Build the regex used to find keywords in linear time.

    Return None if the keyword set is empty or contains the empty string.

    Keywords must sit on word boundaries, which avoids matching word
    prefixes like "hell" in "hello world". Regex matches never overlap, so
    found keywords never overlap either. Alternatives are ordered by
    decreasing length so that the longest keyword wins at a given position.
    """
    ordered = sorted(enumerate(keywords), key=lambda row: (-len(row[1]), row[0]))
    if not ordered or not ordered[-1][1]:
        return None
    alternatives = "|".join(f"(?P<k{index}>{re.escape(keyword)})" for index, keyword in ordered)
    pattern = re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)
    log.debug("keyword matcher built over %d keywords", len(ordered))
    return KeywordMatcher(pattern)
