"""Per-line match strategies used by the search engine.

Every strategy returns ``(start, end)`` spans measured in UTF-8 bytes of the
line as scanned, leftmost first.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from .models import SearchMode

logger = logging.getLogger(__name__)

Span = tuple[int, int]


class MatchStrategy(Protocol):
    def find(self, line: str) -> list[Span]: ...


class PlainMatcher:
    """Substring search that reports overlapping occurrences.

    After a hit the scan resumes one byte past the start of that hit, so
    ``"aa"`` occurs three times in ``"aaaa"``.
    """

    def __init__(self, query: str, case_sensitive: bool = False) -> None:
        self.case_sensitive = case_sensitive
        self._width = len(query.encode("utf-8"))
        folded = query if case_sensitive else query.lower()
        self._needle = folded.encode("utf-8")

    def find(self, line: str) -> list[Span]:
        if not self._needle:
            return []
        haystack = (line if self.case_sensitive else line.lower()).encode("utf-8")
        spans: list[Span] = []
        start = haystack.find(self._needle)
        while start != -1:
            # Width comes from the query as given, not its folded form.
            spans.append((start, start + self._width))
            start = haystack.find(self._needle, start + 1)
        return spans


class RegexMatcher:
    """Regular expression search with native non-overlapping semantics.

    A pattern that does not compile matches nothing.
    """

    def __init__(self, query: str, case_sensitive: bool = False) -> None:
        flags = 0 if case_sensitive else re.IGNORECASE
        try:
            self._pattern: re.Pattern[str] | None = re.compile(query, flags)
        except re.error as exc:
            logger.warning("Ignoring invalid search pattern %r: %s", query, exc)
            self._pattern = None

    def find(self, line: str) -> list[Span]:
        if self._pattern is None:
            return []
        spans: list[Span] = []
        consumed = 0
        offset = 0
        for match in self._pattern.finditer(line):
            begin, end = match.span()
            offset += len(line[consumed:begin].encode("utf-8"))
            width = len(line[begin:end].encode("utf-8"))
            spans.append((offset, offset + width))
            offset += width
            consumed = end
        return spans


class NullMatcher:
    """Strategy for unrecognised modes."""

    def find(self, line: str) -> list[Span]:
        return []


def build_matcher(mode: str | SearchMode, query: str, case_sensitive: bool = False) -> MatchStrategy:
    """Pick the strategy for *mode*; unknown modes never match."""

    value = mode.value if isinstance(mode, SearchMode) else mode
    if value == SearchMode.PLAIN.value:
        return PlainMatcher(query, case_sensitive)
    if value == SearchMode.REGEX.value:
        return RegexMatcher(query, case_sensitive)
    logger.warning("Unknown search mode %r; no matches will be reported", mode)
    return NullMatcher()
