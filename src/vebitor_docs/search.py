"""Recursive line-oriented search across the document tree."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from .errors import DocumentIOError, FolderNotFound
from .matching import MatchStrategy, build_matcher
from .models import SearchMatch, SearchRequest, SearchResult
from .paths import PathResolver
from .store import read_text_exact

logger = logging.getLogger(__name__)


def split_lines(content: str) -> list[str]:
    """Split *content* on ``\\n``, dropping one trailing ``\\r`` per line.

    A final line break does not produce an extra empty line.
    """

    if not content:
        return []
    lines = content.split("\n")
    if content.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def iter_files(base: Path) -> Iterator[Path]:
    """Yield regular files at or below *base*, depth-first in name order.

    Symbolic links are neither followed nor reported.
    """

    if base.is_file() and not base.is_symlink():
        yield base
        return
    with os.scandir(base) as it:
        entries = sorted(it, key=lambda entry: entry.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from iter_files(Path(entry.path))
        elif entry.is_file(follow_symlinks=False):
            yield Path(entry.path)


def scan_lines(lines: list[str], matcher: MatchStrategy) -> list[SearchMatch]:
    matches: list[SearchMatch] = []
    for number, line in enumerate(lines, start=1):
        for start, end in matcher.find(line):
            matches.append(SearchMatch(line_number=number, line_text=line, start=start, end=end))
    return matches


@dataclass(slots=True)
class SearchEngine:
    resolver: PathResolver

    def search(self, request: SearchRequest) -> list[SearchResult]:
        """Search every file under ``request.folder`` (the root when empty).

        Files without matches are omitted. A file that cannot be read or
        decoded aborts the whole search.
        """

        base = self.resolver.ensure_contained(self.resolver.resolve(request.folder))
        if not base.exists():
            raise FolderNotFound(f"Folder {request.folder!r} does not exist")

        matcher = build_matcher(request.mode, request.query, request.case_sensitive)
        results: list[SearchResult] = []
        try:
            for path in iter_files(base):
                try:
                    content = read_text_exact(path)
                except (OSError, UnicodeDecodeError) as exc:
                    raise DocumentIOError(f"Unable to search {path}: {exc}") from exc
                matches = scan_lines(split_lines(content), matcher)
                if matches:
                    results.append(
                        SearchResult(file_path=self.resolver.to_logical(path), matches=matches)
                    )
        except OSError as exc:
            raise DocumentIOError(f"Unable to walk {request.folder!r}: {exc}") from exc

        logger.debug(
            "Search %r (%s) under %s matched %d files", request.query, request.mode, base, len(results)
        )
        return results
