"""Data carried between the store, the search engine and the API surface."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import InvalidSearchRequest


class SearchMode(str, Enum):
    PLAIN = "plain"
    REGEX = "regex"


@dataclass(slots=True)
class Document:
    file_path: str
    content: str
    is_folder: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"filePath": self.file_path, "content": self.content, "isFolder": self.is_folder}


@dataclass(slots=True)
class DocumentMetadata:
    """Listing entry; never carries a body."""

    file_path: str
    is_folder: bool

    def to_dict(self) -> dict[str, Any]:
        return {"filePath": self.file_path, "isFolder": self.is_folder}


@dataclass(slots=True)
class SearchRequest:
    query: str
    mode: str = SearchMode.PLAIN.value
    case_sensitive: bool = False
    folder: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchRequest:
        """Decode a JSON request body; ill-typed fields are rejected."""

        query = data.get("query") or ""
        mode = data.get("searchMode") or ""
        case_sensitive = data.get("caseSensitive", False)
        folder = data.get("searchFolder") or ""
        if not isinstance(query, str) or not isinstance(folder, str):
            raise InvalidSearchRequest("query and searchFolder must be strings")
        if not isinstance(mode, str):
            raise InvalidSearchRequest("searchMode must be 'plain' or 'regex'")
        if not isinstance(case_sensitive, bool):
            raise InvalidSearchRequest("caseSensitive must be a boolean")
        return cls(query=query, mode=mode, case_sensitive=case_sensitive, folder=folder)

    def validate(self) -> None:
        if self.mode not in {m.value for m in SearchMode}:
            raise InvalidSearchRequest("searchMode must be 'plain' or 'regex'")
        if not self.query.strip():
            raise InvalidSearchRequest("query cannot be empty")


@dataclass(slots=True)
class SearchMatch:
    """A single match on one line.

    ``start`` and ``end`` are 0-based UTF-8 byte offsets into ``line_text``.
    """

    line_number: int
    line_text: str
    start: int
    end: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "lineNumber": self.line_number,
            "lineText": self.line_text,
            "startPos": self.start,
            "endPos": self.end,
        }


@dataclass(slots=True)
class SearchResult:
    file_path: str
    matches: list[SearchMatch] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"filePath": self.file_path, "matches": [m.to_dict() for m in self.matches]}


@dataclass(slots=True)
class Session:
    """Editor session state, persisted verbatim as JSON."""

    opened_files: list[str] = field(default_factory=list)
    last_active_file: str = ""
    working_folder: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Session:
        opened = data.get("openedFiles") or []
        return cls(
            opened_files=[str(item) for item in opened],
            last_active_file=str(data.get("lastActiveFile") or ""),
            working_folder=str(data.get("workingFolder") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "openedFiles": list(self.opened_files),
            "lastActiveFile": self.last_active_file,
            "workingFolder": self.working_folder,
        }
