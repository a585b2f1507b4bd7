"""Utilities for resolving logical document paths safely."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from .errors import PathOutsideRoot


class RootConfigurationError(ValueError):
    """Raised when a configured root directory is invalid."""


def parse_root(raw: str | None, default: str) -> Path:
    """Turn a configured directory into an absolute :class:`Path`.

    Relative values are anchored at the current working directory, matching
    how the editor backend has always treated ``userdata`` and ``appdata``.
    """

    candidate = (raw or default).strip()
    if not candidate:
        raise RootConfigurationError("A root directory must be provided")
    return Path(os.path.abspath(Path(candidate).expanduser()))


@dataclass(frozen=True)
class PathResolver:
    """Map slash-separated logical paths onto a sandboxed root directory.

    Resolution is purely lexical: nothing here touches the filesystem.
    """

    root: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", Path(os.path.abspath(self.root)))

    def resolve(self, logical_path: str | None = "") -> Path:
        """Return the absolute location of *logical_path* inside the root.

        An empty path means the root itself. One leading ``/`` is accepted
        and stripped.
        """

        raw = logical_path or ""
        if raw.startswith("/"):
            raw = raw[1:]
        if "\x00" in raw:
            raise PathOutsideRoot(f"Invalid path: {logical_path!r}")

        relative = PurePosixPath(raw)
        if relative.is_absolute() or ".." in relative.parts:
            raise PathOutsideRoot(f"Path {logical_path!r} is outside the document root")

        target = Path(os.path.normpath(self.root.joinpath(*relative.parts)))
        if target != self.root and self.root not in target.parents:
            raise PathOutsideRoot(f"Path {logical_path!r} is outside the document root")
        return target

    def resolve_document(self, logical_path: str | None) -> Path:
        """Resolve a path that must name something below the root."""

        target = self.resolve(logical_path)
        if target == self.root:
            raise PathOutsideRoot("The document root is not a document")
        return target

    def ensure_contained(self, target: Path) -> Path:
        """Check where *target* really points on disk.

        Symbolic links anywhere along the way are followed; the result must
        still be the root or lie below it.
        """

        real_root = Path(os.path.realpath(self.root))
        real_target = Path(os.path.realpath(target))
        if real_target != real_root and real_root not in real_target.parents:
            raise PathOutsideRoot(
                f"Path {self.to_logical(target)!r} resolves outside the document root"
            )
        return target

    def to_logical(self, path: Path) -> str:
        """Return the slash-separated logical path of *path*."""

        relative = Path(path).relative_to(self.root)
        if not relative.parts:
            return ""
        return relative.as_posix()
