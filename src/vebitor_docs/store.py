"""Filesystem-backed document store."""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .errors import (
    DocumentExists,
    DocumentIOError,
    DocumentNotFound,
    DocumentStoreError,
    FolderNotFound,
)
from .models import Document, DocumentMetadata
from .paths import PathResolver

logger = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o644


def read_text_exact(path: Path) -> str:
    """Read *path* as UTF-8 without translating line endings."""

    with path.open("r", encoding="utf-8", newline="") as handle:
        return handle.read()


@dataclass(slots=True)
class DocumentStore:
    """CRUD primitives over documents below a single root.

    Nothing is cached; every call is a fresh filesystem query.
    """

    resolver: PathResolver

    def read(self, path: str) -> Document:
        target = self.resolver.ensure_contained(self.resolver.resolve_document(path))
        if not target.is_file():
            raise DocumentNotFound(f"Document {path!r} does not exist")
        try:
            content = read_text_exact(target)
        except FileNotFoundError as exc:
            raise DocumentNotFound(f"Document {path!r} does not exist") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentIOError(f"Unable to read {path!r}: {exc}") from exc
        return Document(file_path=self.resolver.to_logical(target), content=content)

    def write(self, path: str, content: str) -> Document:
        """Create or overwrite a document, creating parent folders on demand.

        The body is written to a temporary sibling and moved into place, so a
        concurrent reader sees either the old or the new content.
        """

        target = self.resolver.ensure_contained(self.resolver.resolve_document(path))
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            mode = stat.S_IMODE(target.stat().st_mode) if target.exists() else DEFAULT_FILE_MODE
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".tmp_", suffix=target.suffix)
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                    handle.write(content)
                # mkstemp creates owner-only files.
                os.chmod(tmp_name, mode)
                Path(tmp_name).replace(target)
            except Exception:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise DocumentIOError(f"Unable to write {path!r}: {exc}") from exc

        logger.debug("Wrote %s (%d chars)", target, len(content))
        return Document(file_path=self.resolver.to_logical(target), content=content)

    def delete(self, path: str) -> None:
        target = self.resolver.resolve_document(path)
        # A link itself may be removed; only its parent must really be inside.
        self.resolver.ensure_contained(target.parent)
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()
        except FileNotFoundError as exc:
            raise DocumentNotFound(f"Document {path!r} does not exist") from exc
        except OSError as exc:
            raise DocumentIOError(f"Unable to delete {path!r}: {exc}") from exc
        logger.debug("Deleted %s", target)

    def list(self, parent: str | None = "") -> list[DocumentMetadata]:
        """Return the immediate children of *parent*, sorted by name.

        Listing the root creates it when it is missing; any other missing
        folder is reported as :class:`FolderNotFound`.
        """

        base = self.resolver.ensure_contained(self.resolver.resolve(parent))
        try:
            if base == self.resolver.root:
                base.mkdir(parents=True, exist_ok=True)
            elif not base.is_dir():
                raise FolderNotFound(f"Folder {parent!r} does not exist")
            with os.scandir(base) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except DocumentStoreError:
            raise
        except FileNotFoundError as exc:
            raise FolderNotFound(f"Folder {parent!r} does not exist") from exc
        except OSError as exc:
            raise DocumentIOError(f"Unable to list {parent!r}: {exc}") from exc

        return [
            DocumentMetadata(
                file_path=self.resolver.to_logical(base / entry.name),
                is_folder=entry.is_dir(),
            )
            for entry in entries
        ]

    def rename(self, old_path: str, new_path: str) -> None:
        """Move a document or folder; never replaces an existing destination."""

        source = self.resolver.resolve_document(old_path)
        destination = self.resolver.resolve_document(new_path)
        self.resolver.ensure_contained(source.parent)
        self.resolver.ensure_contained(destination.parent)
        if destination.exists() or destination.is_symlink():
            raise DocumentExists(f"Destination {new_path!r} already exists")
        if not source.exists() and not source.is_symlink():
            raise DocumentNotFound(f"Document {old_path!r} does not exist")
        if source in destination.parents:
            raise DocumentIOError(f"Cannot move {old_path!r} into itself")

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            # The existence check above and the move are not atomic together.
            os.rename(source, destination)
        except FileNotFoundError as exc:
            raise DocumentNotFound(f"Document {old_path!r} does not exist") from exc
        except OSError as exc:
            raise DocumentIOError(f"Unable to rename {old_path!r}: {exc}") from exc
        logger.debug("Renamed %s -> %s", source, destination)

    def exists_file(self, path: str) -> bool:
        try:
            target = self.resolver.ensure_contained(self.resolver.resolve_document(path))
        except DocumentStoreError:
            return False
        return target.is_file()
