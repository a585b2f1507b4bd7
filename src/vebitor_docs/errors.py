"""Error kinds raised by the document store and search engine."""

from __future__ import annotations


class DocumentStoreError(Exception):
    """Base class for every failure surfaced by the core."""

    kind = "error"


class PathOutsideRoot(DocumentStoreError):
    """Raised when a logical path would escape the document root."""

    kind = "path_outside_root"


class DocumentNotFound(DocumentStoreError):
    kind = "not_found"


class FolderNotFound(DocumentStoreError):
    """Raised when listing or searching a folder that does not exist."""

    kind = "folder_not_found"


class DocumentExists(DocumentStoreError):
    kind = "already_exists"


class DocumentIOError(DocumentStoreError):
    """Wraps an underlying filesystem or decoding failure."""

    kind = "io_error"


class InvalidSearchRequest(DocumentStoreError, ValueError):
    """Raised when a search request fails validation."""

    kind = "invalid_request"
