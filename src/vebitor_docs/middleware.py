"""HTTP middleware for the editor API."""

from __future__ import annotations

from collections.abc import Sequence

from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware

DEFAULT_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")


def build_cors_middleware(origins: Sequence[str] | None = None) -> list[Middleware]:
    """Create the middleware stack.

    The browser editor is served from a different origin during development,
    so every origin is allowed unless *origins* narrows it down.
    """

    return [
        Middleware(
            CORSMiddleware,
            allow_origins=list(origins or ["*"]),
            allow_methods=list(DEFAULT_METHODS),
            allow_headers=["*"],
        )
    ]
