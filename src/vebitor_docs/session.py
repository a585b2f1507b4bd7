"""Persistence of the editor session file."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .errors import DocumentIOError
from .models import Session
from .store import DocumentStore

logger = logging.getLogger(__name__)

SESSION_FILENAME = "session.json"


@dataclass(slots=True)
class SessionStore:
    """Reads and writes ``session.json`` under the app data directory."""

    appdata_dir: Path
    documents: DocumentStore

    @property
    def path(self) -> Path:
        return Path(self.appdata_dir) / SESSION_FILENAME

    def load(self) -> Session:
        """Return the stored session, creating an empty one on first use.

        Opened files that no longer exist under the document root are
        dropped; the working folder is returned as stored.
        """

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return self.save(Session())
        except OSError as exc:
            raise DocumentIOError(f"Unable to read session: {exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise DocumentIOError(f"Session file is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise DocumentIOError("Session file must contain a JSON object")

        session = Session.from_dict(data)
        session.opened_files = [f for f in session.opened_files if self.documents.exists_file(f)]
        return session

    def save(self, session: Session) -> Session:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(session.to_dict(), indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise DocumentIOError(f"Unable to write session: {exc}") from exc
        logger.debug("Saved session to %s", self.path)
        return session
