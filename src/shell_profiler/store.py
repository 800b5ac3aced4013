"""Local store: the three JSON documents kept under the data directory."""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any

from shell_profiler.config import AUTH_FILE, DATA_DIR, PROFILE_FILE, RAW_PROFILE_FILE
from shell_profiler.errors import IntegrityError
from shell_profiler.models import (
    AuthRecord,
    ProfileDocument,
    parse_auth,
    parse_profile,
)

logger = logging.getLogger(__name__)


class DocumentKind(str, Enum):
    AUTH = "auth"
    PROFILE = "profile"
    RAW = "raw"


FILENAMES = {
    DocumentKind.AUTH: AUTH_FILE,
    DocumentKind.PROFILE: PROFILE_FILE,
    DocumentKind.RAW: RAW_PROFILE_FILE,
}


def _empty_documents() -> dict[DocumentKind, dict[str, Any]]:
    return {
        DocumentKind.AUTH: AuthRecord().to_dict(),
        DocumentKind.PROFILE: ProfileDocument().to_dict(),
        DocumentKind.RAW: {"remoteId": None, "content": None},
    }


class LocalStore:
    """Reads and writes the auth, profile and raw-cache documents.

    Every ``set`` rewrites the whole document atomically. The store never
    repairs itself: when ``check_integrity`` fails, callers must run
    ``initialize`` first.
    """

    def __init__(self, root: Path | None = None):
        self.root = Path(root or DATA_DIR)

    def path(self, kind: DocumentKind) -> Path:
        return self.root / FILENAMES[kind]

    def _read(self, kind: DocumentKind) -> dict[str, Any]:
        path = self.path(kind)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise IntegrityError(f"{path.name} is missing")
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise IntegrityError(f"{path.name} is unreadable: {e}")
        if not isinstance(data, dict):
            raise IntegrityError(f"{path.name} is not a JSON object")
        return data

    def get(self, kind: DocumentKind) -> dict[str, Any]:
        """Return the decoded document for ``kind``."""
        return self._read(kind)

    def set(self, kind: DocumentKind, doc: dict[str, Any]) -> None:
        """Persist ``doc``, atomically replacing the previous version."""
        if not self.root.is_dir():
            raise IntegrityError(f"{self.root} does not exist")

        path = self.path(kind)
        fd, tmp = tempfile.mkstemp(dir=self.root, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2)
                f.write("\n")
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %s", path)

    def check_integrity(self) -> bool:
        """True when all three documents exist and parse."""
        try:
            if not parse_auth(self._read(DocumentKind.AUTH)).ok:
                return False
            if not parse_profile(self._read(DocumentKind.PROFILE)).ok:
                return False
            self._read(DocumentKind.RAW)
        except IntegrityError as e:
            logger.debug("Integrity check failed: %s", e)
            return False
        return True

    def require_integrity(self) -> None:
        if not self.check_integrity():
            raise IntegrityError()

    def initialize(self) -> None:
        """Create the data directory and seed empty documents.

        Destructive: an existing data directory is removed recursively first,
        so all prior local state is lost.
        """
        if self.root.exists():
            logger.debug("Removing existing data directory %s", self.root)
            shutil.rmtree(self.root)
        self.root.mkdir(parents=True)
        for kind, doc in _empty_documents().items():
            self.set(kind, doc)

    # Typed accessors

    def load_auth(self) -> AuthRecord:
        result = parse_auth(self._read(DocumentKind.AUTH))
        if not result.ok:
            raise IntegrityError(f"{AUTH_FILE}: {result.error}")
        return result.value

    def save_auth(self, auth: AuthRecord) -> None:
        self.set(DocumentKind.AUTH, auth.to_dict())

    def load_profile(self) -> ProfileDocument:
        result = parse_profile(self._read(DocumentKind.PROFILE))
        if not result.ok:
            raise IntegrityError(f"{PROFILE_FILE}: {result.error}")
        return result.value

    def save_profile(self, profile: ProfileDocument) -> None:
        self.set(DocumentKind.PROFILE, profile.to_dict())

    def save_raw(self, remote_id: str | None, content: str | None) -> None:
        self.set(DocumentKind.RAW, {"remoteId": remote_id, "content": content})
