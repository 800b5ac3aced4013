"""Local folder profile directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from shell_profiler.errors import RemoteError
from shell_profiler.remotes.base import (
    ProfileDirectory,
    RemoteProfile,
    RemoteProfileRef,
    profile_filename,
    profile_name_from_filename,
    serialize_document,
)

logger = logging.getLogger(__name__)


class LocalDirectory(ProfileDirectory):
    """Stores each profile as ``<name><ext>`` in a folder. The remote id is the name."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def list(self) -> list[RemoteProfileRef]:
        if not self.root.is_dir():
            return []
        refs = []
        for f in sorted(self.root.iterdir()):
            name = profile_name_from_filename(f.name)
            if name is None or not f.is_file():
                continue
            refs.append(RemoteProfileRef(url=str(f), name=name, remote_id=name))
        return refs

    def fetch(self, ref: RemoteProfileRef) -> RemoteProfile:
        path = Path(ref.url)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise RemoteError(f"Cannot read profile '{ref.name}': {e}")
        return RemoteProfile(remote_id=ref.remote_id or ref.name, name=ref.name, content=content)

    def create(self, name: str, document: dict[str, Any]) -> str:
        path = self.root / profile_filename(name)
        if path.exists():
            raise RemoteError(f"Profile '{name}' already exists in {self.root}")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_text(serialize_document(document) + "\n", encoding="utf-8")
        except OSError as e:
            raise RemoteError(f"Cannot write profile '{name}': {e}")
        logger.debug("Created %s", path)
        return name

    def update(self, ref: RemoteProfileRef, document: dict[str, Any]) -> None:
        path = Path(ref.url)
        if not path.is_file():
            raise RemoteError(f"Profile '{ref.name}' not found in {self.root}")
        try:
            path.write_text(serialize_document(document) + "\n", encoding="utf-8")
        except OSError as e:
            raise RemoteError(f"Cannot write profile '{ref.name}': {e}")
        logger.debug("Updated %s", path)

    def ref_for(self, remote_id: str, name: str) -> RemoteProfileRef:
        return RemoteProfileRef(
            url=str(self.root / profile_filename(remote_id)), name=name, remote_id=remote_id
        )

    @property
    def display_name(self) -> str:
        return f"local folder {self.root}"
