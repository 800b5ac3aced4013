"""Abstract base class for remote profile directories."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from shell_profiler.config import PROFILE_FILE_EXT


@dataclass(frozen=True)
class RemoteProfileRef:
    """Handle returned by ``list()``. Only lives for the current operation."""

    url: str
    name: str
    remote_id: str | None = None


@dataclass(frozen=True)
class RemoteProfile:
    """Serialized profile content fetched from a reference."""

    remote_id: str
    name: str
    content: str


def profile_filename(name: str) -> str:
    return f"{name}{PROFILE_FILE_EXT}"


def profile_name_from_filename(filename: str) -> str | None:
    if not filename.endswith(PROFILE_FILE_EXT):
        return None
    return filename[: -len(PROFILE_FILE_EXT)]


def serialize_document(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=2)


class ProfileDirectory(ABC):
    """A collection of named remote documents, one serialized profile each."""

    @abstractmethod
    def list(self) -> list[RemoteProfileRef]:
        """List stored profiles. An empty list means no profiles yet."""

    @abstractmethod
    def fetch(self, ref: RemoteProfileRef) -> RemoteProfile:
        """Fetch the serialized profile stored at ``ref``."""

    @abstractmethod
    def create(self, name: str, document: dict[str, Any]) -> str:
        """Store ``document`` as a new profile. Returns its remote id."""

    @abstractmethod
    def update(self, ref: RemoteProfileRef, document: dict[str, Any]) -> None:
        """Overwrite the profile at ``ref`` with ``document``."""

    @abstractmethod
    def ref_for(self, remote_id: str, name: str) -> RemoteProfileRef:
        """Build a reference for a known remote id."""

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name for status messages."""
