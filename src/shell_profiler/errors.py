"""Exceptions raised by the store, registry, engine and remote directories."""

from __future__ import annotations


class ProfilerError(Exception):
    """Base class for every error shell-profiler reports to the user."""


class IntegrityError(ProfilerError):
    """Local data files are missing or unreadable. Fixed by running init."""

    def __init__(self, detail: str | None = None):
        msg = "There are issues with your local profile data. Run: shell-profiler init"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)
        self.detail = detail


class ValidationError(ProfilerError):
    """Missing option or value, bad selection index, empty required field."""


class RemoteError(ProfilerError):
    """A remote directory call failed. No local state was changed."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class AuthenticationError(RemoteError):
    """Missing or rejected credentials."""
