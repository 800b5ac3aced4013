"""Remote profile directories."""

from shell_profiler.config import Settings
from shell_profiler.models import AuthRecord
from shell_profiler.remotes.base import ProfileDirectory, RemoteProfile, RemoteProfileRef
from shell_profiler.remotes.github import GistDirectory
from shell_profiler.remotes.local import LocalDirectory


def create_directory(settings: Settings, auth: AuthRecord | None = None) -> ProfileDirectory:
    """Factory: create the profile directory selected by ``settings.remote``."""
    if settings.remote == "github":
        auth = auth or AuthRecord()
        return GistDirectory(
            token=auth.github_token,
            username=auth.github_username,
            api_url=settings.api_url,
            timeout=settings.timeout,
        )
    elif settings.remote == "local":
        return LocalDirectory(settings.remote_dir)
    else:
        raise ValueError(f"Unknown remote type: {settings.remote}")
