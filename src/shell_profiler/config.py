"""Configuration for shell-profiler, read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

DATA_DIR = Path.home() / ".shell_profiler"
REMOTE_DIR = Path.home() / ".shell_profiler_remote"
API_URL = "https://api.github.com"

AUTH_FILE = "auth.json"
PROFILE_FILE = "profile.json"
RAW_PROFILE_FILE = "raw_profile.json"
SCRIPT_FILE = "profile.sh"

PROFILE_FILE_EXT = ".shprofile.json"
DEFAULT_PROFILE_NAME = "DefaultProfile"

REMOTE_TYPES = ("github", "local")


@dataclass
class Settings:
    """Runtime settings. Environment variables override the defaults."""

    data_dir: Path = DATA_DIR
    remote: str = "github"
    remote_dir: Path = REMOTE_DIR
    api_url: str = API_URL
    timeout: int = 10
    log_level: str = "WARNING"

    @property
    def script_path(self) -> Path:
        return self.data_dir / SCRIPT_FILE


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the environment (``os.environ`` by default)."""
    env = os.environ if environ is None else environ

    remote = env.get("SHELL_PROFILER_REMOTE", "github").strip().lower()
    if remote not in REMOTE_TYPES:
        raise ValueError(
            f"Unknown remote type: {remote} (expected one of {', '.join(REMOTE_TYPES)})"
        )

    timeout_raw = env.get("SHELL_PROFILER_TIMEOUT", "10")
    try:
        timeout = int(timeout_raw)
    except ValueError:
        raise ValueError(f"SHELL_PROFILER_TIMEOUT must be an integer, got {timeout_raw!r}")

    settings = Settings(
        remote=remote,
        api_url=env.get("SHELL_PROFILER_API_URL", API_URL).rstrip("/"),
        timeout=timeout,
        log_level=env.get("SHELL_PROFILER_LOG_LEVEL", "WARNING"),
    )
    if env.get("SHELL_PROFILER_HOME"):
        settings.data_dir = Path(env["SHELL_PROFILER_HOME"]).expanduser()
    if env.get("SHELL_PROFILER_REMOTE_DIR"):
        settings.remote_dir = Path(env["SHELL_PROFILER_REMOTE_DIR"]).expanduser()
    return settings
