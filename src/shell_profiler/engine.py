"""Profile engine: selects, loads and creates remote profiles.

The interactive flow is a small state machine::

    NO_PROFILE -> LISTING -> SELECTING | CREATING -> ACTIVE

``read_profiles()`` starts it, then each prompt answer goes through
``next_input()`` until the state is ACTIVE (or NO_PROFILE when nothing was
found outside of initialization). Remote failures leave the state where it
was and never touch local documents.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path

from shell_profiler.config import DEFAULT_PROFILE_NAME, Settings, load_settings
from shell_profiler.errors import RemoteError, ValidationError
from shell_profiler.models import ProfileDocument, parse_profile
from shell_profiler.remotes import ProfileDirectory, RemoteProfileRef, create_directory
from shell_profiler.remotes.base import serialize_document
from shell_profiler.store import LocalStore

logger = logging.getLogger(__name__)

NEW_PROFILE_CHOICE = "n"


class EngineState(str, Enum):
    NO_PROFILE = "no_profile"
    LISTING = "listing"
    SELECTING = "selecting"
    CREATING = "creating"
    ACTIVE = "active"


class ProfileEngine:
    """Reconciles the local store with a remote profile directory."""

    def __init__(
        self,
        store: LocalStore,
        directory: ProfileDirectory | None = None,
        settings: Settings | None = None,
    ):
        self.store = store
        self.settings = settings
        self._directory = directory
        self.state = EngineState.NO_PROFILE
        self.refs: list[RemoteProfileRef] = []
        self.init_mode = False

    @property
    def directory(self) -> ProfileDirectory:
        # Built lazily so credentials saved during init are picked up.
        if self._directory is None:
            settings = self.settings or load_settings()
            self._directory = create_directory(settings, self.store.load_auth())
        return self._directory

    # Setup and credentials

    def initialize(self, token: str, username: str, bashrc_path: str | None = None) -> None:
        """Wipe and re-seed the local store, then save credentials."""
        bashrc_path = (bashrc_path or "").strip() or None
        if bashrc_path and not Path(bashrc_path).expanduser().is_file():
            raise ValidationError(f"The path provided for the bashrc file is not valid: {bashrc_path}")

        self.store.initialize()
        self.set_github_token(token)
        self.set_github_username(username)
        if bashrc_path:
            self.set_bashrc_path(bashrc_path)
        self._directory = None
        self.state = EngineState.NO_PROFILE

    def set_github_token(self, token: str) -> None:
        token = token.strip()
        if not token:
            raise ValidationError("The GitHub token must not be empty")
        self.store.require_integrity()
        auth = self.store.load_auth()
        auth.github_token = token
        self.store.save_auth(auth)
        self._directory = None

    def set_github_username(self, username: str) -> None:
        username = username.strip()
        if not username:
            raise ValidationError("The GitHub username must not be empty")
        self.store.require_integrity()
        auth = self.store.load_auth()
        auth.github_username = username
        self.store.save_auth(auth)
        self._directory = None

    def set_bashrc_path(self, path: str) -> None:
        self.store.require_integrity()
        profile = self.store.load_profile()
        profile.user_bashrc_file_path = path
        self.store.save_profile(profile)

    @property
    def profile_name(self) -> str | None:
        self.store.require_integrity()
        return self.store.load_profile().name

    # State machine

    def read_profiles(self, init_mode: bool = False) -> EngineState:
        """List remote profiles and move to SELECTING, CREATING or NO_PROFILE."""
        self.store.require_integrity()
        self.init_mode = init_mode
        self.state = EngineState.LISTING
        try:
            self.refs = self.directory.list()
        except RemoteError:
            self.state = EngineState.NO_PROFILE
            raise

        logger.debug("Found %d remote profile(s)", len(self.refs))
        if self.refs:
            self.state = EngineState.SELECTING
        elif init_mode:
            self.state = EngineState.CREATING
        else:
            self.state = EngineState.NO_PROFILE
        return self.state

    def next_input(self, answer: str) -> EngineState:
        """Feed one prompt answer to the current state."""
        if self.state is EngineState.SELECTING:
            return self.select(answer)
        if self.state is EngineState.CREATING:
            self.create(answer)
            return self.state
        raise ValidationError(f"No input expected in state '{self.state.value}'")

    def select(self, choice: str) -> EngineState:
        """Pick a listed profile by index, or 'n' to create a new one."""
        if self.state is not EngineState.SELECTING:
            raise ValidationError("There is no profile listing to select from")

        choice = choice.strip().lower()
        if choice == NEW_PROFILE_CHOICE:
            self.state = EngineState.CREATING
            return self.state
        if not (choice.isascii() and choice.isdigit()) or int(choice) >= len(self.refs):
            raise ValidationError("Select a valid profile number")

        self.load(self.refs[int(choice)])
        return self.state

    def load(self, ref: RemoteProfileRef) -> ProfileDocument:
        """Fetch ``ref`` and replace the local profile with it.

        All-or-nothing: nothing is written until the response is parsed.
        """
        self.store.require_integrity()
        remote = self.directory.fetch(ref)
        try:
            data = json.loads(remote.content)
        except json.JSONDecodeError as e:
            raise RemoteError(f"Profile '{ref.name}' is not valid JSON: {e}")
        result = parse_profile(data)
        if not result.ok:
            raise RemoteError(f"Profile '{ref.name}' is malformed: {result.error}")

        profile = result.value
        profile.name = ref.name
        auth = self.store.load_auth()
        auth.gist_id = remote.remote_id

        self.store.save_raw(remote.remote_id, remote.content)
        self.store.save_profile(profile)
        self.store.save_auth(auth)
        self.state = EngineState.ACTIVE
        logger.debug("Loaded profile '%s' (%s)", profile.name, remote.remote_id)
        return profile

    def create(self, name: str) -> ProfileDocument:
        """Create a remote profile from the current one with its items cleared."""
        self.store.require_integrity()
        name = name.strip() or DEFAULT_PROFILE_NAME
        if any(c in name for c in "/\\") or any(c.isspace() for c in name):
            raise ValidationError(f"Invalid profile name: {name!r}")

        profile = self.store.load_profile()
        profile.name = name
        profile.aliases = []
        profile.functions = []

        document = profile.to_dict()
        remote_id = self.directory.create(name, document)

        auth = self.store.load_auth()
        auth.gist_id = remote_id
        self.store.save_raw(remote_id, serialize_document(document))
        self.store.save_profile(profile)
        self.store.save_auth(auth)
        self.state = EngineState.ACTIVE
        logger.debug("Created profile '%s' (%s)", name, remote_id)
        return profile

    # Sync of the active profile

    def _active_ref(self) -> tuple[RemoteProfileRef, ProfileDocument]:
        self.store.require_integrity()
        auth = self.store.load_auth()
        profile = self.store.load_profile()
        if not auth.gist_id or not profile.name:
            raise ValidationError("No active profile. Run: shell-profiler set --profile")
        return self.directory.ref_for(auth.gist_id, profile.name), profile

    def push(self) -> ProfileDocument:
        """Overwrite the active remote profile with the local one."""
        ref, profile = self._active_ref()
        document = profile.to_dict()
        self.directory.update(ref, document)
        self.store.save_raw(ref.remote_id, serialize_document(document))
        return profile

    def pull(self) -> ProfileDocument:
        """Re-fetch the active remote profile, replacing the local one."""
        ref, _ = self._active_ref()
        return self.load(ref)
