"""Shared test fixtures."""

import pytest

from shell_profiler.models import AuthRecord, Item, ProfileDocument
from shell_profiler.remotes.local import LocalDirectory
from shell_profiler.store import LocalStore


@pytest.fixture
def store(tmp_path):
    """An initialized local store under a temporary data dir."""
    s = LocalStore(tmp_path / "data")
    s.initialize()
    return s


@pytest.fixture
def remote(tmp_path):
    """A folder-backed remote profile directory."""
    return LocalDirectory(tmp_path / "remote")


@pytest.fixture
def sample_profile():
    """A profile with two aliases and one function."""
    return ProfileDocument(
        name="Home",
        user_bashrc_file_path="/home/user/.bashrc",
        aliases=[
            Item(id="a1", name="gst", desc="git status", command='alias gst="git status"'),
            Item(id="a2", name="ll", desc="long listing", command='alias ll="ls -la"'),
        ],
        functions=[
            Item(
                id="f1",
                name="mkcd",
                desc="make and enter a dir",
                command='function mkcd(){\n\tmkdir -p "$1" && cd "$1"\n}',
            ),
        ],
    )


@pytest.fixture
def populated_store(store, sample_profile):
    """A store holding sample_profile as the active profile."""
    store.save_profile(sample_profile)
    store.save_auth(AuthRecord(github_token="tok", github_username="octocat", gist_id="Home"))
    return store
