"""GitHub gist profile directory: one private gist per profile."""

from __future__ import annotations

import logging
from typing import Any

import requests

from shell_profiler.config import API_URL
from shell_profiler.errors import AuthenticationError, RemoteError
from shell_profiler.remotes.base import (
    ProfileDirectory,
    RemoteProfile,
    RemoteProfileRef,
    profile_filename,
    profile_name_from_filename,
    serialize_document,
)

logger = logging.getLogger(__name__)


class GistDirectory(ProfileDirectory):
    """Profile directory backed by the GitHub gists REST API."""

    def __init__(
        self,
        token: str | None,
        username: str | None = None,
        api_url: str = API_URL,
        timeout: int = 10,
    ):
        self.token = token
        self.username = username
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        if not self.token:
            raise AuthenticationError(
                "No GitHub token set. Run: shell-profiler set --token <TOKEN>"
            )
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github+json",
        }

    def _request(
        self,
        method: str,
        url: str,
        expected: int = 200,
        **kwargs: Any,
    ) -> Any:
        headers = self._headers()
        logger.debug("%s %s", method, url)
        try:
            response = requests.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise RemoteError(f"Request to GitHub failed: {e}")

        logger.debug("%s %s -> %s", method, url, response.status_code)
        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"GitHub rejected the credentials (HTTP {response.status_code})",
                status=response.status_code,
            )
        if response.status_code != expected:
            raise RemoteError(
                f"GitHub returned HTTP {response.status_code}: {response.text[:200]}",
                status=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"Malformed response from GitHub: {e}")

    def list(self) -> list[RemoteProfileRef]:
        data = self._request("GET", f"{self.api_url}/gists", params={"per_page": 100})
        if not isinstance(data, list):
            raise RemoteError("Malformed gist listing from GitHub")

        refs = []
        for gist in data:
            files = gist.get("files") or {}
            if not files:
                continue
            name = profile_name_from_filename(next(iter(files)))
            if name is None:
                continue
            refs.append(RemoteProfileRef(url=gist["url"], name=name, remote_id=gist.get("id")))
        return refs

    def fetch(self, ref: RemoteProfileRef) -> RemoteProfile:
        data = self._request("GET", ref.url)
        try:
            remote_id = data["id"]
            gist_file = data["files"][profile_filename(ref.name)]
        except (KeyError, TypeError):
            raise RemoteError(f"Gist for profile '{ref.name}' has no profile file")
        if not isinstance(gist_file, dict):
            raise RemoteError(f"Gist for profile '{ref.name}' has no profile file")

        if gist_file.get("truncated") and gist_file.get("raw_url"):
            content = self._fetch_raw(gist_file["raw_url"])
        else:
            content = gist_file.get("content")
        if not isinstance(content, str):
            raise RemoteError(f"Gist for profile '{ref.name}' has no content")
        return RemoteProfile(remote_id=remote_id, name=ref.name, content=content)

    def _fetch_raw(self, url: str) -> str:
        try:
            response = requests.request(
                "GET", url, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as e:
            raise RemoteError(f"Request to GitHub failed: {e}")
        if response.status_code != 200:
            raise RemoteError(
                f"GitHub returned HTTP {response.status_code} for raw content",
                status=response.status_code,
            )
        return response.text

    def create(self, name: str, document: dict[str, Any]) -> str:
        payload = {
            "description": f"shell-profiler profile: {name}",
            "public": False,
            "files": {profile_filename(name): {"content": serialize_document(document)}},
        }
        data = self._request("POST", f"{self.api_url}/gists", expected=201, json=payload)
        try:
            return data["id"]
        except (KeyError, TypeError):
            raise RemoteError("GitHub did not return an id for the created gist")

    def update(self, ref: RemoteProfileRef, document: dict[str, Any]) -> None:
        payload = {
            "files": {profile_filename(ref.name): {"content": serialize_document(document)}},
        }
        self._request("PATCH", ref.url, json=payload)

    def ref_for(self, remote_id: str, name: str) -> RemoteProfileRef:
        return RemoteProfileRef(
            url=f"{self.api_url}/gists/{remote_id}", name=name, remote_id=remote_id
        )

    @property
    def display_name(self) -> str:
        return f"GitHub gists of {self.username or '(unknown user)'}"
