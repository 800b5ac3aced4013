"""Data model: auth record, profile document and its alias/function items.

Documents are stored as camelCase JSON, locally and inside remote profiles.
Loaded JSON goes through the ``parse_*`` functions, which validate the shape
and return a ParseResult instead of trusting the input.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Iterable, TypeVar

T = TypeVar("T")


class ItemKind(str, Enum):
    ALIAS = "alias"
    FUNCTION = "function"

    @property
    def plural(self) -> str:
        return "aliases" if self is ItemKind.ALIAS else "functions"


def normalize_name(name: str) -> str:
    """Key used for uniqueness checks: trimmed and case-folded."""
    return name.strip().casefold()


def generate_id(taken: Iterable[str] = ()) -> str:
    """Return a fresh opaque id not present in ``taken``."""
    taken = set(taken)
    while True:
        new_id = uuid.uuid4().hex
        if new_id not in taken:
            return new_id


def render_command(kind: ItemKind, name: str, body: str) -> str:
    if kind is ItemKind.ALIAS:
        return f'alias {name}="{body}"'
    return f"function {name}(){{\n\t{body}\n}}"


def retarget_command(kind: ItemKind, command: str, from_name: str, to_name: str) -> str:
    """Swap the defined name in a rendered command. Other commands pass through."""
    if kind is ItemKind.ALIAS:
        old, new = f"alias {from_name}=", f"alias {to_name}="
    else:
        old, new = f"function {from_name}()", f"function {to_name}()"
    if command.startswith(old):
        return new + command[len(old):]
    return command


@dataclass
class Item:
    """An alias or function with its rendered shell snippet."""

    id: str
    name: str
    desc: str
    command: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "desc": self.desc, "command": self.command}


@dataclass
class AuthRecord:
    github_token: str | None = None
    github_username: str | None = None
    gist_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "githubToken": self.github_token,
            "githubUsername": self.github_username,
            "gistId": self.gist_id,
        }


@dataclass
class ProfileDocument:
    """The locally materialized view of one remote profile."""

    name: str | None = None
    user_bashrc_file_path: str | None = None
    aliases: list[Item] = field(default_factory=list)
    functions: list[Item] = field(default_factory=list)

    def items(self, kind: ItemKind) -> list[Item]:
        return self.aliases if kind is ItemKind.ALIAS else self.functions

    def item_ids(self) -> set[str]:
        return {i.id for i in self.aliases} | {i.id for i in self.functions}

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "userBashrcFilePath": self.user_bashrc_file_path,
            "aliases": [i.to_dict() for i in self.aliases],
            "functions": [i.to_dict() for i in self.functions],
        }


@dataclass
class ParseResult(Generic[T]):
    """Outcome of parsing a JSON value: either ``value`` or ``error``."""

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "ParseResult[T]":
        return cls(error=error)


def _optional_str(data: dict, key: str) -> tuple[str | None, str | None]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        return None, f"'{key}' must be a string or null"
    return value, None


def parse_item(data: Any) -> ParseResult[Item]:
    if not isinstance(data, dict):
        return ParseResult.failure("item must be an object")
    values = {}
    for key in ("id", "name", "desc", "command"):
        value = data.get(key)
        if key == "desc" and value is None:
            value = ""
        if not isinstance(value, str):
            return ParseResult.failure(f"item '{key}' must be a string")
        values[key] = value
    if not values["id"] or not values["name"].strip():
        return ParseResult.failure("item 'id' and 'name' must not be empty")
    return ParseResult.success(Item(**values))


def _parse_items(data: dict, key: str) -> ParseResult[list[Item]]:
    raw = data.get(key)
    if raw is None:
        return ParseResult.success([])
    if not isinstance(raw, list):
        return ParseResult.failure(f"'{key}' must be a list")

    items = []
    seen = set()
    for i, entry in enumerate(raw):
        result = parse_item(entry)
        if not result.ok:
            return ParseResult.failure(f"{key}[{i}]: {result.error}")
        norm = normalize_name(result.value.name)
        if norm in seen:
            return ParseResult.failure(f"{key}[{i}]: duplicate name '{result.value.name}'")
        seen.add(norm)
        items.append(result.value)
    return ParseResult.success(items)


def parse_profile(data: Any) -> ParseResult[ProfileDocument]:
    """Validate a decoded profile JSON object."""
    if not isinstance(data, dict):
        return ParseResult.failure("profile must be an object")

    name, err = _optional_str(data, "name")
    if err:
        return ParseResult.failure(err)
    bashrc, err = _optional_str(data, "userBashrcFilePath")
    if err:
        return ParseResult.failure(err)

    aliases = _parse_items(data, "aliases")
    if not aliases.ok:
        return ParseResult.failure(aliases.error)
    functions = _parse_items(data, "functions")
    if not functions.ok:
        return ParseResult.failure(functions.error)

    return ParseResult.success(
        ProfileDocument(
            name=name,
            user_bashrc_file_path=bashrc,
            aliases=aliases.value,
            functions=functions.value,
        )
    )


def parse_auth(data: Any) -> ParseResult[AuthRecord]:
    if not isinstance(data, dict):
        return ParseResult.failure("auth data must be an object")
    values = {}
    for key in ("githubToken", "githubUsername", "gistId"):
        value, err = _optional_str(data, key)
        if err:
            return ParseResult.failure(err)
        values[key] = value
    return ParseResult.success(
        AuthRecord(
            github_token=values["githubToken"],
            github_username=values["githubUsername"],
            gist_id=values["gistId"],
        )
    )
