"""Alias and function CRUD on the active profile document."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from shell_profiler.errors import ValidationError
from shell_profiler.models import (
    Item,
    ItemKind,
    ProfileDocument,
    generate_id,
    normalize_name,
    render_command,
    retarget_command,
)
from shell_profiler.store import LocalStore

logger = logging.getLogger(__name__)


@dataclass
class UpsertResult:
    item: Item
    updated: bool


@dataclass
class DeleteResult:
    removed: list[Item] = field(default_factory=list)
    skipped: int = 0


def sorted_items(items: list[Item]) -> list[Item]:
    """Listing view: ascending name length, insertion order on ties."""
    return sorted(items, key=lambda i: len(i.name))


def parse_selector(selector: str | int) -> list[str]:
    """Split a delete selector ("3" or "0,5,1") into raw index tokens."""
    if isinstance(selector, int):
        return [str(selector)]
    tokens = [t.strip() for t in selector.split(",")]
    if not any(tokens):
        raise ValidationError(
            "You must provide a valid number or a comma separated list of numbers"
        )
    return tokens


def _to_index(token: str, size: int) -> int | None:
    if not (token.isascii() and token.isdigit()):
        return None
    index = int(token)
    return index if index < size else None


def render_script(profile: ProfileDocument) -> str:
    """Render a sourceable shell script with every alias and function."""
    lines = [f"# shell-profiler profile: {profile.name or '(unnamed)'}"]
    for kind in (ItemKind.ALIAS, ItemKind.FUNCTION):
        for item in profile.items(kind):
            if item.desc:
                lines.append(f"# {item.desc}")
            lines.append(item.command)
    return "\n".join(lines) + "\n"


class ItemRegistry:
    """Upserts and deletes items, persisting the whole profile after each change."""

    def __init__(self, store: LocalStore):
        self.store = store

    def _load(self) -> ProfileDocument:
        self.store.require_integrity()
        return self.store.load_profile()

    def listing(self, kind: ItemKind) -> list[Item]:
        return sorted_items(self._load().items(kind))

    def build_item(self, kind: ItemKind, name: str, desc: str, body: str) -> Item:
        """Create an item from prompt answers, rendering its command."""
        name = name.strip()
        if not name:
            raise ValidationError(f"The {kind.value} name must not be empty")
        if any(c.isspace() for c in name):
            raise ValidationError(f"The {kind.value} name must not contain whitespace")
        if not body.strip():
            raise ValidationError(f"The {kind.value} body must not be empty")
        return Item(
            id="",
            name=name,
            desc=desc.strip(),
            command=render_command(kind, name, body.strip()),
        )

    def upsert(self, kind: ItemKind, item: Item) -> UpsertResult:
        """Update the command of the same-named item, or append a new one."""
        profile = self._load()
        items = profile.items(kind)
        key = normalize_name(item.name)

        result = None
        for existing in items:
            if normalize_name(existing.name) == key:
                existing.command = retarget_command(
                    kind, item.command, item.name.strip(), existing.name
                )
                result = UpsertResult(item=existing, updated=True)
                break

        if result is None:
            new_item = Item(
                id=generate_id(profile.item_ids()),
                name=item.name.strip(),
                desc=item.desc,
                command=item.command,
            )
            items.append(new_item)
            result = UpsertResult(item=new_item, updated=False)

        self.store.save_profile(profile)
        logger.debug(
            "%s %s '%s'", "Updated" if result.updated else "Inserted", kind.value, result.item.name
        )
        return result

    def resolve(self, kind: ItemKind, selector: str | int) -> DeleteResult:
        """Map a selector onto the length-sorted listing view without deleting.

        A single invalid index is a ValidationError. In a comma separated
        list, invalid indices are skipped and counted.
        """
        tokens = parse_selector(selector)
        view = self.listing(kind)

        if len(tokens) == 1 and _to_index(tokens[0], len(view)) is None:
            raise ValidationError(
                f"Invalid {kind.value} index: {tokens[0]!r}. "
                "You must provide a valid number or a comma separated list of numbers"
            )

        result = DeleteResult()
        seen = set()
        for token in tokens:
            index = _to_index(token, len(view))
            if index is None:
                result.skipped += 1
                continue
            if view[index].id not in seen:
                seen.add(view[index].id)
                result.removed.append(view[index])
        return result

    def delete(self, kind: ItemKind, selector: str | int) -> DeleteResult:
        """Delete the items a selector resolves to; invalid indices are skipped."""
        result = self.resolve(kind, selector)
        if result.removed:
            profile = self._load()
            target_ids = {t.id for t in result.removed}
            items = profile.items(kind)
            items[:] = [i for i in items if i.id not in target_ids]
            self.store.save_profile(profile)
            logger.debug("Deleted %d %s", len(result.removed), kind.plural)
        return result

    def export_script(self, path: Path) -> Path:
        """Write the rendered script for the active profile to ``path``."""
        profile = self._load()
        path = Path(path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_script(profile), encoding="utf-8")
        logger.debug("Exported script to %s", path)
        return path
