"""Tests for alias and function CRUD."""

import itertools

import pytest

from shell_profiler.errors import IntegrityError, ValidationError
from shell_profiler.models import Item, ItemKind
from shell_profiler.registry import ItemRegistry, parse_selector, render_script, sorted_items
from shell_profiler.store import DocumentKind, LocalStore


def _names(items):
    return [i.name for i in items]


class TestUpsert:
    def test_update_same_name_changes_command_only(self, populated_store):
        registry = ItemRegistry(populated_store)
        before = populated_store.load_profile().aliases
        item = registry.build_item(ItemKind.ALIAS, "  GST ", "other desc", "git status -sb")

        result = registry.upsert(ItemKind.ALIAS, item)

        assert result.updated is True
        after = populated_store.load_profile().aliases
        assert len(after) == len(before)
        gst = next(i for i in after if i.name == "gst")
        assert gst.id == "a1"
        assert gst.desc == "git status"
        assert gst.command == 'alias gst="git status -sb"'

    def test_insert_new_name_appends_with_fresh_id(self, populated_store):
        registry = ItemRegistry(populated_store)
        existing_ids = populated_store.load_profile().item_ids()
        item = registry.build_item(ItemKind.ALIAS, "gco", "checkout", "git checkout")

        result = registry.upsert(ItemKind.ALIAS, item)

        assert result.updated is False
        aliases = populated_store.load_profile().aliases
        assert len(aliases) == 3
        assert aliases[-1].name == "gco"
        assert aliases[-1].id
        assert aliases[-1].id not in existing_ids

    def test_insert_ignores_supplied_id(self, populated_store):
        registry = ItemRegistry(populated_store)
        item = Item(id="a1", name="new", desc="", command='alias new="x"')
        result = registry.upsert(ItemKind.ALIAS, item)
        assert result.item.id != "a1"

    def test_names_are_unique_per_kind(self, populated_store):
        registry = ItemRegistry(populated_store)
        item = registry.build_item(ItemKind.FUNCTION, "ll", "", "ls -la")
        result = registry.upsert(ItemKind.FUNCTION, item)
        assert result.updated is False
        profile = populated_store.load_profile()
        assert "ll" in _names(profile.functions)
        assert "ll" in _names(profile.aliases)

    def test_update_keeps_stored_name_in_function_command(self, populated_store):
        registry = ItemRegistry(populated_store)
        item = registry.build_item(ItemKind.FUNCTION, "MkCd", "", "mkdir -p \"$1\"")
        registry.upsert(ItemKind.FUNCTION, item)
        func = populated_store.load_profile().functions[0]
        assert func.name == "mkcd"
        assert func.command == 'function mkcd(){\n\tmkdir -p "$1"\n}'

    def test_function_upsert_persists(self, populated_store):
        registry = ItemRegistry(populated_store)
        item = registry.build_item(ItemKind.FUNCTION, "greet", "say hi", "echo hi")
        registry.upsert(ItemKind.FUNCTION, item)
        func = populated_store.load_profile().functions[-1]
        assert func.command == "function greet(){\n\techo hi\n}"

    def test_requires_integrity(self, tmp_path):
        registry = ItemRegistry(LocalStore(tmp_path / "missing"))
        item = Item(id="", name="x", desc="", command="c")
        with pytest.raises(IntegrityError):
            registry.upsert(ItemKind.ALIAS, item)


class TestBuildItem:
    def test_empty_name_raises(self, store):
        with pytest.raises(ValidationError, match="name"):
            ItemRegistry(store).build_item(ItemKind.ALIAS, "  ", "", "ls")

    def test_name_with_space_raises(self, store):
        with pytest.raises(ValidationError, match="whitespace"):
            ItemRegistry(store).build_item(ItemKind.ALIAS, "my alias", "", "ls")

    def test_empty_body_raises(self, store):
        with pytest.raises(ValidationError, match="body"):
            ItemRegistry(store).build_item(ItemKind.FUNCTION, "f", "", " ")


class TestListing:
    @pytest.mark.parametrize("order", list(itertools.permutations(["a", "bb", "ccc"])))
    def test_orders_by_name_length(self, store, order):
        registry = ItemRegistry(store)
        for name in order:
            registry.upsert(ItemKind.ALIAS, registry.build_item(ItemKind.ALIAS, name, "", "x"))
        assert _names(registry.listing(ItemKind.ALIAS)) == ["a", "bb", "ccc"]

    def test_ties_keep_insertion_order(self):
        items = [Item(id=str(i), name=n, desc="", command="") for i, n in enumerate(["zz", "a", "aa"])]
        assert _names(sorted_items(items)) == ["a", "zz", "aa"]

    def test_listing_does_not_reorder_storage(self, store):
        registry = ItemRegistry(store)
        for name in ("ccc", "a"):
            registry.upsert(ItemKind.ALIAS, registry.build_item(ItemKind.ALIAS, name, "", "x"))
        registry.listing(ItemKind.ALIAS)
        assert _names(store.load_profile().aliases) == ["ccc", "a"]


class TestDelete:
    @pytest.fixture
    def three_aliases(self, store):
        registry = ItemRegistry(store)
        for name in ("ccc", "a", "bb"):
            registry.upsert(ItemKind.ALIAS, registry.build_item(ItemKind.ALIAS, name, "", "x"))
        return registry

    def test_partial_failure_applies_valid_indices(self, three_aliases, store):
        result = three_aliases.delete(ItemKind.ALIAS, "0,5,1")
        assert result.skipped == 1
        assert _names(result.removed) == ["a", "bb"]
        assert _names(store.load_profile().aliases) == ["ccc"]

    def test_single_index_uses_sorted_view(self, three_aliases, store):
        result = three_aliases.delete(ItemKind.ALIAS, 2)
        assert _names(result.removed) == ["ccc"]
        assert _names(store.load_profile().aliases) == ["a", "bb"]

    def test_single_invalid_index_raises(self, three_aliases, store):
        with pytest.raises(ValidationError):
            three_aliases.delete(ItemKind.ALIAS, "7")
        assert len(store.load_profile().aliases) == 3

    def test_non_ascii_digit_single_index_raises(self, three_aliases, store):
        with pytest.raises(ValidationError):
            three_aliases.delete(ItemKind.ALIAS, "²")
        assert len(store.load_profile().aliases) == 3

    def test_non_ascii_digits_in_list_are_skipped(self, three_aliases, store):
        result = three_aliases.delete(ItemKind.ALIAS, "²,0,٣")
        assert result.skipped == 2
        assert _names(result.removed) == ["a"]

    def test_non_numeric_tokens_are_skipped(self, three_aliases, store):
        result = three_aliases.delete(ItemKind.ALIAS, "x, 1 ,-1")
        assert result.skipped == 2
        assert _names(result.removed) == ["bb"]

    def test_duplicate_indices_delete_once(self, three_aliases, store):
        result = three_aliases.delete(ItemKind.ALIAS, "0,0")
        assert _names(result.removed) == ["a"]
        assert result.skipped == 0
        assert len(store.load_profile().aliases) == 2

    def test_all_invalid_changes_nothing(self, three_aliases, store):
        before = store.path(DocumentKind.PROFILE).read_bytes()
        result = three_aliases.delete(ItemKind.ALIAS, "8,9")
        assert result.removed == []
        assert result.skipped == 2
        assert store.path(DocumentKind.PROFILE).read_bytes() == before

    def test_deletes_functions(self, populated_store):
        registry = ItemRegistry(populated_store)
        result = registry.delete(ItemKind.FUNCTION, "0")
        assert _names(result.removed) == ["mkcd"]
        assert populated_store.load_profile().functions == []
        assert len(populated_store.load_profile().aliases) == 2

    def test_resolve_does_not_delete(self, three_aliases, store):
        preview = three_aliases.resolve(ItemKind.ALIAS, "0,1")
        assert _names(preview.removed) == ["a", "bb"]
        assert len(store.load_profile().aliases) == 3

    def test_empty_selector_raises(self):
        with pytest.raises(ValidationError):
            parse_selector(" , ")


class TestExport:
    def test_render_script(self, sample_profile):
        script = render_script(sample_profile)
        assert script.startswith("# shell-profiler profile: Home\n")
        assert 'alias gst="git status"' in script
        assert "# make and enter a dir\nfunction mkcd(){" in script

    def test_export_writes_file(self, populated_store, tmp_path):
        target = tmp_path / "out" / "profile.sh"
        written = ItemRegistry(populated_store).export_script(target)
        assert written == target
        assert 'alias ll="ls -la"' in target.read_text()
