"""Tests for the declarative resource scanner."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from reclaim.core.errors import ScanError
from reclaim.core.scanner import (
    ResourceClass,
    TagRule,
    TagTable,
    entry_size,
    scan_resource,
    suffix_rule,
)


def _write(path: Path, size: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


class TestRules:
    def test_suffix_rule_ignores_case(self):
        rule = suffix_rule(".AppImage")
        assert rule(Path("/x/Tool.appimage"))
        assert not rule(Path("/x/tool.deb"))


class TestTagTable:
    def test_collects_every_matching_rule(self):
        table = TagTable([
            TagRule("mesa_shader_cache*", "critical", "Shader cache in use"),
            TagRule("*cache*", "cache"),
            TagRule("pip", "safe"),
        ])
        tags, notes = table.lookup("mesa_shader_cache_db")
        assert tags == {"critical", "cache"}
        assert notes == ("Shader cache in use",)

    def test_no_match(self):
        assert TagTable([TagRule("pip", "safe")]).lookup("npm") == (frozenset(), ())


class TestEntrySize:
    def test_file(self, tmp_path):
        assert entry_size(_write(tmp_path / "f", 42), "file") == 42

    def test_directory_tree(self, tmp_path):
        _write(tmp_path / "d" / "a", 10)
        _write(tmp_path / "d" / "sub" / "b", 5)
        assert entry_size(tmp_path / "d", "dir") == 15

    def test_missing_entry(self, tmp_path):
        with pytest.raises(ScanError):
            entry_size(tmp_path / "gone", "file")


class TestScanResource:
    def test_missing_roots_give_empty_catalog(self, tmp_path):
        catalog = scan_resource(ResourceClass("nothing", (tmp_path / "missing",)))
        assert len(catalog) == 0
        assert catalog.total_bytes == 0

    def test_matches_children_and_sums(self, tmp_path):
        _write(tmp_path / "a.deb", 100)
        _write(tmp_path / "b.deb", 50)
        _write(tmp_path / "lock", 1)
        catalog = scan_resource(ResourceClass("debs", (tmp_path,), match=suffix_rule(".deb")), step_id="apt_cache")
        assert catalog.step_id == "apt_cache"
        assert [Path(i.identifier).name for i in catalog.items] == ["a.deb", "b.deb"]
        assert catalog.total_bytes == 150

    def test_skips_empty_items_unless_asked(self, tmp_path):
        _write(tmp_path / "empty", 0)
        _write(tmp_path / "full", 3)
        assert len(scan_resource(ResourceClass("r", (tmp_path,)))) == 1
        assert len(scan_resource(ResourceClass("r", (tmp_path,), skip_empty=False))) == 2

    def test_kinds_filter(self, tmp_path):
        _write(tmp_path / "dir" / "inner", 5)
        _write(tmp_path / "file", 5)
        catalog = scan_resource(ResourceClass("r", (tmp_path,), kinds=frozenset({"dir"})))
        assert [Path(i.identifier).name for i in catalog.items] == ["dir"]

    def test_max_depth(self, tmp_path):
        _write(tmp_path / "one" / "two" / "deep.log", 5)
        shallow = ResourceClass("r", (tmp_path,), match=suffix_rule(".log"), kinds=frozenset({"file"}))
        deep = ResourceClass("r", (tmp_path,), match=suffix_rule(".log"), kinds=frozenset({"file"}), max_depth=3)
        assert len(scan_resource(shallow)) == 0
        assert len(scan_resource(deep)) == 1

    def test_matched_directory_is_one_item(self, tmp_path):
        _write(tmp_path / "cache" / "a", 4)
        _write(tmp_path / "cache" / "b", 6)
        catalog = scan_resource(ResourceClass("r", (tmp_path,), max_depth=5))
        assert len(catalog) == 1
        assert catalog.items[0].size_bytes == 10

    def test_exclude(self, tmp_path):
        _write(tmp_path / "thumbnails" / "x", 5)
        _write(tmp_path / "other" / "y", 5)
        catalog = scan_resource(ResourceClass("r", (tmp_path,), exclude=frozenset({"thumbnails"})))
        assert [Path(i.identifier).name for i in catalog.items] == ["other"]

    def test_symlink_leaving_roots_is_skipped(self, tmp_path):
        outside = _write(tmp_path / "outside" / "secret", 100)
        root = tmp_path / "root"
        root.mkdir()
        (root / "link").symlink_to(outside)
        _write(root / "real", 1)
        catalog = scan_resource(ResourceClass("r", (root,)))
        assert [Path(i.identifier).name for i in catalog.items] == ["real"]

    def test_symlink_inside_roots_is_deduplicated(self, tmp_path):
        target = _write(tmp_path / "big.bin", 100)
        (tmp_path / "alias.bin").symlink_to(target)
        catalog = scan_resource(ResourceClass("r", (tmp_path,)))
        assert len(catalog) == 1
        assert catalog.total_bytes == 100
        assert catalog.items[0].identifier == str(target)

    def test_symlink_keeps_its_own_path(self, tmp_path):
        _write(tmp_path / "data" / "big.bin", 100)
        link = tmp_path / "alias.bin"
        link.symlink_to(tmp_path / "data" / "big.bin")
        catalog = scan_resource(ResourceClass("r", (tmp_path,), kinds=frozenset({"file"})))
        assert len(catalog) == 1
        item = catalog.items[0]
        assert item.identifier == str(link)
        assert item.path == link
        assert item.size_bytes == link.lstat().st_size

    def test_overlapping_roots_are_deduplicated(self, tmp_path):
        _write(tmp_path / "a", 7)
        catalog = scan_resource(ResourceClass("r", (tmp_path, tmp_path)))
        assert len(catalog) == 1

    @pytest.mark.skipif(os.geteuid() == 0, reason="root can read everything")
    def test_unreadable_item_is_omitted(self, tmp_path):
        locked = tmp_path / "locked"
        _write(locked / "inside", 5)
        _write(tmp_path / "open" / "inside", 5)
        locked.chmod(0)
        try:
            catalog = scan_resource(ResourceClass("r", (tmp_path,), kinds=frozenset({"dir"})))
        finally:
            locked.chmod(0o755)
        assert [Path(i.identifier).name for i in catalog.items] == ["open"]

    def test_size_calculator_errors_are_omitted(self, tmp_path):
        _write(tmp_path / "good", 5)
        _write(tmp_path / "bad", 5)

        def size_of(path: Path) -> int:
            if path.name == "bad":
                raise ScanError("boom")
            return 5

        catalog = scan_resource(ResourceClass("r", (tmp_path,), size_of=size_of))
        assert [Path(i.identifier).name for i in catalog.items] == ["good"]

    def test_size_order_and_limit(self, tmp_path):
        for name, size in (("small", 1), ("large", 30), ("medium", 10)):
            _write(tmp_path / name, size)
        catalog = scan_resource(ResourceClass("r", (tmp_path,), order="size", limit=2))
        assert [Path(i.identifier).name for i in catalog.items] == ["large", "medium"]

    def test_tags_notes_and_labels(self, tmp_path):
        _write(tmp_path / "fontconfig" / "cache", 5)
        resource = ResourceClass(
            "r",
            (tmp_path,),
            tags=TagTable([TagRule("fontconfig", "critical", "Font cache")]),
            tagger=lambda path: {"user"},
            label=lambda path: path.name.upper(),
        )
        item = scan_resource(resource).items[0]
        assert item.tags == {"critical", "user"}
        assert item.notes == ("Font cache",)
        assert item.label == "FONTCONFIG"
        assert item.path == tmp_path / "fontconfig"
