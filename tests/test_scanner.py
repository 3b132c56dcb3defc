"""Tests for building the tag index from disk."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from symtag.scanning import DirectoryScanner, ScanError


def _library(tmp_path: Path) -> tuple[Path, Path]:
    """Create an items root with three entries and an empty tags root.

    Args:
        tmp_path: Temporary directory provided by pytest.

    Returns:
        tuple[Path, Path]: Canonical items root and tags root.
    """
    root = tmp_path.resolve()
    items = root / "all"
    items.mkdir()
    (items / "a.txt").write_text("a", encoding="utf-8")
    (items / "b.txt").write_text("b", encoding="utf-8")
    (items / "album").mkdir()
    (items / "album" / "track.mp3").write_text("x", encoding="utf-8")
    tags = root / "tags"
    tags.mkdir()
    return items, tags


def _link(link: Path, item: Path) -> None:
    link.parent.mkdir(parents=True, exist_ok=True)
    link.symlink_to(os.path.relpath(item, link.parent))


def test_scan_items_registers_direct_children_only(tmp_path: Path) -> None:
    items, tags = _library(tmp_path)

    index = DirectoryScanner().scan(items, tags)

    assert {item.display_name for item in index.items.values()} == {"a.txt", "b.txt", "album"}
    assert items / "album" in index.items
    assert items / "album" / "track.mp3" not in index.items
    assert all(not item.tags for item in index.items.values())


def test_scan_items_keys_by_canonical_path(tmp_path: Path) -> None:
    items, tags = _library(tmp_path)
    outside = tmp_path.resolve() / "elsewhere.txt"
    outside.write_text("x", encoding="utf-8")
    (items / "alias.txt").symlink_to(outside)

    index = DirectoryScanner().scan(items, tags)

    assert index.items[outside].display_name == "alias.txt"


def test_scan_items_skips_second_entry_for_same_target(tmp_path: Path) -> None:
    items, tags = _library(tmp_path)
    (items / "z-alias.txt").symlink_to(items / "a.txt")

    index = DirectoryScanner().scan(items, tags)

    assert index.items[items / "a.txt"].display_name == "a.txt"
    assert len(index.items) == 3


def test_scan_tags_reads_nested_tags_and_memberships(tmp_path: Path) -> None:
    items, tags = _library(tmp_path)
    _link(tags / "fruit" / "a.txt", items / "a.txt")
    _link(tags / "fruit" / "citrus" / "b.txt", items / "b.txt")
    (tags / "empty").mkdir()

    index = DirectoryScanner().scan(items, tags)

    names = {tag.display_name: tag for tag in index.tags.values()}
    assert set(names) == {"fruit", "fruit/citrus", "empty"}

    fruit = names["fruit"]
    citrus = names["fruit/citrus"]
    assert fruit.id == tags / "fruit"
    assert fruit.items == {items / "a.txt": tags / "fruit" / "a.txt"}
    assert citrus.items == {items / "b.txt": tags / "fruit" / "citrus" / "b.txt"}
    assert index.items[items / "a.txt"].tags == {fruit.id}
    assert index.items[items / "b.txt"].tags == {citrus.id}
    assert names["empty"].items == {}
    assert index.check_invariants() == []


def test_scan_tags_does_not_descend_into_linked_directory_items(tmp_path: Path) -> None:
    items, tags = _library(tmp_path)
    _link(tags / "music" / "album", items / "album")

    index = DirectoryScanner().scan(items, tags)

    assert {tag.display_name for tag in index.tags.values()} == {"music"}
    assert index.items[items / "album"].tags == {tags / "music"}


def test_scan_tags_ignores_unrelated_entries(tmp_path: Path) -> None:
    items, tags = _library(tmp_path)
    fruit = tags / "fruit"
    fruit.mkdir()
    (fruit / "broken.txt").symlink_to("../../all/missing.txt")
    untracked = tmp_path.resolve() / "untracked.txt"
    untracked.write_text("u", encoding="utf-8")
    (fruit / "untracked.txt").symlink_to(untracked)
    (fruit / "README").write_text("notes", encoding="utf-8")
    _link(tags / "a.txt", items / "a.txt")

    index = DirectoryScanner().scan(items, tags)

    assert index.tags[fruit].items == {}
    assert all(not item.tags for item in index.items.values())


def test_scan_tags_keeps_first_link_to_same_item(tmp_path: Path) -> None:
    items, tags = _library(tmp_path)
    _link(tags / "fruit" / "a.txt", items / "a.txt")
    _link(tags / "fruit" / "b-copy.txt", items / "a.txt")

    index = DirectoryScanner().scan(items, tags)

    assert index.tags[tags / "fruit"].items == {items / "a.txt": tags / "fruit" / "a.txt"}


def test_scan_uses_canonical_tag_ids_for_relative_roots(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    items, tags = _library(tmp_path)
    _link(tags / "fruit" / "a.txt", items / "a.txt")
    monkeypatch.chdir(tmp_path)

    index = DirectoryScanner().scan(Path("all"), Path("tags"))

    assert tags / "fruit" in index.tags
    assert index.tags[tags / "fruit"].display_name == "fruit"
    assert index.tags[tags / "fruit"].items[items / "a.txt"] == tags / "fruit" / "a.txt"


def test_scan_is_idempotent(tmp_path: Path) -> None:
    items, tags = _library(tmp_path)
    _link(tags / "fruit" / "a.txt", items / "a.txt")
    _link(tags / "fruit" / "b.txt", items / "b.txt")
    _link(tags / "todo" / "later" / "album", items / "album")

    scanner = DirectoryScanner()
    first = scanner.scan(items, tags)
    second = scanner.scan(items, tags)

    assert first == second
    assert first is not second


def test_scan_missing_items_root_raises(tmp_path: Path) -> None:
    _, tags = _library(tmp_path)

    with pytest.raises(ScanError):
        DirectoryScanner().scan(tmp_path / "nope", tags)


def test_scan_missing_tags_root_raises(tmp_path: Path) -> None:
    items, _ = _library(tmp_path)

    with pytest.raises(ScanError):
        DirectoryScanner().scan(items, tmp_path / "nope")


def test_scan_broken_item_link_is_fatal(tmp_path: Path) -> None:
    items, tags = _library(tmp_path)
    (items / "dangling").symlink_to(items / "missing")

    with pytest.raises(ScanError) as excinfo:
        DirectoryScanner().scan(items, tags)

    assert excinfo.value.path == items / "dangling"


def test_scan_rejects_tags_root_equal_to_items_root(tmp_path: Path) -> None:
    items, _ = _library(tmp_path)

    with pytest.raises(ScanError):
        DirectoryScanner().scan(items, items)
