"""Tests for creating tag directories."""

from __future__ import annotations

from pathlib import Path

import pytest

from symtag.index import TagIndex
from symtag.scanning import DirectoryScanner
from symtag.tagging import TagCreationError, TagCreator


def _library(tmp_path: Path) -> tuple[Path, Path, TagIndex]:
    root = tmp_path.resolve()
    items = root / "all"
    items.mkdir()
    (items / "a.txt").write_text("a", encoding="utf-8")
    tags = root / "tags"
    tags.mkdir()
    return items, tags, DirectoryScanner().scan(items, tags)


def test_create_tag_makes_directory_and_registers_it(tmp_path: Path) -> None:
    _, tags, index = _library(tmp_path)

    tag = TagCreator(index).create_tag(tags, "fruit")

    assert tag is not None
    assert (tags / "fruit").is_dir()
    assert tag.id == tags / "fruit"
    assert tag.display_name == "fruit"
    assert tag.items == {}
    assert index.tag(tag.id) is tag


def test_create_nested_tag_registers_every_level(tmp_path: Path) -> None:
    items, tags, index = _library(tmp_path)

    tag = TagCreator(index).create_tag(tags, "fruit/citrus/")

    assert tag is not None
    assert tag.display_name == "fruit/citrus"
    assert {t.display_name for t in index.tags.values()} == {"fruit", "fruit/citrus"}
    assert index == DirectoryScanner().scan(items, tags)


def test_create_existing_tag_returns_it(tmp_path: Path) -> None:
    _, tags, index = _library(tmp_path)
    creator = TagCreator(index)
    first = creator.create_tag(tags, "fruit")

    second = creator.create_tag(tags, "fruit")

    assert second is first
    assert len(index.tags) == 1


def test_create_tag_keeps_surrounding_whitespace(tmp_path: Path) -> None:
    items, tags, index = _library(tmp_path)

    tag = TagCreator(index).create_tag(tags, " todo ")

    assert tag is not None
    assert tag.display_name == " todo "
    assert (tags / " todo ").is_dir()
    assert not (tags / "todo").exists()
    assert index == DirectoryScanner().scan(items, tags)


@pytest.mark.parametrize("name", ["", "   ", "."])
def test_blank_name_is_a_no_op(tmp_path: Path, name: str) -> None:
    _, tags, index = _library(tmp_path)

    assert TagCreator(index).create_tag(tags, name) is None
    assert index.tags == {}
    assert list(tags.iterdir()) == []


@pytest.mark.parametrize("name", ["/etc/evil", "../outside", "fruit/../../outside"])
def test_names_escaping_the_tags_root_are_rejected(tmp_path: Path, name: str) -> None:
    _, tags, index = _library(tmp_path)

    with pytest.raises(TagCreationError):
        TagCreator(index).create_tag(tags, name)

    assert index.tags == {}
    assert not (tmp_path / "outside").exists()


def test_existing_file_blocks_creation(tmp_path: Path) -> None:
    _, tags, index = _library(tmp_path)
    (tags / "notes").write_text("not a directory", encoding="utf-8")

    with pytest.raises(TagCreationError):
        TagCreator(index).create_tag(tags, "notes")

    assert index.tags == {}


def test_symlinked_directory_is_not_a_tag(tmp_path: Path) -> None:
    items, tags, index = _library(tmp_path)
    (tags / "shortcut").symlink_to(items)

    with pytest.raises(TagCreationError):
        TagCreator(index).create_tag(tags, "shortcut")

    assert index.tags == {}
