"""In-memory index of items, tags, and their memberships."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

from .errors import IndexConflictError, TagIndexError, UnknownItemError, UnknownTagError
from .models import Item, Tag, TagState, printable_name


class TagIndex:
    """Hold items and tags keyed by canonical path.

    Memberships are only changed through :meth:`link` and :meth:`unlink`, which
    update both the tag and the item so the two views never disagree.
    """

    def __init__(self) -> None:
        self.items: dict[Path, Item] = {}
        self.tags: dict[Path, Tag] = {}

    def __len__(self) -> int:
        return len(self.items) + len(self.tags)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagIndex):
            return NotImplemented
        return self.items == other.items and self.tags == other.tags

    # Registration -----------------------------------------------------

    def add_item(self, item: Item) -> Item:
        """Register a new item.

        Args:
            item: Item to register.

        Returns:
            Item: The registered item.

        Raises:
            IndexConflictError: If the id is already an item or a tag.
        """
        if item.id in self.items:
            raise IndexConflictError(f"Item already registered: {item.id}")
        if item.id in self.tags:
            raise IndexConflictError(f"{item.id} is already registered as a tag")
        self.items[item.id] = item
        return item

    def add_tag(self, tag: Tag) -> Tag:
        """Register a new tag.

        Args:
            tag: Tag to register.

        Returns:
            Tag: The registered tag.

        Raises:
            IndexConflictError: If the id is already a tag or an item.
        """
        if tag.id in self.tags:
            raise IndexConflictError(f"Tag already registered: {tag.id}")
        if tag.id in self.items:
            raise IndexConflictError(f"{tag.id} is already registered as an item")
        for item_id in tag.items:
            self.item(item_id)
        self.tags[tag.id] = tag
        for item_id in tag.items:
            self.items[item_id].tags.add(tag.id)
        return tag

    # Lookups ----------------------------------------------------------

    def item(self, item_id: Path) -> Item:
        """Return the item registered under ``item_id``."""
        try:
            return self.items[item_id]
        except KeyError:
            raise UnknownItemError(item_id) from None

    def tag(self, tag_id: Path) -> Tag:
        """Return the tag registered under ``tag_id``."""
        try:
            return self.tags[tag_id]
        except KeyError:
            raise UnknownTagError(tag_id) from None

    def is_tagged(self, tag_id: Path, item_id: Path) -> bool:
        return item_id in self.tag(tag_id).items

    def sorted_items(self) -> list[Item]:
        """Return items ordered by display name."""
        return sorted(self.items.values(), key=lambda item: (item.display_name, str(item.id)))

    def sorted_tags(self) -> list[Tag]:
        """Return tags ordered by display name."""
        return sorted(self.tags.values(), key=lambda tag: (tag.display_name, str(tag.id)))

    def items_for_tag(self, tag_id: Path) -> Iterator[Item]:
        for item_id in self.tag(tag_id).items:
            yield self.items[item_id]

    # Membership -------------------------------------------------------

    def link(self, tag_id: Path, item_id: Path, link_path: Path) -> None:
        """Record that ``link_path`` tags ``item_id`` with ``tag_id``."""
        tag = self.tag(tag_id)
        item = self.item(item_id)
        tag.items[item_id] = link_path
        item.tags.add(tag_id)

    def unlink(self, tag_id: Path, item_id: Path) -> Path | None:
        """Drop the membership of ``item_id`` in ``tag_id``.

        Returns:
            Path | None: Symlink path that encoded the membership, if any.
        """
        tag = self.tag(tag_id)
        item = self.item(item_id)
        item.tags.discard(tag_id)
        return tag.items.pop(item_id, None)

    # Consistency ------------------------------------------------------

    def check_invariants(self) -> list[str]:
        """Verify the index against itself and the filesystem.

        Returns:
            list[str]: Human-readable descriptions of every violation found.
        """
        problems: list[str] = []

        for item_id in self.items.keys() & self.tags.keys():
            problems.append(f"{item_id} is registered both as an item and as a tag")

        for item in self.items.values():
            if item.id != Path(os.path.realpath(item.id)):
                problems.append(f"item id is not canonical: {item.id}")
            for tag_id in item.tags:
                tag = self.tags.get(tag_id)
                if tag is None:
                    problems.append(f"{item.display_name} references unknown tag {tag_id}")
                elif item.id not in tag.items:
                    problems.append(
                        f"{item.display_name} lists tag {tag.display_name} "
                        "but the tag does not list the item"
                    )

        for tag in self.tags.values():
            if tag.id != Path(os.path.realpath(tag.id)):
                problems.append(f"tag id is not canonical: {tag.id}")
            for item_id, link_path in tag.items.items():
                item = self.items.get(item_id)
                if item is None:
                    problems.append(f"{tag.display_name} references unknown item {item_id}")
                    continue
                if tag.id not in item.tags:
                    problems.append(
                        f"{tag.display_name} lists {item.display_name} "
                        "but the item does not list the tag"
                    )
                if link_path.parent != tag.id:
                    problems.append(f"{link_path} is not inside {tag.display_name}")
                if not link_path.is_symlink():
                    problems.append(f"{link_path} is not a symlink")
                    continue
                target = Path(os.path.realpath(link_path.parent / os.readlink(link_path)))
                if target != item_id:
                    problems.append(f"{link_path} resolves to {target}, expected {item_id}")

        return problems


__all__ = [
    "TagIndex",
    "Item",
    "Tag",
    "TagState",
    "printable_name",
    "TagIndexError",
    "UnknownItemError",
    "UnknownTagError",
    "IndexConflictError",
]
