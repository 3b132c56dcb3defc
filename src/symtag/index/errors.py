"""Tag index errors."""

from __future__ import annotations

from pathlib import Path


class TagIndexError(Exception):
    """Base exception for tag index operations."""


class UnknownItemError(TagIndexError, KeyError):
    """Raised when an item id is not present in the index."""

    def __init__(self, item_id: Path | str) -> None:
        super().__init__(f"Unknown item: {item_id}")
        self.item_id = item_id

    def __str__(self) -> str:
        return self.args[0]


class UnknownTagError(TagIndexError, KeyError):
    """Raised when a tag id is not present in the index."""

    def __init__(self, tag_id: Path | str) -> None:
        super().__init__(f"Unknown tag: {tag_id}")
        self.tag_id = tag_id

    def __str__(self) -> str:
        return self.args[0]


class IndexConflictError(TagIndexError):
    """Raised when an id is registered twice or in both identity spaces."""
