"""Index data models for items, tags, and tag display state."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Dict, Set

from pydantic import BaseModel, Field


def printable_name(name: str) -> str:
    """Return ``name`` with bytes that are not valid UTF-8 shown as U+FFFD.

    File names decoded with ``surrogateescape`` cannot be written to a UTF-8
    terminal or JSON document; the raw name is still used on disk.
    """
    return os.fsencode(name).decode("utf-8", "replace")


class Item(BaseModel):
    """A taggable entry located directly under the items root.

    Attributes:
        id: Canonical path of the entry.
        display_name: Base name of the entry as found in the items root.
        tags: Canonical paths of the tags currently applied.
    """

    id: Path
    display_name: str
    tags: Set[Path] = Field(default_factory=set)

    @property
    def label(self) -> str:
        """Display name safe to print."""
        return printable_name(self.display_name)


class Tag(BaseModel):
    """A directory under the tags root whose symlinks encode membership.

    Attributes:
        id: Canonical path of the tag directory.
        display_name: Path of the directory relative to the tags root.
        items: Mapping of item id to the symlink that encodes membership.
    """

    id: Path
    display_name: str
    items: Dict[Path, Path] = Field(default_factory=dict)

    @property
    def label(self) -> str:
        """Display name safe to print."""
        return printable_name(self.display_name)


class TagState(str, Enum):
    """Membership of a tag across a selection of items."""

    OFF = "off"
    ON = "on"
    MIXED = "mixed"


__all__ = ["Item", "Tag", "TagState", "printable_name"]
