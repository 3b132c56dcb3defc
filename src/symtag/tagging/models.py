"""Result models for tagging operations."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field


class ToggleAction(str, Enum):
    """What a toggle did to the selection."""

    NONE = "none"
    ADDED = "added"
    REMOVED = "removed"
    MIXED = "mixed"


class ItemFailure(BaseModel):
    """A per-item failure that did not stop the rest of the batch.

    Attributes:
        item_id: Canonical path of the affected item.
        display_name: Name shown to the user for the item.
        message: Description of what went wrong.
    """

    item_id: Path
    display_name: str
    message: str


class ToggleResult(BaseModel):
    """Outcome of toggling one tag across a selection.

    Attributes:
        tag_id: Canonical path of the toggled tag.
        action: Whether the tag was added, removed, or left alone.
        changed: Items whose membership changed.
        failures: Items that could not be changed.
    """

    tag_id: Path
    action: ToggleAction
    changed: List[Path] = Field(default_factory=list)
    failures: List[ItemFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


__all__ = ["ToggleAction", "ItemFailure", "ToggleResult"]
